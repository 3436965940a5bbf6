"""Publishing to the Play store.

Layers:
- model / contracts / errors: typed entities, run inputs and failure kinds
- metadata / images / changelogs: offline resolution of the metadata tree
- binaries / auth: local inputs and credentials
- client / http / play_api: the remote edit surface
- orchestrator: sequencing of one edit transaction
"""

from __future__ import annotations
