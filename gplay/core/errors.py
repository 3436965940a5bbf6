"""Error codes for CLI exit status.

A publish run ends with exactly one exit code. The numeric values are part of
the CLI contract (CI pipelines branch on them) and must remain stable:
- 0: Success, the edit was committed
- 1: User error (bad options, invalid binary, broken metadata layout)
- 2: Authentication failed
- 3: Publish error (a remote step of the edit transaction failed)
- 4: I/O error (a required local input could not be read)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    AUTH_ERROR = 2
    PUBLISH_ERROR = 3
    IO_ERROR = 4

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
