"""Publish Android binaries and store listings to Google Play."""

__version__ = "0.3.0"
