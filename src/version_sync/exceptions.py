"""Exceptions raised by version-sync."""

from __future__ import annotations


class VersionSyncError(Exception):
    """Base exception for all version-sync failures."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        timeout: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.timeout = timeout
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.url is None:
            return str(self.args[0])
        return f"{self.args[0]} ({self.url})"


class VersionSyncValidationError(VersionSyncError):
    """Raised when a URL or request option is invalid."""


class VersionSyncTimeoutError(VersionSyncError):
    """Raised when a request exceeds its configured timeout."""


class ManifestError(VersionSyncError):
    """Raised when the manifest or the version descriptor cannot be used."""
