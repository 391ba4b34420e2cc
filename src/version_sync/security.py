"""URL validation and header redaction helpers."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import SplitResult, urlsplit

from .exceptions import VersionSyncValidationError


SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "proxy-authorization",
    "x-api-key",
}

SUPPORTED_SCHEMES = {"http", "https"}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def validate_url(url: str) -> SplitResult:
    """Parse an absolute http(s) URL, rejecting anything else."""
    if not isinstance(url, str) or "\x00" in url:
        raise VersionSyncValidationError("Invalid URL", url=str(url))
    try:
        parsed = urlsplit(url)
        # Accessing .port validates the port range.
        parsed.port
    except ValueError as exc:
        raise VersionSyncValidationError(f"Invalid URL: {exc}", url=url, cause=exc) from exc
    if not parsed.scheme or not parsed.netloc or not parsed.hostname:
        raise VersionSyncValidationError("URL must include scheme and host", url=url)
    if any(ch.isspace() for ch in parsed.netloc):
        raise VersionSyncValidationError("URL host must not contain whitespace", url=url)
    if parsed.scheme.lower() not in SUPPORTED_SCHEMES:
        raise VersionSyncValidationError(f"Unsupported URL scheme: {parsed.scheme}", url=url)
    return parsed
