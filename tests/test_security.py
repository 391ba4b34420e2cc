from __future__ import annotations

import pytest

from version_sync.exceptions import VersionSyncValidationError
from version_sync.security import sanitize_headers, validate_url


def test_sanitize_headers_redacts_credentials() -> None:
    headers = {"Authorization": "Bearer secret", "Accept": "application/json"}
    assert sanitize_headers(headers) == {"Authorization": "[REDACTED]", "Accept": "application/json"}


def test_validate_url_returns_parts() -> None:
    parsed = validate_url("https://example.com:8443/publish/version.json?ref=main")
    assert parsed.hostname == "example.com"
    assert parsed.port == 8443
    assert parsed.path == "/publish/version.json"
    assert parsed.query == "ref=main"


@pytest.mark.parametrize(
    "url",
    ["file:///etc/passwd", "https://example.com:99999/", "https://exa\x00mple.com", "example.com/path", "http://exa mple.com/"],
)
def test_validate_url_rejects(url: str) -> None:
    with pytest.raises(VersionSyncValidationError):
        validate_url(url)
