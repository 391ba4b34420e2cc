#!/usr/bin/env python3
"""Live check: fetch the version descriptor from every known source."""

from __future__ import annotations

import asyncio
import sys

from version_sync import RequestOptions, VersionSyncError, afetch_body, request_with_retry
from version_sync.cli import DEFAULT_VERSION_URL
from version_sync.manifest import parse_version_descriptor

SOURCES = {
    "github-raw": DEFAULT_VERSION_URL,
    "jsdelivr": "https://fastly.jsdelivr.net/gh/lyswhut/lx-music-desktop/publish/version.json",
}

passed: list[str] = []
failed: list[tuple[str, str]] = []


def ok(name: str, version: str) -> None:
    print(f"  PASS  {name}  -> {version}")
    passed.append(name)


def fail(name: str, err: Exception) -> None:
    msg = f"{type(err).__name__}: {err}"[:200]
    print(f"  FAIL  {name}  -> {msg}")
    failed.append((name, msg))


def check(name: str, body: object) -> None:
    if not isinstance(body, str):
        raise VersionSyncError(f"unexpected body type {type(body).__name__}")
    ok(name, parse_version_descriptor(body).version)


def main() -> None:
    options = RequestOptions(timeout=15.0)

    print("=== sync (with retry) ===")
    for name, url in SOURCES.items():
        try:
            check(name, request_with_retry(url, options=options))
        except Exception as e:
            fail(name, e)

    print("\n=== async ===")
    for name, url in SOURCES.items():
        try:
            check(f"{name} (async)", asyncio.run(afetch_body(url, options)))
        except Exception as e:
            fail(f"{name} (async)", e)

    print("\n" + "=" * 60)
    print(f"PASSED: {len(passed)}   FAILED: {len(failed)}")
    if failed:
        print("\nFailed sources:")
        for name, err in failed:
            print(f"  - {name}: {err}")
    print("=" * 60)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
