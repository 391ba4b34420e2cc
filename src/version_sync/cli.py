"""Command-line entry point: refresh the manifest version from the remote descriptor."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import httpx

from .exceptions import VersionSyncError
from .manifest import sync_version
from .request_options import DEFAULT_TIMEOUT, RequestOptions

logger = logging.getLogger("version_sync")

DEFAULT_VERSION_URL = "https://raw.githubusercontent.com/lyswhut/lx-music-desktop/master/publish/version.json"
DEFAULT_MANIFEST = "package.json"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="version-sync",
        description="Copy the latest published version into the package manifest.",
    )
    parser.add_argument("--url", default=os.getenv("VERSION_SYNC_URL") or DEFAULT_VERSION_URL)
    parser.add_argument(
        "--manifest",
        type=Path,
        default=Path(os.getenv("VERSION_SYNC_MANIFEST") or DEFAULT_MANIFEST),
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=os.getenv("VERSION_SYNC_TIMEOUT") or str(DEFAULT_TIMEOUT),
        help="Per-attempt timeout in seconds; 0 disables it",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def _main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        version = sync_version(args.manifest, args.url, options=RequestOptions(timeout=args.timeout))
    except (httpx.HTTPError, httpx.InvalidURL, VersionSyncError) as exc:
        logger.error("Version sync failed: %s", exc)
        return 1

    print(f"{args.manifest}: version {version}")
    return 0


def main() -> None:
    raise SystemExit(_main())
