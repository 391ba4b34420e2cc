"""Read, amend and rewrite the local package manifest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .exceptions import ManifestError
from .models import VersionDescriptor
from .request_options import RequestOptions
from .retry import request_with_retry

logger = logging.getLogger(__name__)


def parse_version_descriptor(version_info: str) -> VersionDescriptor:
    try:
        return VersionDescriptor.model_validate_json(version_info)
    except ValidationError as exc:
        raise ManifestError(f"Invalid version descriptor: {exc}", cause=exc) from exc


def _load_manifest(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}", cause=exc) from exc
    except ValueError as exc:
        raise ManifestError(f"Manifest {path} is not valid JSON: {exc}", cause=exc) from exc
    if not isinstance(payload, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")
    return payload


def update_manifest(path: str | Path, version_info: str) -> dict[str, Any]:
    """Store the raw descriptor and its version in the manifest at ``path``.

    Existing keys keep their order; ``versionInfo`` and ``version`` are
    appended when missing. The file is rewritten with 2-space indentation.
    """
    path = Path(path)
    manifest = _load_manifest(path)
    descriptor = parse_version_descriptor(version_info)

    manifest["versionInfo"] = version_info
    manifest["version"] = descriptor.version
    try:
        path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Cannot write manifest {path}: {exc}", cause=exc) from exc

    logger.info("Updated %s to version %s", path, descriptor.version)
    return manifest


def sync_version(manifest_path: str | Path, url: str, *, options: RequestOptions | None = None) -> str:
    """Fetch the descriptor at ``url`` and merge it into the manifest."""
    body = request_with_retry(url, options=options)
    if not isinstance(body, str):
        # A json=True option hands back the parsed value; the manifest keeps text.
        body = json.dumps(body, ensure_ascii=False)
    return update_manifest(manifest_path, body)["version"]
