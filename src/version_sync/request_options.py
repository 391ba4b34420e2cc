"""Per-request options for the version-sync HTTP helper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

import httpx

Method = Literal["get", "head", "delete", "patch", "post", "put"]

METHODS = frozenset({"get", "head", "delete", "patch", "post", "put"})
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class RequestOptions:
    method: Method = "get"
    params: Mapping[str, str] | None = None
    headers: Mapping[str, str] | None = None
    data: bytes | str | None = None
    timeout: float | None = DEFAULT_TIMEOUT
    json: bool = False
    family: Literal[4, 6] | None = None
    client: httpx.Client | httpx.AsyncClient | None = None
