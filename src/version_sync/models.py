"""Typed model of the remote version descriptor."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VersionSyncModel(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class VersionDescriptor(VersionSyncModel):
    version: str
    desc: str | None = None
    # Entries are kept as published; only the top-level version is relied on.
    history: list[Any] = Field(default_factory=list)
