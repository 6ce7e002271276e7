"""Base model and enums for stored records.

Every stored record inherits from :class:`TrackBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys kept in the store
  (``batteryLevel``, ``assetId``, ...) map to snake_case fields.
* ``extra="allow"`` so keys written by other consumers of the store
  survive a load/merge/save cycle.
* :meth:`TrackBaseModel.to_store` which dumps back to the stored shape.

Status enums are :class:`enum.StrEnum` so they serialize to the exact
strings the dashboard reads.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EntityStatus(enum.StrEnum):
    """Status shared by assets and trackers."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    MISSING = "Missing"
    MAINTENANCE = "Maintenance"


class AssetType(enum.StrEnum):
    MOVABLE = "Movable"
    STATIONERY = "Stationery"


class LinkStatus(enum.StrEnum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class TrackBaseModel(BaseModel):
    """Base for records persisted in the store."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_store(self) -> dict[str, Any]:
        """Dump to the JSON shape kept in the store (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)
