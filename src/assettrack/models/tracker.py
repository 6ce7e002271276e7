"""GPS tracker record."""

from __future__ import annotations

from pydantic import Field

from assettrack.models._base import EntityStatus, TrackBaseModel


class Tracker(TrackBaseModel):
    """A GPS tracker device.

    ``model`` is only set on creation; webhook payloads rarely carry it, so
    later merges leave it alone.
    """

    id: str = Field(min_length=1)
    name: str
    model: str = ""
    battery_level: int = Field(default=0, ge=0, le=100)
    status: EntityStatus = EntityStatus.ACTIVE
