"""Asset record."""

from __future__ import annotations

from pydantic import Field

from assettrack.models._base import AssetType, EntityStatus, TrackBaseModel


class Asset(TrackBaseModel):
    """A physical asset that may carry a GPS tracker.

    Parameters
    ----------
    id : str
        Stable identifier (explicit ID or slug of the name).
    name : str
        Display name.
    description : str
        Free text; never supplied by webhook payloads.
    type : AssetType
        Movable or stationery.
    base_location : str
        Home location label (``baseLocation`` in the store).
    status : EntityStatus
        Current status.
    """

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    type: AssetType = AssetType.MOVABLE
    base_location: str = ""
    status: EntityStatus = EntityStatus.ACTIVE
