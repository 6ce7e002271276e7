"""Record models kept in the store."""

from assettrack.models._base import AssetType, EntityStatus, LinkStatus, TrackBaseModel
from assettrack.models.asset import Asset
from assettrack.models.link import AssetTrackerLink
from assettrack.models.position import TrackerPosition
from assettrack.models.tracker import Tracker

__all__ = [
    "Asset",
    "AssetTrackerLink",
    "AssetType",
    "EntityStatus",
    "LinkStatus",
    "TrackBaseModel",
    "Tracker",
    "TrackerPosition",
]
