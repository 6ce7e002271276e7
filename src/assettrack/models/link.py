"""Asset/tracker binding."""

from __future__ import annotations

from pydantic import Field

from assettrack.models._base import LinkStatus, TrackBaseModel


class AssetTrackerLink(TrackBaseModel):
    """Binds one tracker to one asset.

    A tracker id appears in at most one link at a time; the link status is
    independent of the asset and tracker statuses.
    """

    asset_id: str = Field(min_length=1)
    tracker_id: str = Field(min_length=1)
    status: LinkStatus = LinkStatus.ACTIVE
