"""Read-side views over the reconciled store.

These are the queries the dashboard runs: one row per asset joined with
its link, tracker and current position, and a tracker's position log.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from assettrack.models import Asset, AssetTrackerLink, Tracker, TrackerPosition
from assettrack.state.collections import TrackingRepository
from assettrack.state.store import Store


class DashboardRow(BaseModel):
    """An asset with its linked tracker and that tracker's current position."""

    model_config = ConfigDict(frozen=True)

    asset: Asset
    link: AssetTrackerLink | None = None
    tracker: Tracker | None = None
    position: TrackerPosition | None = None


def build_dashboard_rows(store: Store) -> list[DashboardRow]:
    """Join assets with their first link, the linked tracker and its position.

    Positions are looked up by tracker id, then by tracker name for
    positions recorded before the tracker had an id of its own.
    """
    repo = TrackingRepository(store)
    trackers = {tracker.id: tracker for tracker in repo.load_trackers()}
    links = repo.load_links()
    positions = repo.load_positions()

    rows: list[DashboardRow] = []
    for asset in repo.load_assets():
        link = next((candidate for candidate in links if candidate.asset_id == asset.id), None)
        tracker = trackers.get(link.tracker_id) if link is not None else None
        position = None
        if tracker is not None:
            position = positions.get(tracker.id) or positions.get(tracker.name)
        rows.append(DashboardRow(asset=asset, link=link, tracker=tracker, position=position))
    return rows


def tracking_log(store: Store, tracker_id: str, *, tracker_name: str | None = None) -> list[TrackerPosition]:
    """Return a tracker's position history, newest first."""
    history = TrackingRepository(store).load_history()
    entries = history.get(tracker_id) or (history.get(tracker_name) if tracker_name else None) or []
    return sorted(entries, key=lambda entry: entry.received_at, reverse=True)
