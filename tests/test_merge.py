from __future__ import annotations

import pytest

from assettrack.exceptions import LinkConflictError
from assettrack.models import Asset, AssetTrackerLink, AssetType, EntityStatus, LinkStatus, Tracker, TrackerPosition
from assettrack.state.events import PhaseOutcome
from assettrack.state.merge import (
    link_tracker,
    record_position,
    unlink_asset,
    upsert_asset,
    upsert_link,
    upsert_tracker,
)


class TestUpsertAsset:
    def test_creates_with_defaults(self) -> None:
        assets, outcome = upsert_asset([], "a1")

        assert outcome == PhaseOutcome.CREATED
        assert assets == [Asset(id="a1", name="Asset")]
        assert assets[0].type == AssetType.MOVABLE
        assert assets[0].status == EntityStatus.ACTIVE

    def test_merge_preserves_absent_fields(self) -> None:
        existing = [
            Asset(id="a1", name="X", description="Blue", type=AssetType.STATIONERY, status=EntityStatus.ACTIVE)
        ]

        assets, outcome = upsert_asset(existing, "a1", status=EntityStatus.MAINTENANCE)

        assert outcome == PhaseOutcome.UPDATED
        assert assets == [
            Asset(id="a1", name="X", description="Blue", type=AssetType.STATIONERY, status=EntityStatus.MAINTENANCE)
        ]
        assert existing[0].status == EntityStatus.ACTIVE


class TestUpsertTracker:
    def test_model_is_kept_on_merge(self) -> None:
        existing = [Tracker(id="t1", name="GPS", model="TK-103", battery_level=90)]

        trackers, outcome = upsert_tracker(
            existing, "t1", name="GPS renamed", battery_level=40, status=EntityStatus.MISSING
        )

        assert outcome == PhaseOutcome.UPDATED
        assert trackers == [
            Tracker(id="t1", name="GPS renamed", model="TK-103", battery_level=40, status=EntityStatus.MISSING)
        ]

    def test_absent_battery_keeps_previous(self) -> None:
        trackers, _ = upsert_tracker([Tracker(id="t1", name="GPS", battery_level=85)], "t1")

        assert trackers[0].battery_level == 85

    def test_creates_with_defaults(self) -> None:
        trackers, outcome = upsert_tracker([], "gps1", name="GPS1")

        assert outcome == PhaseOutcome.CREATED
        assert trackers == [Tracker(id="gps1", name="GPS1", model="", battery_level=0, status=EntityStatus.ACTIVE)]


class TestUpsertLink:
    def test_rebinding_removes_previous_asset(self) -> None:
        existing = [
            AssetTrackerLink(asset_id="a1", tracker_id="t1"),
            AssetTrackerLink(asset_id="a3", tracker_id="t2"),
        ]

        links, outcome, unbound = upsert_link(existing, "a2", "t1", None)

        assert outcome == PhaseOutcome.CREATED
        assert unbound == ["a1"]
        assert links == [
            AssetTrackerLink(asset_id="a3", tracker_id="t2"),
            AssetTrackerLink(asset_id="a2", tracker_id="t1", status=LinkStatus.ACTIVE),
        ]
        assert [link.tracker_id for link in links].count("t1") == 1

    def test_same_pair_updates_status_in_place(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

        links, outcome, unbound = upsert_link(existing, "a1", "t1", LinkStatus.INACTIVE)

        assert outcome == PhaseOutcome.UPDATED
        assert unbound == []
        assert links == [AssetTrackerLink(asset_id="a1", tracker_id="t1", status=LinkStatus.INACTIVE)]

    def test_same_pair_without_status_keeps_status(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1", status=LinkStatus.INACTIVE)]

        links, _, _ = upsert_link(existing, "a1", "t1", None)

        assert links[0].status == LinkStatus.INACTIVE

    def test_asset_may_hold_several_trackers(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

        links, _, _ = upsert_link(existing, "a1", "t2", None)

        assert len(links) == 2


class TestRecordPosition:
    def test_overwrites_current_and_appends_history(self) -> None:
        first = TrackerPosition(lat=1, lng=1, received_at=200)
        second = TrackerPosition(lat=2, lng=2, received_at=100)

        positions, history, outcome = record_position({}, {}, "t1", first)
        assert outcome == PhaseOutcome.CREATED

        positions, history, outcome = record_position(positions, history, "t1", second)

        assert outcome == PhaseOutcome.UPDATED
        # Processing order wins, not the timestamp.
        assert positions == {"t1": second}
        assert history == {"t1": [first, second]}

    def test_history_is_bounded_fifo(self) -> None:
        history = {"t1": [TrackerPosition(lat=i, lng=i, received_at=i) for i in range(3)]}

        _, history, _ = record_position({}, history, "t1", TrackerPosition(lat=3, lng=3, received_at=3), limit=3)

        assert [entry.received_at for entry in history["t1"]] == [1, 2, 3]


class TestLinkTracker:
    def test_strict_refuses_tracker_owned_by_another_asset(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

        with pytest.raises(LinkConflictError) as excinfo:
            link_tracker(existing, "a2", "t1")

        assert excinfo.value.tracker_id == "t1"
        assert excinfo.value.asset_id == "a1"
        assert existing == [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

    def test_non_strict_moves_tracker(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

        links, outcome = link_tracker(existing, "a2", "t1", strict=False)

        assert outcome == PhaseOutcome.CREATED
        assert links == [AssetTrackerLink(asset_id="a2", tracker_id="t1")]

    def test_same_pair_sets_status(self) -> None:
        existing = [AssetTrackerLink(asset_id="a1", tracker_id="t1")]

        links, outcome = link_tracker(existing, "a1", "t1", LinkStatus.INACTIVE)

        assert outcome == PhaseOutcome.UPDATED
        assert links == [AssetTrackerLink(asset_id="a1", tracker_id="t1", status=LinkStatus.INACTIVE)]


def test_unlink_asset_removes_every_link_of_the_asset() -> None:
    existing = [
        AssetTrackerLink(asset_id="a1", tracker_id="t1"),
        AssetTrackerLink(asset_id="a2", tracker_id="t2"),
        AssetTrackerLink(asset_id="a1", tracker_id="t3"),
    ]

    links, freed = unlink_asset(existing, "a1")

    assert freed == ["t1", "t3"]
    assert links == [AssetTrackerLink(asset_id="a2", tracker_id="t2")]
    assert unlink_asset(links, "missing") == (links, [])
