from __future__ import annotations

import json
from pathlib import Path

import pytest

from assettrack.exceptions import LinkConflictError, StoreError
from assettrack.models import Asset, AssetTrackerLink, AssetType, EntityStatus, LinkStatus, Tracker, TrackerPosition
from assettrack.state.collections import TrackingRepository
from assettrack.state.store import JsonFileStore, MemoryStore


def test_memory_store_copies_values() -> None:
    store = MemoryStore()
    value = [{"id": "a1"}]

    store.set("dc.assets", value)
    value[0]["id"] = "changed"
    read = store.get("dc.assets")
    read[0]["id"] = "changed-again"

    assert store.get("dc.assets") == [{"id": "a1"}]
    assert store.get("missing") is None


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(path)

    assert store.get("dc.assets") is None
    store.set("dc.assets", [{"id": "a1"}])
    store.set("dc.links", [])

    assert json.loads(path.read_text(encoding="utf-8")) == {"dc.assets": [{"id": "a1"}], "dc.links": []}
    assert JsonFileStore(path).get("dc.assets") == [{"id": "a1"}]


def test_json_file_store_rejects_corrupt_document(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        JsonFileStore(path).get("dc.assets")

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileStore(path).get("dc.assets")


def test_json_file_store_rejects_unserializable_value(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "store.json")

    with pytest.raises(StoreError) as excinfo:
        store.set("dc.assets", {object()})

    assert excinfo.value.key == "dc.assets"


class TestRepository:
    def test_missing_keys_load_empty(self) -> None:
        repo = TrackingRepository(MemoryStore())

        assert repo.load_assets() == []
        assert repo.load_trackers() == []
        assert repo.load_links() == []
        assert repo.load_positions() == {}
        assert repo.load_history() == {}

    def test_assets_stored_in_camel_case(self) -> None:
        store = MemoryStore()
        repo = TrackingRepository(store)

        repo.save_assets([Asset(id="a1", name="Truck", base_location="Depot")])

        assert store.get("dc.assets") == [
            {
                "id": "a1",
                "name": "Truck",
                "description": "",
                "type": "Movable",
                "baseLocation": "Depot",
                "status": "Active",
            }
        ]

    def test_loads_partial_records_with_defaults(self) -> None:
        store = MemoryStore({"dc.assets": [{"id": "a1", "name": "X", "type": "Stationery", "status": "Missing"}]})

        (asset,) = TrackingRepository(store).load_assets()

        assert asset.type == AssetType.STATIONERY
        assert asset.status == EntityStatus.MISSING
        assert asset.description == ""

    def test_unknown_keys_survive_round_trip(self) -> None:
        store = MemoryStore({"dc.trackers": [{"id": "t1", "name": "GPS", "batteryLevel": 50, "imei": "123"}]})
        repo = TrackingRepository(store)

        repo.save_trackers(repo.load_trackers())

        assert store.get("dc.trackers")[0]["imei"] == "123"

    def test_positions_and_history(self) -> None:
        store = MemoryStore()
        repo = TrackingRepository(store)
        position = TrackerPosition(lat=1.0, lng=2.0, received_at=1000)

        repo.save_positions({"t1": position})
        repo.save_history({"t1": [position]})

        assert store.get("dc.trackerPositions") == {"t1": {"lat": 1.0, "lng": 2.0, "receivedAt": 1000}}
        assert repo.load_history() == {"t1": [position]}

    def test_fractional_received_at_rounds_to_milliseconds(self) -> None:
        store = MemoryStore({"dc.trackingLogs": {"t1": [{"lat": 1, "lng": 2, "receivedAt": 1_700_000_000_000.4}]}})

        history = TrackingRepository(store).load_history()

        assert history["t1"][0].received_at == 1_700_000_000_000

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("dc.assets", {"id": "a1"}),
            ("dc.trackers", [{"id": "t1", "name": "GPS", "batteryLevel": 500}]),
            ("dc.trackerPositions", ["not", "a", "map"]),
            ("dc.trackingLogs", {"t1": {"lat": 1}}),
        ],
    )
    def test_wrong_shape_raises(self, key: str, value: object) -> None:
        repo = TrackingRepository(MemoryStore({key: value}))
        loaders = {
            "dc.assets": repo.load_assets,
            "dc.trackers": repo.load_trackers,
            "dc.trackerPositions": repo.load_positions,
            "dc.trackingLogs": repo.load_history,
        }

        with pytest.raises(StoreError) as excinfo:
            loaders[key]()

        assert excinfo.value.key == key

    def test_backend_errors_are_wrapped(self) -> None:
        class BrokenStore:
            def get(self, key: str) -> object:
                raise OSError("disk gone")

            def set(self, key: str, value: object) -> None:
                raise OSError("disk gone")

        repo = TrackingRepository(BrokenStore())

        with pytest.raises(StoreError, match="disk gone"):
            repo.load_links()
        with pytest.raises(StoreError, match="disk gone"):
            repo.save_trackers([Tracker(id="t1", name="GPS")])

    def test_link_and_unlink_persist(self) -> None:
        store = MemoryStore({"dc.links": [{"assetId": "a1", "trackerId": "t1", "status": "Active"}]})
        repo = TrackingRepository(store)

        with pytest.raises(LinkConflictError):
            repo.link("a2", "t1")
        link = repo.link("a1", "t2", LinkStatus.INACTIVE)

        assert link == AssetTrackerLink(asset_id="a1", tracker_id="t2", status=LinkStatus.INACTIVE)
        assert [entry["trackerId"] for entry in store.get("dc.links")] == ["t1", "t2"]

        assert repo.unlink("a1") == ["t1", "t2"]
        assert store.get("dc.links") == []
        assert repo.unlink("a1") == []
