"""Typed access to the five stored collections.

Each collection lives under its own store key and is read and written
independently. A missing key loads as an empty collection. A stored value
with the wrong shape raises :class:`~assettrack.exceptions.StoreError`
rather than being silently replaced, so nothing gets overwritten with an
empty collection.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from assettrack._constants import (
    ASSETS_KEY,
    LINKS_KEY,
    TRACKER_POSITIONS_KEY,
    TRACKERS_KEY,
    TRACKING_LOGS_KEY,
)
from assettrack.exceptions import StoreError
from assettrack.models import Asset, AssetTrackerLink, LinkStatus, TrackBaseModel, Tracker, TrackerPosition
from assettrack.state.merge import link_tracker, unlink_asset
from assettrack.state.store import Store

TModel = TypeVar("TModel", bound=TrackBaseModel)

_logger = logging.getLogger(__name__)


def _read(store: Store, key: str) -> Any:
    try:
        return store.get(key)
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"Failed to read {key}: {exc}", key=key) from exc


def _write(store: Store, key: str, value: Any) -> None:
    try:
        store.set(key, value)
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"Failed to write {key}: {exc}", key=key) from exc


def _validate(model_cls: type[TModel], key: str, item: Any) -> TModel:
    try:
        return model_cls.model_validate(item)
    except ValidationError as exc:
        raise StoreError(f"Invalid {model_cls.__name__} entry in {key}: {exc}", key=key) from exc


def _load_list(store: Store, key: str, model_cls: type[TModel]) -> list[TModel]:
    raw = _read(store, key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise StoreError(f"{key} must hold a list, got {type(raw).__name__}", key=key)
    return [_validate(model_cls, key, item) for item in raw]


def _load_map(store: Store, key: str) -> Mapping[str, Any]:
    raw = _read(store, key)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise StoreError(f"{key} must hold an object, got {type(raw).__name__}", key=key)
    return raw


class TrackingRepository:
    """Load/save helpers over a :class:`~assettrack.state.store.Store`."""

    def __init__(self, store: Store) -> None:
        self._store = store

    @property
    def store(self) -> Store:
        return self._store

    def load_assets(self) -> list[Asset]:
        return _load_list(self._store, ASSETS_KEY, Asset)

    def save_assets(self, assets: list[Asset]) -> None:
        _write(self._store, ASSETS_KEY, [asset.to_store() for asset in assets])

    def load_trackers(self) -> list[Tracker]:
        return _load_list(self._store, TRACKERS_KEY, Tracker)

    def save_trackers(self, trackers: list[Tracker]) -> None:
        _write(self._store, TRACKERS_KEY, [tracker.to_store() for tracker in trackers])

    def load_links(self) -> list[AssetTrackerLink]:
        return _load_list(self._store, LINKS_KEY, AssetTrackerLink)

    def save_links(self, links: list[AssetTrackerLink]) -> None:
        _write(self._store, LINKS_KEY, [link.to_store() for link in links])

    def load_positions(self) -> dict[str, TrackerPosition]:
        raw = _load_map(self._store, TRACKER_POSITIONS_KEY)
        return {
            str(tracker_id): _validate(TrackerPosition, TRACKER_POSITIONS_KEY, item)
            for tracker_id, item in raw.items()
        }

    def save_positions(self, positions: dict[str, TrackerPosition]) -> None:
        _write(
            self._store,
            TRACKER_POSITIONS_KEY,
            {tracker_id: position.to_store() for tracker_id, position in positions.items()},
        )

    def load_history(self) -> dict[str, list[TrackerPosition]]:
        raw = _load_map(self._store, TRACKING_LOGS_KEY)
        history: dict[str, list[TrackerPosition]] = {}
        for tracker_id, entries in raw.items():
            if not isinstance(entries, list):
                raise StoreError(
                    f"{TRACKING_LOGS_KEY}[{tracker_id!r}] must hold a list, got {type(entries).__name__}",
                    key=TRACKING_LOGS_KEY,
                )
            history[str(tracker_id)] = [_validate(TrackerPosition, TRACKING_LOGS_KEY, item) for item in entries]
        return history

    def save_history(self, history: dict[str, list[TrackerPosition]]) -> None:
        _write(
            self._store,
            TRACKING_LOGS_KEY,
            {tracker_id: [entry.to_store() for entry in entries] for tracker_id, entries in history.items()},
        )

    def link(
        self,
        asset_id: str,
        tracker_id: str,
        status: LinkStatus = LinkStatus.ACTIVE,
        *,
        strict: bool = True,
    ) -> AssetTrackerLink:
        """Bind a tracker to an asset and persist the links.

        Raises
        ------
        LinkConflictError
            If *strict* and the tracker is already bound to another asset.
        """
        links, _ = link_tracker(self.load_links(), asset_id, tracker_id, status, strict=strict)
        self.save_links(links)
        _logger.debug("Linked tracker=%s to asset=%s status=%s", tracker_id, asset_id, status)
        return next(item for item in links if item.asset_id == asset_id and item.tracker_id == tracker_id)

    def unlink(self, asset_id: str) -> list[str]:
        """Remove all links of an asset; returns the freed tracker ids."""
        links, freed = unlink_asset(self.load_links(), asset_id)
        if freed:
            self.save_links(links)
            _logger.debug("Unlinked asset=%s trackers=%s", asset_id, freed)
        return freed
