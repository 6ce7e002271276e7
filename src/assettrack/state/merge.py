"""Deterministic merge policy.

This module intentionally contains *no* payload parsing. Callers pass
already-normalized values where ``None`` means "absent"; merging here is
therefore simple: present values overwrite, absent values keep what was
stored (or a default on creation).

All functions are pure: they return new collections and never mutate the
ones passed in.
"""

from __future__ import annotations

from assettrack._constants import DEFAULT_ASSET_NAME, DEFAULT_HISTORY_LIMIT, DEFAULT_TRACKER_NAME
from assettrack.exceptions import LinkConflictError
from assettrack.models import Asset, AssetTrackerLink, EntityStatus, LinkStatus, Tracker, TrackerPosition
from assettrack.state.events import PhaseOutcome


def _present(**values: object) -> dict[str, object]:
    return {key: value for key, value in values.items() if value is not None}


def upsert_asset(
    assets: list[Asset],
    asset_id: str,
    *,
    name: str | None = None,
    status: EntityStatus | None = None,
) -> tuple[list[Asset], PhaseOutcome]:
    """Create the asset or merge name/status into the existing one.

    Description, type and base location are never supplied by payloads and
    are kept as stored.
    """
    result = list(assets)
    update = _present(name=name, status=status)
    for index, existing in enumerate(result):
        if existing.id == asset_id:
            result[index] = existing.model_copy(update=update)
            return result, PhaseOutcome.UPDATED

    result.append(Asset(id=asset_id, **{"name": DEFAULT_ASSET_NAME, **update}))
    return result, PhaseOutcome.CREATED


def upsert_tracker(
    trackers: list[Tracker],
    tracker_id: str,
    *,
    name: str | None = None,
    battery_level: int | None = None,
    status: EntityStatus | None = None,
) -> tuple[list[Tracker], PhaseOutcome]:
    """Create the tracker or merge name, battery level and status.

    ``model`` is only ever set on creation.
    """
    result = list(trackers)
    update = _present(name=name, battery_level=battery_level, status=status)
    for index, existing in enumerate(result):
        if existing.id == tracker_id:
            result[index] = existing.model_copy(update=update)
            return result, PhaseOutcome.UPDATED

    result.append(Tracker(id=tracker_id, **{"name": DEFAULT_TRACKER_NAME, **update}))
    return result, PhaseOutcome.CREATED


def upsert_link(
    links: list[AssetTrackerLink],
    asset_id: str,
    tracker_id: str,
    status: LinkStatus | None,
) -> tuple[list[AssetTrackerLink], PhaseOutcome, list[str]]:
    """Bind *tracker_id* to *asset_id*.

    Any link binding the same tracker to another asset is dropped first, so
    a tracker ends up in exactly one link. Re-submitting an existing pair
    only updates its status (when one is given).

    Returns the new links, the outcome and the asset ids the tracker was
    unbound from.
    """
    unbound = [link.asset_id for link in links if link.tracker_id == tracker_id and link.asset_id != asset_id]
    result = [link for link in links if link.tracker_id != tracker_id or link.asset_id == asset_id]

    for index, existing in enumerate(result):
        if existing.asset_id == asset_id and existing.tracker_id == tracker_id:
            if status is not None:
                result[index] = existing.model_copy(update={"status": status})
            return result, PhaseOutcome.UPDATED, unbound

    result.append(AssetTrackerLink(asset_id=asset_id, tracker_id=tracker_id, status=status or LinkStatus.ACTIVE))
    return result, PhaseOutcome.CREATED, unbound


def link_tracker(
    links: list[AssetTrackerLink],
    asset_id: str,
    tracker_id: str,
    status: LinkStatus = LinkStatus.ACTIVE,
    *,
    strict: bool = True,
) -> tuple[list[AssetTrackerLink], PhaseOutcome]:
    """Explicitly bind a tracker to an asset.

    With *strict* (the default) a tracker already bound to another asset is
    refused with :class:`~assettrack.exceptions.LinkConflictError`; without
    it the old binding is dropped like a webhook rebind would.
    """
    owner = next((link.asset_id for link in links if link.tracker_id == tracker_id and link.asset_id != asset_id), None)
    if owner is not None and strict:
        raise LinkConflictError(
            f"Tracker {tracker_id} is already linked to asset {owner}",
            tracker_id=tracker_id,
            asset_id=owner,
        )
    result, outcome, _ = upsert_link(links, asset_id, tracker_id, status)
    return result, outcome


def unlink_asset(links: list[AssetTrackerLink], asset_id: str) -> tuple[list[AssetTrackerLink], list[str]]:
    """Remove every link of *asset_id*; returns the new links and the freed tracker ids."""
    freed = [link.tracker_id for link in links if link.asset_id == asset_id]
    return [link for link in links if link.asset_id != asset_id], freed


def record_position(
    positions: dict[str, TrackerPosition],
    history: dict[str, list[TrackerPosition]],
    tracker_id: str,
    position: TrackerPosition,
    *,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> tuple[dict[str, TrackerPosition], dict[str, list[TrackerPosition]], PhaseOutcome]:
    """Overwrite the current position and append to the bounded history.

    Last write wins by processing order; timestamps are not compared.
    History keeps the most recent *limit* entries, oldest dropped first.
    """
    outcome = PhaseOutcome.UPDATED if tracker_id in positions else PhaseOutcome.CREATED

    next_positions = dict(positions)
    next_positions[tracker_id] = position

    entries = [*history.get(tracker_id, []), position]
    next_history = dict(history)
    next_history[tracker_id] = entries[-limit:]

    return next_positions, next_history, outcome
