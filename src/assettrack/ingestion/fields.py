"""Field resolution for loosely shaped webhook payloads.

Webhook sources disagree on key spelling and casing (``"Asset ID"``,
``"assetId"``, ``"asset_id"``) and sometimes nest details under a
sub-object (``{"tracker": {"id": ...}}``). Each logical field is described
by an ordered tuple of aliases from :mod:`assettrack._constants`; the first
alias that resolves to a non-``None`` value wins.

Resolution only looks at the top level of the (already unwrapped) payload,
plus the explicit nested paths listed as aliases. It never mutates its input.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict

from assettrack._constants import (
    ASSET_ID_ALIASES,
    ASSET_NAME_ALIASES,
    ASSET_STATUS_ALIASES,
    BATTERY_ALIASES,
    DEFAULT_WRAPPER_KEYS,
    LATITUDE_ALIASES,
    LINK_STATUS_ALIASES,
    LONGITUDE_ALIASES,
    TIMESTAMP_ALIASES,
    TRACKER_ID_ALIASES,
    TRACKER_NAME_ALIASES,
    TRACKER_STATUS_ALIASES,
    FieldAlias,
)
from assettrack.ingestion.normalize import safe_float, safe_str, to_enum, to_percent_battery
from assettrack.models import EntityStatus, LinkStatus


class KeyIndex:
    """Case-insensitive view over one mapping, built once.

    An exact key match is preferred; otherwise the first key (in insertion
    order) whose lower-cased form matches is used.
    """

    __slots__ = ("_data", "_folded")

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data
        self._folded: dict[str, Any] = {}
        for key, value in data.items():
            self._folded.setdefault(str(key).lower(), value)

    def get(self, key: str) -> Any:
        if key in self._data:
            return self._data[key]
        return self._folded.get(key.lower())


def _lookup(index: KeyIndex, alias: FieldAlias) -> Any:
    if isinstance(alias, str):
        return index.get(alias)

    head, *rest = alias
    value = index.get(head)
    for part in rest:
        if not isinstance(value, Mapping):
            return None
        value = KeyIndex(value).get(part)
    return value


def resolve_field(data: Any, aliases: Sequence[FieldAlias], *, index: KeyIndex | None = None) -> Any:
    """Return the value of the first alias present in *data*, else ``None``.

    A ``None`` value counts as absent and the next alias is tried.
    Pass a prebuilt *index* to avoid re-indexing *data* for every field.
    """
    if index is None:
        if not isinstance(data, Mapping):
            return None
        index = KeyIndex(data)
    for alias in aliases:
        value = _lookup(index, alias)
        if value is not None:
            return value
    return None


def unwrap_payload(payload: Any, wrapper_keys: Sequence[str] = DEFAULT_WRAPPER_KEYS) -> Any:
    """Descend into the first wrapper key whose value is an object."""
    if not isinstance(payload, Mapping):
        return payload
    for key in wrapper_keys:
        inner = payload.get(key)
        if isinstance(inner, Mapping):
            return inner
    return payload


class _FieldSet(BaseModel):
    model_config = ConfigDict(frozen=True)


class AssetFields(_FieldSet):
    """Asset values found in a payload; ``None`` means absent."""

    id: Any = None
    name: str | None = None
    status: EntityStatus | None = None


class TrackerFields(_FieldSet):
    """Tracker values found in a payload; ``None`` means absent."""

    id: Any = None
    name: str | None = None
    status: EntityStatus | None = None
    battery_level: int | None = None


class TrackingFields(_FieldSet):
    """Position and link values found in a payload.

    ``latitude``/``longitude`` are ``None`` unless they parsed as finite
    numbers. ``timestamp`` is the raw value; it is normalized when the
    position is recorded.
    """

    latitude: float | None = None
    longitude: float | None = None
    link_status: LinkStatus | None = None
    timestamp: Any = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


def _index_for(data: Any) -> KeyIndex | None:
    return KeyIndex(data) if isinstance(data, Mapping) else None


def resolve_asset_fields(data: Any, *, index: KeyIndex | None = None) -> AssetFields:
    index = index or _index_for(data)
    if index is None:
        return AssetFields()
    return AssetFields(
        id=resolve_field(data, ASSET_ID_ALIASES, index=index),
        name=safe_str(resolve_field(data, ASSET_NAME_ALIASES, index=index)),
        status=to_enum(EntityStatus, resolve_field(data, ASSET_STATUS_ALIASES, index=index)),
    )


def resolve_tracker_fields(data: Any, *, index: KeyIndex | None = None) -> TrackerFields:
    index = index or _index_for(data)
    if index is None:
        return TrackerFields()
    return TrackerFields(
        id=resolve_field(data, TRACKER_ID_ALIASES, index=index),
        name=safe_str(resolve_field(data, TRACKER_NAME_ALIASES, index=index)),
        status=to_enum(EntityStatus, resolve_field(data, TRACKER_STATUS_ALIASES, index=index)),
        battery_level=to_percent_battery(resolve_field(data, BATTERY_ALIASES, index=index)),
    )


def resolve_tracking_fields(data: Any, *, index: KeyIndex | None = None) -> TrackingFields:
    index = index or _index_for(data)
    if index is None:
        return TrackingFields()
    return TrackingFields(
        latitude=safe_float(resolve_field(data, LATITUDE_ALIASES, index=index)),
        longitude=safe_float(resolve_field(data, LONGITUDE_ALIASES, index=index)),
        link_status=to_enum(LinkStatus, resolve_field(data, LINK_STATUS_ALIASES, index=index)),
        timestamp=resolve_field(data, TIMESTAMP_ALIASES, index=index),
    )
