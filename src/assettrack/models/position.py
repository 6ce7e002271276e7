"""Tracker position model."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import field_validator

from assettrack.ingestion.normalize import round_half_up, safe_float
from assettrack.models._base import TrackBaseModel


class TrackerPosition(TrackBaseModel):
    """A single coordinate sample for a tracker.

    Parameters
    ----------
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees.
    received_at : int
        Epoch milliseconds (``receivedAt`` in the store). Fractional values
        written by other producers are rounded to whole milliseconds.
    """

    lat: float
    lng: float
    received_at: int

    @field_validator("received_at", mode="before")
    @classmethod
    def _coerce_received_at(cls, value: Any) -> Any:
        parsed = safe_float(value)
        if parsed is None:
            return value
        return round_half_up(parsed)

    @property
    def received_datetime_utc(self) -> datetime:
        return datetime.fromtimestamp(self.received_at / 1000, tz=UTC)
