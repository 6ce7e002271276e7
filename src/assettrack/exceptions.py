"""Custom exception hierarchy for assettrack."""

from __future__ import annotations


class AssetTrackError(Exception):
    """Base exception for all assettrack errors."""


class ConfigError(AssetTrackError):
    """Invalid or missing configuration."""


class StoreError(AssetTrackError):
    """Store read/write failure or a stored collection with an unexpected shape."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
    ) -> None:
        self.key = key
        super().__init__(message)


class LinkConflictError(AssetTrackError):
    """Tracker is already linked to a different asset."""

    def __init__(
        self,
        message: str,
        *,
        tracker_id: str = "",
        asset_id: str = "",
    ) -> None:
        self.tracker_id = tracker_id
        self.asset_id = asset_id
        super().__init__(message)
