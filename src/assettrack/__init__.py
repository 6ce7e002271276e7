"""assettrack - Best-effort reconciliation of GPS tracker webhook payloads."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyassettrack")
except PackageNotFoundError:
    __version__ = "0+local"
from assettrack.config import TrackerConfig
from assettrack.dashboard import DashboardRow, build_dashboard_rows, tracking_log
from assettrack.exceptions import AssetTrackError, ConfigError, LinkConflictError, StoreError
from assettrack.ingestion.webhook import WebhookReconciler, process_tracking_webhook
from assettrack.models import (
    Asset,
    AssetTrackerLink,
    AssetType,
    EntityStatus,
    LinkStatus,
    Tracker,
    TrackerPosition,
)
from assettrack.state.events import PhaseOutcome, PhaseResult, ReconcilePhase, ReconcileResult
from assettrack.state.store import JsonFileStore, MemoryStore, Store

__all__ = [
    "__version__",
    "Asset",
    "AssetTrackError",
    "AssetTrackerLink",
    "AssetType",
    "ConfigError",
    "DashboardRow",
    "EntityStatus",
    "JsonFileStore",
    "LinkConflictError",
    "LinkStatus",
    "MemoryStore",
    "PhaseOutcome",
    "PhaseResult",
    "ReconcilePhase",
    "ReconcileResult",
    "Store",
    "StoreError",
    "Tracker",
    "TrackerConfig",
    "TrackerPosition",
    "WebhookReconciler",
    "build_dashboard_rows",
    "process_tracking_webhook",
    "tracking_log",
]
