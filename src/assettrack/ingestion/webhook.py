"""Webhook payload reconciliation.

This module owns the best-effort path that turns one arbitrary webhook
payload into asset, tracker, link and position records:

1. unwrap the payload envelope (``{"Output": {...}}``)
2. resolve asset, tracker and tracking fields
3. upsert asset, tracker, link and position/history, in that order,
   persisting each collection right after its phase

The entry point never raises. Each phase reports a
:class:`~assettrack.state.events.PhaseResult`; when one fails (typically a
store error) the remaining phases are skipped. Collections already written
stay written; there is no rollback across collections.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from assettrack._redact import redact_for_log
from assettrack.config import TrackerConfig
from assettrack.ingestion.fields import (
    AssetFields,
    KeyIndex,
    TrackerFields,
    TrackingFields,
    resolve_asset_fields,
    resolve_tracker_fields,
    resolve_tracking_fields,
    unwrap_payload,
)
from assettrack.ingestion.normalize import derive_identifier, normalize_received_at
from assettrack.models import TrackerPosition
from assettrack.state.collections import TrackingRepository
from assettrack.state.events import PHASE_ORDER, PhaseResult, ReconcilePhase, ReconcileResult
from assettrack.state.merge import record_position, upsert_asset, upsert_link, upsert_tracker
from assettrack.state.store import Store

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _decode(payload: Any) -> Any:
    if isinstance(payload, bytes | bytearray):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            _logger.debug("Webhook payload is not valid JSON; nothing to reconcile")
            return None
    return payload


class WebhookReconciler:
    """Reconcile webhook payloads into a store.

    Calls to :meth:`reconcile` on the same instance are serialized, so
    pollers or HTTP handlers running on several threads should share one
    reconciler per store.

    Parameters
    ----------
    store
        Key-value store holding the five collections. Its lifecycle is owned
        by the caller.
    config
        Wrapper keys and history limit. Defaults to :class:`TrackerConfig`.
    clock
        Source of "now" used when a payload carries no usable timestamp.
    """

    def __init__(
        self,
        store: Store,
        *,
        config: TrackerConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = TrackingRepository(store)
        self._config = config or TrackerConfig()
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def config(self) -> TrackerConfig:
        return self._config

    def reconcile(self, payload: Any) -> ReconcileResult:
        """Reconcile one payload. Never raises."""
        with self._lock:
            try:
                return self._reconcile(payload)
            except Exception:
                _logger.warning("Webhook reconciliation aborted by an unexpected error", exc_info=True)
                return ReconcileResult(
                    phases={phase: PhaseResult.failed(phase, "unexpected error") for phase in PHASE_ORDER}
                )

    def _reconcile(self, payload: Any) -> ReconcileResult:
        root = unwrap_payload(_decode(payload), self._config.wrapper_keys)
        index = KeyIndex(root) if isinstance(root, Mapping) else None

        asset_fields = resolve_asset_fields(root, index=index)
        tracker_fields = resolve_tracker_fields(root, index=index)
        tracking = resolve_tracking_fields(root, index=index)

        asset_id = derive_identifier(asset_fields.id, asset_fields.name)
        tracker_id = derive_identifier(tracker_fields.id, tracker_fields.name)

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "Reconciling webhook payload asset=%s tracker=%s payload=%s",
                asset_id,
                tracker_id,
                redact_for_log(payload),
            )

        steps: tuple[tuple[ReconcilePhase, Callable[[], PhaseResult]], ...] = (
            (ReconcilePhase.ASSET, lambda: self._apply_asset(asset_id, asset_fields)),
            (ReconcilePhase.TRACKER, lambda: self._apply_tracker(tracker_id, tracker_fields)),
            (ReconcilePhase.LINK, lambda: self._apply_link(asset_id, tracker_id, tracking)),
            (ReconcilePhase.POSITION, lambda: self._apply_position(tracker_id, tracking)),
        )

        phases: dict[ReconcilePhase, PhaseResult] = {}
        aborted = False
        for phase, step in steps:
            if aborted:
                phases[phase] = PhaseResult.skipped(phase, "aborted after an earlier phase failed")
                continue
            try:
                phases[phase] = step()
            except Exception as exc:
                _logger.warning("Webhook %s phase failed: %s", phase, exc)
                _logger.debug("Webhook %s phase failure", phase, exc_info=True)
                phases[phase] = PhaseResult.failed(phase, str(exc))
                aborted = True

        return ReconcileResult(asset_id=asset_id, tracker_id=tracker_id, phases=phases)

    def _apply_asset(self, asset_id: str | None, fields: AssetFields) -> PhaseResult:
        if asset_id is None:
            return PhaseResult.skipped(ReconcilePhase.ASSET, "payload has no asset id or name")
        assets, outcome = upsert_asset(self._repo.load_assets(), asset_id, name=fields.name, status=fields.status)
        self._repo.save_assets(assets)
        return PhaseResult(phase=ReconcilePhase.ASSET, outcome=outcome, entity_id=asset_id)

    def _apply_tracker(self, tracker_id: str | None, fields: TrackerFields) -> PhaseResult:
        if tracker_id is None:
            return PhaseResult.skipped(ReconcilePhase.TRACKER, "payload has no tracker id or name")
        trackers, outcome = upsert_tracker(
            self._repo.load_trackers(),
            tracker_id,
            name=fields.name,
            battery_level=fields.battery_level,
            status=fields.status,
        )
        self._repo.save_trackers(trackers)
        return PhaseResult(phase=ReconcilePhase.TRACKER, outcome=outcome, entity_id=tracker_id)

    def _apply_link(self, asset_id: str | None, tracker_id: str | None, tracking: TrackingFields) -> PhaseResult:
        if asset_id is None or tracker_id is None:
            return PhaseResult.skipped(ReconcilePhase.LINK, "link needs both an asset and a tracker id")
        links, outcome, unbound = upsert_link(self._repo.load_links(), asset_id, tracker_id, tracking.link_status)
        self._repo.save_links(links)
        reason = None
        if unbound:
            reason = f"tracker {tracker_id} unbound from {', '.join(unbound)}"
            _logger.debug("Rebinding %s", reason)
        return PhaseResult(
            phase=ReconcilePhase.LINK,
            outcome=outcome,
            entity_id=f"{asset_id}:{tracker_id}",
            reason=reason,
        )

    def _apply_position(self, tracker_id: str | None, tracking: TrackingFields) -> PhaseResult:
        if tracker_id is None:
            return PhaseResult.skipped(ReconcilePhase.POSITION, "payload has no tracker id or name")
        if tracking.latitude is None or tracking.longitude is None:
            return PhaseResult.skipped(ReconcilePhase.POSITION, "payload has no numeric coordinates")

        now_ms = int(self._clock().timestamp() * 1000)
        position = TrackerPosition(
            lat=tracking.latitude,
            lng=tracking.longitude,
            received_at=normalize_received_at(tracking.timestamp, now_ms),
        )
        positions, history, outcome = record_position(
            self._repo.load_positions(),
            self._repo.load_history(),
            tracker_id,
            position,
            limit=self._config.history_limit,
        )
        self._repo.save_positions(positions)
        self._repo.save_history(history)
        return PhaseResult(phase=ReconcilePhase.POSITION, outcome=outcome, entity_id=tracker_id)


def process_tracking_webhook(
    payload: Any,
    store: Store,
    *,
    config: TrackerConfig | None = None,
    clock: Callable[[], datetime] = _utcnow,
) -> ReconcileResult:
    """Reconcile a single payload into *store*. Never raises.

    Convenience wrapper around :class:`WebhookReconciler` for one-off calls.
    Concurrent callers should share a reconciler instead so their calls are
    serialized.
    """
    return WebhookReconciler(store, config=config, clock=clock).reconcile(payload)
