"""Reconcile outcomes.

Every reconciliation reports one :class:`PhaseResult` per phase so callers
can observe what happened without the entry point ever raising.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ReconcilePhase(StrEnum):
    ASSET = "asset"
    TRACKER = "tracker"
    LINK = "link"
    POSITION = "position"


PHASE_ORDER: tuple[ReconcilePhase, ...] = (
    ReconcilePhase.ASSET,
    ReconcilePhase.TRACKER,
    ReconcilePhase.LINK,
    ReconcilePhase.POSITION,
)


class PhaseOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class PhaseResult(BaseModel):
    """Outcome of a single reconcile phase."""

    model_config = ConfigDict(frozen=True)

    phase: ReconcilePhase
    outcome: PhaseOutcome
    entity_id: str | None = None
    reason: str | None = Field(default=None, description="Why the phase was skipped or failed, or merge detail.")

    @classmethod
    def skipped(cls, phase: ReconcilePhase, reason: str) -> PhaseResult:
        return cls(phase=phase, outcome=PhaseOutcome.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, phase: ReconcilePhase, reason: str, *, entity_id: str | None = None) -> PhaseResult:
        return cls(phase=phase, outcome=PhaseOutcome.FAILED, entity_id=entity_id, reason=reason)


class ReconcileResult(BaseModel):
    """Per-phase report for one reconciled payload."""

    model_config = ConfigDict(frozen=True)

    asset_id: str | None = None
    tracker_id: str | None = None
    phases: dict[ReconcilePhase, PhaseResult] = Field(default_factory=dict)

    def outcome(self, phase: ReconcilePhase) -> PhaseOutcome | None:
        result = self.phases.get(phase)
        return result.outcome if result is not None else None

    @property
    def failed_phases(self) -> list[ReconcilePhase]:
        return [phase for phase, result in self.phases.items() if result.outcome == PhaseOutcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed_phases
