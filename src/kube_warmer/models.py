"""Pydantic v2 models for warm loop results."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# "cancelled": the loop observed the shutdown signal and returned.
# "construction_failed": the API handle could not be built; the loop never ticked.
LoopOutcome = Literal["cancelled", "construction_failed"]


class LoopResult(BaseModel):
    """What one warm loop did before it exited."""

    context: str
    outcome: LoopOutcome
    probes_sent: int = 0
    probe_failures: int = 0
    error: str | None = None


class WarmingSummary(BaseModel):
    """Aggregate of every warm loop joined by the coordinator."""

    contexts: int = 0
    cancelled: int = 0
    construction_failed: int = 0
    crashed: int = 0
    results: list[LoopResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, contexts: int, results: list[LoopResult], crashed: int = 0) -> WarmingSummary:
        return cls(
            contexts=contexts,
            cancelled=sum(1 for r in results if r.outcome == "cancelled"),
            construction_failed=sum(1 for r in results if r.outcome == "construction_failed"),
            crashed=crashed,
            results=results,
        )
