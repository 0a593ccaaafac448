"""Value types shared by the gate pipeline.

Everything here is immutable once built. A check hands back a CheckResult,
the runner wraps it in a WeightedResult, the aggregator folds those into a
GateReport, and the reporter turns that plus the ratchet comparison into a
GateOutcome.

This module is headless - no CLI or console dependencies.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

MAX_SCORE = 100
CRASH_PREFIX = "Check crashed: "


def _utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    ``round()`` uses banker's rounding (``round(2.5) == 2``); weighted scores
    round 2.5 up to 3.
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class CheckOptions:
    """Options passed to every ``Check.run`` call.

    Attributes:
        fix: Whether the check may mutate the source tree
    """

    fix: bool = False


@dataclass(frozen=True)
class CheckResult:
    """Result of a single check invocation.

    Attributes:
        name: Display name of the check
        score: Percentage compliance, 0-100 (100 = fully compliant)
        errors: Blocking findings, in discovery order
        warnings: Advisory findings; never drive the score on their own
        stats: Free-form counters for reporting
        max_score: Always 100
    """

    name: str
    score: float
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    stats: Mapping[str, Any] = field(default_factory=dict)
    max_score: int = MAX_SCORE

    def __post_init__(self) -> None:
        if isinstance(self.score, bool) or not isinstance(self.score, (int, float)):
            raise TypeError(f"score must be a number, got {type(self.score).__name__}")
        if not 0 <= self.score <= MAX_SCORE:
            raise ValueError(f"score must be within 0..{MAX_SCORE}, got {self.score}")
        # Freeze caller-supplied containers
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "stats", MappingProxyType(dict(self.stats)))

    @classmethod
    def crashed(cls, name: Optional[str], message: str) -> "CheckResult":
        """Build the stand-in result for a check that raised."""
        return cls(
            name=name or "Unknown",
            score=0,
            errors=(f"{CRASH_PREFIX}{message}",),
        )

    @property
    def is_crash(self) -> bool:
        return any(e.startswith(CRASH_PREFIX) for e in self.errors)


@dataclass(frozen=True)
class WeightedResult:
    """A CheckResult paired with its weight in the composite score.

    Attributes:
        result: The untouched result returned by the check
        weight: Share of the composite score this check controls
        weighted_score: round_half_up(score / 100 * weight)
    """

    result: CheckResult
    weight: int
    weighted_score: int

    @classmethod
    def from_result(cls, result: CheckResult, weight: int) -> "WeightedResult":
        weighted = round_half_up(result.score / MAX_SCORE * weight)
        return cls(result=result, weight=weight, weighted_score=weighted)

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def score(self) -> float:
        return self.result.score

    @property
    def errors(self) -> tuple[str, ...]:
        return self.result.errors

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.result.warnings


@dataclass(frozen=True)
class GateReport:
    """Aggregated results of one verify pass.

    Attributes:
        results: Weighted results in registry order
        total_weighted_score: Sum of every weighted_score
        total_errors: Number of error lines across all checks
        total_warnings: Number of warning lines across all checks
    """

    results: tuple[WeightedResult, ...]
    total_weighted_score: int
    total_errors: int
    total_warnings: int


@dataclass(frozen=True)
class CheckBaseline:
    """Stored snapshot of a single check inside the ratchet baseline."""

    score: float
    errors: int = 0
    warnings: int = 0


@dataclass(frozen=True)
class RatchetBaseline:
    """Persisted high-water mark.

    Attributes:
        total_score: Composite score of the run that wrote this baseline
        updated_at: ISO-8601 timestamp of that write
        checks: Per-check snapshots keyed by check name
    """

    total_score: float
    updated_at: str
    checks: Mapping[str, CheckBaseline] = field(default_factory=dict)

    @classmethod
    def from_report(cls, report: GateReport, now: Optional[datetime] = None) -> "RatchetBaseline":
        checks = {
            r.name: CheckBaseline(score=r.score, errors=len(r.errors), warnings=len(r.warnings))
            for r in report.results
        }
        return cls(
            total_score=report.total_weighted_score,
            updated_at=(now or _utc_now()).isoformat(),
            checks=checks,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RatchetBaseline":
        """Parse the on-disk JSON shape.

        Raises:
            ValueError: If required keys are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"baseline must be a JSON object, got {type(data).__name__}")

        total = data.get("totalScore")
        if isinstance(total, bool) or not isinstance(total, (int, float)):
            raise ValueError("baseline is missing a numeric totalScore")

        raw_checks = data.get("checks", {})
        if not isinstance(raw_checks, dict):
            raise ValueError("baseline checks must be a JSON object")

        checks = {}
        for name, entry in raw_checks.items():
            if not isinstance(entry, dict) or not isinstance(entry.get("score"), (int, float)):
                raise ValueError(f"baseline entry for '{name}' has no numeric score")
            checks[name] = CheckBaseline(
                score=entry["score"],
                errors=int(entry.get("errors", 0)),
                warnings=int(entry.get("warnings", 0)),
            )

        return cls(
            total_score=total,
            updated_at=str(data.get("updatedAt", "")),
            checks=checks,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalScore": self.total_score,
            "updatedAt": self.updated_at,
            "checks": {
                name: {"score": c.score, "errors": c.errors, "warnings": c.warnings}
                for name, c in self.checks.items()
            },
        }


@dataclass(frozen=True)
class RatchetComparison:
    """Outcome of comparing a report against the stored baseline."""

    passed: bool
    regressions: tuple[str, ...] = ()


@dataclass(frozen=True)
class GateOutcome:
    """Final verdict of one gate invocation.

    ``passed`` is computed once, in ``reporter.evaluate``; every output
    format reads it from here.
    """

    report: GateReport
    threshold: float
    ratchet: RatchetComparison
    passed: bool
    timestamp: datetime = field(default_factory=_utc_now)

    @property
    def score(self) -> int:
        return self.report.total_weighted_score

    @property
    def threshold_passed(self) -> bool:
        return self.report.total_weighted_score >= self.threshold
