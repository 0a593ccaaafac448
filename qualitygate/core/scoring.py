"""Composite score aggregation.

Each check's weighted score is rounded on its own before the sum is taken.
Summing rounded parts can drift by a point or two from rounding the exact
sum; the composite is defined as the sum of the parts.
"""

from typing import Iterable

from qualitygate.core.models import GateReport, WeightedResult


def aggregate(results: Iterable[WeightedResult]) -> GateReport:
    """Fold weighted results into a GateReport.

    Args:
        results: Weighted results, in the order they should be reported

    Returns:
        GateReport with the composite score and finding counts
    """
    results = tuple(results)
    return GateReport(
        results=results,
        total_weighted_score=sum(r.weighted_score for r in results),
        total_errors=sum(len(r.errors) for r in results),
        total_warnings=sum(len(r.warnings) for r in results),
    )
