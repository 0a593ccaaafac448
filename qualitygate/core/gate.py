"""Quality gate pipeline.

Wires the components together in a fixed order:

    load baseline → (fix pass) → verify pass → aggregate → compare → save → evaluate

This module is headless - no CLI or console dependencies.
"""

import logging

from qualitygate.core.checks import CheckRegistry
from qualitygate.core.fixer import FixOrchestrator
from qualitygate.core.models import GateOutcome
from qualitygate.core.ratchet import RatchetStore
from qualitygate.core.reporter import evaluate
from qualitygate.core.runner import CheckRunner
from qualitygate.core.scoring import aggregate

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 70


def run_gate(
    registry: CheckRegistry,
    store: RatchetStore,
    threshold: float = DEFAULT_THRESHOLD,
    fix: bool = False,
    jobs: int = 1,
    save_baseline: bool = True,
) -> GateOutcome:
    """Run the quality gate once.

    Args:
        registry: Checks to run, in report order
        store: Ratchet store for this invocation (read once, written at most once)
        threshold: Minimum composite score to pass
        fix: Run the mutate pass before verifying
        jobs: Worker threads for the verify pass
        save_baseline: Whether a passing-or-equal total may replace the baseline

    Returns:
        GateOutcome with the verify-pass report and the verdict
    """
    baseline = store.load()
    if baseline is None:
        logger.info("No ratchet baseline yet; this run establishes it")
    else:
        logger.debug(f"Ratchet baseline: {baseline.total_score} from {baseline.updated_at}")

    runner = CheckRunner(registry)
    results = FixOrchestrator(runner).run(fix=fix, jobs=jobs)

    report = aggregate(results)
    logger.info(
        f"Composite score {report.total_weighted_score}/100 "
        f"({report.total_errors} errors, {report.total_warnings} warnings)"
    )

    comparison = store.compare(report)
    if not comparison.passed:
        for regression in comparison.regressions:
            logger.warning(f"Ratchet regression: {regression}")

    if save_baseline:
        try:
            store.save(report)
        except OSError as e:
            logger.error(f"Could not write ratchet baseline: {e}")

    return evaluate(report, comparison, threshold)
