"""Two-pass fix mode.

A fix applied by one check can change what another check sees, so scores
from the pass that applied fixes are stale by construction. Fix mode
therefore runs:

1. Mutate pass - every check with ``fix=True`` (only fixable checks act on
   it), sequentially. Results are discarded.
2. Verify pass - every check again with ``fix=False``. Only these results are
   aggregated, ratcheted and reported.

This module is headless - no CLI or console dependencies.
"""

import logging

from qualitygate.core.models import CheckOptions, WeightedResult
from qualitygate.core.runner import CheckRunner

logger = logging.getLogger(__name__)


class FixOrchestrator:
    """Drive the optional mutate pass and the authoritative verify pass.

    Usage:
        results = FixOrchestrator(runner).run(fix=True)
    """

    def __init__(self, runner: CheckRunner):
        self.runner = runner

    def run(self, fix: bool = False, jobs: int = 1) -> list[WeightedResult]:
        """Run the gate passes.

        Args:
            fix: Whether to run the mutate pass first
            jobs: Worker threads for the verify pass

        Returns:
            Weighted results of the verify pass
        """
        if fix:
            self._mutate()

        return self.runner.run(CheckOptions(fix=False), jobs=jobs)

    def _mutate(self) -> None:
        fixable = [c.id for c in self.runner.registry if c.fixable]
        logger.info(f"Fix pass: {len(fixable)} fixable checks ({', '.join(fixable) or 'none'})")

        # Every fix must have returned before the verify pass starts
        results = self.runner.run(CheckOptions(fix=True), jobs=1)

        crashed = [r.name for r in results if r.result.is_crash]
        if crashed:
            logger.warning(f"Fix pass: checks crashed and may have left partial fixes: {crashed}")
