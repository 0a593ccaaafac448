"""Check runner with per-check crash isolation.

Runs every registered check, turns anything that escapes a check into a
zero-score result, and attaches weights. One misbehaving check never aborts
the gate or touches the results of the others.

Passes with ``fix=True`` always run sequentially: fixable checks write to the
same tree and must not race. A ``fix=False`` pass only reads, so it may be
spread over a thread pool with ``jobs > 1``; results still come back in
registry order.

This module is headless - no CLI or console dependencies.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor

from qualitygate.core.checks import Check, CheckRegistry
from qualitygate.core.models import CheckOptions, CheckResult, WeightedResult

logger = logging.getLogger(__name__)


class CheckRunner:
    """Execute a registry of checks and weight their results.

    Usage:
        runner = CheckRunner(registry)
        results = runner.run(CheckOptions(fix=False))
    """

    def __init__(self, registry: CheckRegistry):
        self.registry = registry

    def run(self, options: CheckOptions, jobs: int = 1) -> list[WeightedResult]:
        """Run every check once.

        Args:
            options: Global run options
            jobs: Worker threads for a read-only pass (ignored when fixing)

        Returns:
            Weighted results in registry order
        """
        checks = list(self.registry)

        if options.fix or jobs <= 1 or len(checks) <= 1:
            return [self.run_one(check, options) for check in checks]

        logger.debug(f"Running {len(checks)} checks on {jobs} threads")
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            return list(executor.map(lambda c: self.run_one(c, options), checks))

    def run_one(self, check: Check, options: CheckOptions) -> WeightedResult:
        """Run a single check, isolating any failure."""
        # Only fixable checks may mutate the tree
        check_options = options if check.fixable else CheckOptions(fix=False)

        start = time.time()
        try:
            result = check.run(check_options)
            if not isinstance(result, CheckResult):
                raise TypeError(
                    f"run() returned {type(result).__name__}, expected CheckResult"
                )
        except SystemExit as e:
            # sys.exit() inside a check must not end the gate process
            logger.error(f"Check '{check.id or 'Unknown'}' called sys.exit({e.code!r})")
            result = CheckResult.crashed(check.id, f"exited with code {e.code!r}")
        except Exception as e:
            logger.exception(f"Check '{check.id or 'Unknown'}' crashed")
            result = CheckResult.crashed(check.id, str(e) or type(e).__name__)

        duration_ms = int((time.time() - start) * 1000)
        logger.debug(
            f"Check '{check.id}' (fix={check_options.fix}) scored {result.score} "
            f"in {duration_ms}ms"
        )
        return WeightedResult.from_result(result, check.weight)
