"""Check contract and the static check registry.

A check is a trusted, in-process analyzer over the local file tree. It
receives ``CheckOptions`` and returns a fresh ``CheckResult``. It must not
touch the tree when ``options.fix`` is False, and only checks declared
``fixable`` ever see ``fix=True``.

Usage:
    class NoTodos(Check):
        id = "no-todos"
        weight = 100

        def run(self, options: CheckOptions) -> CheckResult:
            ...

    registry = CheckRegistry([NoTodos()])

This module is headless - no CLI or console dependencies.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Mapping, Optional, Sequence

from qualitygate.core.models import CheckOptions, CheckResult

logger = logging.getLogger(__name__)

REQUIRED_TOTAL_WEIGHT = 100


class RegistryError(ValueError):
    """Raised when a set of checks cannot form a valid registry."""


class Check(ABC):
    """Base class for a registered check.

    Attributes:
        id: Stable identifier, also used as the crash-report name
        weight: Share of the composite score (all weights sum to 100)
        fixable: Whether the check can correct the tree in place
    """

    id: str = ""
    weight: int = 0
    fixable: bool = False

    @abstractmethod
    def run(self, options: CheckOptions) -> CheckResult:
        """Analyze the tree and return a fresh result.

        Args:
            options: Run options; ``fix`` is only True for fixable checks

        Returns:
            CheckResult describing the tree as it is after this call
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, weight={self.weight}, fixable={self.fixable})"


class FunctionCheck(Check):
    """Adapter that registers a plain ``run(options)`` callable as a check."""

    def __init__(
        self,
        id: str,
        weight: int,
        fn: Callable[[CheckOptions], CheckResult],
        fixable: bool = False,
    ):
        self.id = id
        self.weight = weight
        self.fixable = fixable
        self._fn = fn

    def run(self, options: CheckOptions) -> CheckResult:
        return self._fn(options)


class CheckRegistry:
    """Ordered, validated collection of checks.

    Registration order is report order. Scoring does not depend on it.

    Raises:
        RegistryError: On duplicate ids, invalid weights, or weights that do
            not add up to 100
    """

    def __init__(self, checks: Sequence[Check]):
        self._checks: tuple[Check, ...] = tuple(checks)
        self._validate()

    def _validate(self) -> None:
        if not self._checks:
            raise RegistryError("No checks registered")

        seen: set[str] = set()
        for check in self._checks:
            if not check.id:
                raise RegistryError(f"Check {check!r} has no id")
            if check.id in seen:
                raise RegistryError(f"Duplicate check id: {check.id}")
            seen.add(check.id)

            if isinstance(check.weight, bool) or not isinstance(check.weight, int):
                raise RegistryError(
                    f"Weight for '{check.id}' must be an integer, got {check.weight!r}"
                )
            if check.weight < 0:
                raise RegistryError(f"Weight for '{check.id}' must not be negative")

        total = sum(c.weight for c in self._checks)
        if total != REQUIRED_TOTAL_WEIGHT:
            raise RegistryError(
                f"Check weights must sum to {REQUIRED_TOTAL_WEIGHT}, got {total} "
                f"({', '.join(f'{c.id}={c.weight}' for c in self._checks)})"
            )

    def __iter__(self) -> Iterator[Check]:
        return iter(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    def get(self, check_id: str) -> Optional[Check]:
        for check in self._checks:
            if check.id == check_id:
                return check
        return None

    @property
    def ids(self) -> list[str]:
        return [c.id for c in self._checks]

    def with_weights(self, weights: Mapping[str, int]) -> "CheckRegistry":
        """Return a new registry with some weights replaced.

        Unknown ids are logged and ignored. The result is validated again, so
        the overrides must keep the total at 100.
        """
        unknown = sorted(set(weights) - set(self.ids))
        if unknown:
            logger.warning(f"Ignoring weight overrides for unknown checks: {unknown}")

        checks = []
        for check in self._checks:
            if check.id in weights:
                check = copy.copy(check)
                check.weight = weights[check.id]
            checks.append(check)
        return CheckRegistry(checks)
