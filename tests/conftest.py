"""Shared pytest fixtures for quality-gate tests."""

from pathlib import Path
from typing import Callable, Optional, Sequence

import pytest

from qualitygate.checks.source_tree import SourceTree
from qualitygate.core.checks import Check, FunctionCheck
from qualitygate.core.models import CheckOptions, CheckResult


def static_check(
    id: str,
    weight: int,
    score: float = 100,
    errors: Sequence[str] = (),
    warnings: Sequence[str] = (),
    fixable: bool = False,
    name: Optional[str] = None,
) -> FunctionCheck:
    """Create a check that always returns the same result.

    This is a shared helper; test modules import it directly.
    """

    def run(options: CheckOptions) -> CheckResult:
        return CheckResult(
            name=name or id,
            score=score,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    return FunctionCheck(id, weight, run, fixable=fixable)


class CrashingCheck(Check):
    """Check whose run() always raises."""

    def __init__(self, id: str, weight: int, message: str = "boom"):
        self.id = id
        self.weight = weight
        self.message = message
        self.calls = 0

    def run(self, options: CheckOptions) -> CheckResult:
        self.calls += 1
        raise RuntimeError(self.message)


class RecordingCheck(Check):
    """Check that records the options it was called with."""

    def __init__(self, id: str, weight: int, fixable: bool = False, score: float = 100):
        self.id = id
        self.weight = weight
        self.fixable = fixable
        self.score = score
        self.calls: list[CheckOptions] = []

    def run(self, options: CheckOptions) -> CheckResult:
        self.calls.append(options)
        return CheckResult(name=self.id, score=self.score)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write a source tree under tmp_path/src and return tmp_path.

    Usage:
        root = make_tree({"app.js": "debugger\\n"})
    """

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / "src" / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))
        return tmp_path

    return _make


class VanishingTree(SourceTree):
    """SourceTree that also lists files deleted after discovery."""

    def __init__(self, base: Path, missing: Sequence[str]):
        super().__init__(base=base, roots=[base / "src"])
        self.missing = [base / "src" / name for name in missing]

    def files(self) -> list[Path]:
        return sorted(super().files() + self.missing)
