"""Oversized source files."""

from qualitygate.checks.source_tree import SourceTree
from qualitygate.core.checks import Check
from qualitygate.core.models import CheckOptions, CheckResult, round_half_up

# Files above this share of the limit get a warning
WARN_RATIO = 0.8


class FileSizeCheck(Check):
    """No source file exceeds ``max_bytes``; files close to it are warned about."""

    id = "file-size"
    weight = 20
    fixable = False

    def __init__(self, tree: SourceTree, max_bytes: int):
        self.tree = tree
        self.max_bytes = max_bytes

    def run(self, options: CheckOptions) -> CheckResult:
        files = self.tree.files()
        if not files:
            return CheckResult(
                name=self.id,
                score=100,
                warnings=("No source files found",),
                stats={"files": 0, "largest": 0},
            )

        errors = []
        warnings = []
        largest = 0
        checked = 0

        for path in files:
            try:
                size = path.stat().st_size
            except OSError as e:
                warnings.append(f"{self.tree.display(path)}: could not stat ({e})")
                continue

            checked += 1
            largest = max(largest, size)
            if size > self.max_bytes:
                errors.append(
                    f"{self.tree.display(path)}: {size} bytes (limit {self.max_bytes})"
                )
            elif size > self.max_bytes * WARN_RATIO:
                warnings.append(
                    f"{self.tree.display(path)}: {size} bytes, close to limit {self.max_bytes}"
                )

        score = round_half_up(100 * (checked - len(errors)) / checked) if checked else 100
        return CheckResult(
            name=self.id,
            score=score,
            errors=tuple(errors),
            warnings=tuple(warnings),
            stats={"files": len(files), "largest": largest, "limit": self.max_bytes},
        )
