"""Trailing whitespace and missing final newline.

Fixable: with ``fix=True`` offending files are rewritten in place (line
endings preserved) and the result describes the tree after the rewrite.
"""

import logging
import re
from pathlib import Path

from qualitygate.checks.source_tree import SourceTree
from qualitygate.core.checks import Check
from qualitygate.core.models import CheckOptions, CheckResult, round_half_up

logger = logging.getLogger(__name__)

# Spaces or tabs before \n, \r\n, a lone \r, or the end of the text.
# Shared by _problems() and normalize().
_TRAILING_WS = re.compile(r"[ \t]+(?=\r|\n|\Z)")

# Files listed individually before summarising the rest
MAX_FILES_LISTED = 20


def _problems(text: str) -> list[str]:
    problems = []
    dirty_lines = len(_TRAILING_WS.findall(text))
    if dirty_lines:
        problems.append(f"trailing whitespace on {dirty_lines} line(s)")
    if text and not text.endswith("\n"):
        problems.append("missing final newline")
    return problems


def normalize(text: str) -> str:
    """Strip trailing spaces and tabs from every line and end with a newline."""
    text = _TRAILING_WS.sub("", text)
    if text and not text.endswith("\n"):
        text += "\n"
    return text


class WhitespaceCheck(Check):
    """Every source file is free of trailing whitespace and ends with a newline."""

    id = "whitespace"
    weight = 30
    fixable = True

    def __init__(self, tree: SourceTree):
        self.tree = tree

    def run(self, options: CheckOptions) -> CheckResult:
        files = self.tree.files()
        if not files:
            return CheckResult(
                name=self.id,
                score=100,
                warnings=("No source files found",),
                stats={"files": 0, "dirtyFiles": 0, "fixedFiles": 0},
            )

        errors: list[str] = []
        warnings: list[str] = []
        dirty = 0
        fixed = 0
        checked = 0

        for path in files:
            try:
                text = self._read(path)
            except UnicodeDecodeError:
                warnings.append(f"{self.tree.display(path)}: not valid UTF-8, skipped")
                continue
            except OSError as e:
                logger.warning(f"Could not read {path}: {e}")
                warnings.append(f"{self.tree.display(path)}: could not read ({e})")
                continue

            checked += 1
            problems = _problems(text)
            if problems and options.fix:
                normalized = normalize(text)
                try:
                    self._write(path, normalized)
                except OSError as e:
                    warnings.append(f"{self.tree.display(path)}: could not fix ({e})")
                else:
                    logger.debug(f"Fixed whitespace in {path}")
                    fixed += 1
                    problems = _problems(normalized)

            if problems:
                dirty += 1
                if dirty <= MAX_FILES_LISTED:
                    errors.append(f"{self.tree.display(path)}: {', '.join(problems)}")

        if dirty > MAX_FILES_LISTED:
            errors.append(f"... and {dirty - MAX_FILES_LISTED} more")

        # Files that could not be read are reported as warnings, not scored
        score = round_half_up(100 * (checked - dirty) / checked) if checked else 100
        return CheckResult(
            name=self.id,
            score=score,
            errors=tuple(errors),
            warnings=tuple(warnings),
            stats={
                "files": len(files),
                "checkedFiles": checked,
                "dirtyFiles": dirty,
                "fixedFiles": fixed,
            },
        )

    @staticmethod
    def _read(path: Path) -> str:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    @staticmethod
    def _write(path: Path, text: str) -> None:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
