"""Forbidden code patterns.

Each rule is a lesson from a past bug turned into a greppable pattern that
must not come back. A rule can require (or forbid) nearby context so that,
for example, ``innerHTML`` fed from ``error.message`` is only flagged when no
escaping helper appears within two lines.

Scoring deducts per rule with hits, not per hit, and scales the deduction
with the number of rules so adding rules does not make the score harsher:

    score = max(0, 100 - rules_with_hits * max(5, 100 // len(rules)))
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from qualitygate.checks.source_tree import SourceTree, read_text
from qualitygate.core.checks import Check
from qualitygate.core.models import CheckOptions, CheckResult

logger = logging.getLogger(__name__)

# Lines on each side searched for context patterns
CONTEXT_LINES = 2
# Locations listed per rule before summarising the rest
MAX_LOCATIONS = 3


@dataclass(frozen=True)
class PatternRule:
    """A forbidden pattern.

    Attributes:
        id: Short identifier shown in findings (e.g., 'ERR-EVAL')
        name: What the rule guards against
        pattern: Regex matched against each line
        hint: Suggested fix appended to every location
        requires_context: Only flag when this matches nearby lines
        allowed_context: Never flag when this matches nearby lines
    """

    id: str
    name: str
    pattern: re.Pattern
    hint: str
    requires_context: Optional[re.Pattern] = None
    allowed_context: Optional[re.Pattern] = None

    def scan(self, display: str, lines: list[str]) -> list[str]:
        issues = []
        for i, line in enumerate(lines):
            if not self.pattern.search(line):
                continue
            if self.requires_context or self.allowed_context:
                context = " ".join(lines[max(0, i - CONTEXT_LINES):i + CONTEXT_LINES + 1])
                if self.requires_context and not self.requires_context.search(context):
                    continue
                if self.allowed_context and self.allowed_context.search(context):
                    continue
            issues.append(f"{display}:{i + 1} - {self.hint}")
        return issues


DEFAULT_RULES: list[PatternRule] = [
    PatternRule(
        id="ERR-DEBUGGER",
        name="Leftover debugger statements",
        pattern=re.compile(r"^\s*debugger\s*;?\s*$|\bbreakpoint\(\)|\bpdb\.set_trace\(\)"),
        hint="remove debugger statement",
    ),
    PatternRule(
        id="ERR-XSS-ERROR",
        name="innerHTML built from an error message",
        pattern=re.compile(r"\.innerHTML\s*\+?=.*\b(?:error|err)\.message"),
        hint="innerHTML with error.message (use textContent)",
        allowed_context=re.compile(r"textContent|escapeHtml|escapeHTML|DOMPurify|sanitize"),
    ),
    PatternRule(
        id="ERR-WEAK-RANDOM",
        name="Math.random() used for security identifiers",
        pattern=re.compile(r"Math\.random\(\)"),
        hint="Math.random() for a security ID (use crypto.getRandomValues)",
        requires_context=re.compile(
            r"sos|emergency|session.?id|auth.?token|api.?key|tracking.?id", re.IGNORECASE
        ),
    ),
    PatternRule(
        id="ERR-EVAL",
        name="Dynamic code evaluation",
        pattern=re.compile(r"(?<![\w.])eval\s*\("),
        hint="eval() call",
    ),
    PatternRule(
        id="ERR-MERGE-MARKER",
        name="Unresolved merge conflict markers",
        pattern=re.compile(r"^(?:<{7}|>{7})(?: |$)|^={7}$"),
        hint="merge conflict marker",
    ),
]


class ErrorPatternsCheck(Check):
    """Fail on forbidden code patterns anywhere in the source tree."""

    id = "error-patterns"
    weight = 50
    fixable = False

    def __init__(self, tree: SourceTree, rules: Optional[Sequence[PatternRule]] = None):
        self.tree = tree
        self.rules = list(DEFAULT_RULES if rules is None else rules)

    def run(self, options: CheckOptions) -> CheckResult:
        files = self.tree.files()
        if not files or not self.rules:
            return CheckResult(
                name=self.id,
                score=100,
                warnings=("No source files or rules to scan - skipping pattern checks",),
                stats={"patternsRun": 0, "issuesFound": 0},
            )

        errors: list[str] = []
        warnings: list[str] = []

        sources: list[tuple[str, list[str]]] = []
        for path in files:
            display = self.tree.display(path)
            try:
                sources.append((display, read_text(path).splitlines()))
            except OSError as e:
                logger.warning(f"Could not read {path}: {e}")
                warnings.append(f"{display}: could not read ({e})")

        issues_found = 0
        rules_with_issues = 0

        for rule in self.rules:
            try:
                issues = [issue for display, lines in sources for issue in rule.scan(display, lines)]
            except Exception as e:
                logger.warning(f"Pattern rule {rule.id} failed: {e}")
                warnings.append(f"[{rule.id}] Check failed: {e}")
                continue

            if issues:
                issues_found += len(issues)
                rules_with_issues += 1
                errors.append(f"[{rule.id}] {rule.name}: {len(issues)} issue(s)")
                errors.extend(f"  {issue}" for issue in issues[:MAX_LOCATIONS])
                if len(issues) > MAX_LOCATIONS:
                    errors.append(f"  ... and {len(issues) - MAX_LOCATIONS} more")

        deduction = max(5, 100 // len(self.rules))
        score = max(0, 100 - rules_with_issues * deduction)

        return CheckResult(
            name=self.id,
            score=score,
            errors=tuple(errors),
            warnings=tuple(warnings),
            stats={"patternsRun": len(self.rules), "issuesFound": issues_found, "files": len(files)},
        )
