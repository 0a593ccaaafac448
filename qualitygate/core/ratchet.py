"""Score ratchet: a persisted high-water mark for the gate.

The baseline records the composite score and every check's score from the
best run so far. A run fails the ratchet if the composite drops below the
stored total, or if any check that has history scores lower than it did.
Per-check drops are not offset by gains elsewhere.

The baseline only moves up: ``save`` refuses to write a total lower than the
stored one, even for a run that failed. Within one store instance the file
is read once and written at most once.

Stored in: .quality-ratchet.json (configurable)

This module is headless - no CLI or console dependencies.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from qualitygate.core.models import GateReport, RatchetBaseline, RatchetComparison

logger = logging.getLogger(__name__)

_UNLOADED = object()


def _fmt(value: float) -> str:
    return f"{value:g}"


class RatchetStore(ABC):
    """Load, compare and save a ratchet baseline.

    Subclasses implement the raw storage; this class owns the comparison
    rules and the read-once / write-at-most-once discipline.
    """

    def __init__(self) -> None:
        self._baseline = _UNLOADED
        self._saved = False

    @abstractmethod
    def _read(self) -> Optional[RatchetBaseline]:
        """Return the stored baseline, or None. May raise on bad data."""

    @abstractmethod
    def _write(self, baseline: RatchetBaseline) -> None:
        """Persist the baseline."""

    def load(self) -> Optional[RatchetBaseline]:
        """Load the baseline, caching it for the life of this store.

        Any read or parse failure is treated as "no baseline yet".

        Returns:
            The stored baseline, or None
        """
        if self._baseline is _UNLOADED:
            try:
                self._baseline = self._read()
            except Exception as e:
                logger.warning(f"Could not load ratchet baseline, starting fresh: {e}")
                self._baseline = None
        return self._baseline

    def compare(self, report: GateReport) -> RatchetComparison:
        """Compare a report against the baseline.

        Args:
            report: Report of the current verify pass

        Returns:
            RatchetComparison; always passing when there is no baseline
        """
        baseline = self.load()
        if baseline is None:
            return RatchetComparison(passed=True, regressions=())

        regressions = []

        if report.total_weighted_score < baseline.total_score:
            regressions.append(
                f"Total score dropped from {_fmt(baseline.total_score)} "
                f"to {_fmt(report.total_weighted_score)}"
            )

        current = {r.name: r.score for r in report.results}
        for name, stored in baseline.checks.items():
            # Checks no longer registered have nothing to compare
            if name not in current:
                continue
            if current[name] < stored.score:
                regressions.append(
                    f"{name}: score dropped from {_fmt(stored.score)} to {_fmt(current[name])}"
                )

        return RatchetComparison(passed=not regressions, regressions=tuple(regressions))

    def save(self, report: GateReport, now: Optional[datetime] = None) -> bool:
        """Store the report as the new baseline if it is not a step down.

        Args:
            report: Report of the current verify pass
            now: Timestamp override (defaults to current UTC time)

        Returns:
            True if a new baseline was written

        Raises:
            RuntimeError: If this store already wrote a baseline
        """
        if self._saved:
            raise RuntimeError("Ratchet baseline already saved for this run")

        baseline = self.load()
        if baseline is not None and report.total_weighted_score < baseline.total_score:
            logger.info(
                f"Keeping ratchet baseline at {_fmt(baseline.total_score)} "
                f"(current run scored {_fmt(report.total_weighted_score)})"
            )
            return False

        new_baseline = RatchetBaseline.from_report(report, now=now)
        self._write(new_baseline)
        self._saved = True
        self._baseline = new_baseline
        logger.info(f"Ratchet baseline updated to {_fmt(new_baseline.total_score)}")
        return True


class FileRatchetStore(RatchetStore):
    """Ratchet baseline kept in a JSON file.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so concurrent readers never see a torn file.
    Concurrent writers are last-writer-wins; give parallel CI jobs separate
    paths.

    Usage:
        store = FileRatchetStore(Path(".quality-ratchet.json"))
        comparison = store.compare(report)
        store.save(report)
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)

    def _read(self) -> Optional[RatchetBaseline]:
        if not self.path.exists():
            logger.debug(f"No ratchet baseline at {self.path}")
            return None

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return RatchetBaseline.from_dict(data)

    def _write(self, baseline: RatchetBaseline) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(baseline.to_dict(), f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemoryRatchetStore(RatchetStore):
    """Ratchet baseline held in memory, for tests and dry runs."""

    def __init__(self, baseline: Optional[RatchetBaseline] = None):
        super().__init__()
        self.stored = baseline

    def _read(self) -> Optional[RatchetBaseline]:
        return self.stored

    def _write(self, baseline: RatchetBaseline) -> None:
        self.stored = baseline
