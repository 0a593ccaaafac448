"""
quality-gate: weighted compliance checks with a score ratchet.

Runs a registry of pluggable checks over a source tree, folds their scores
into one composite score out of 100, and keeps a persisted high-water mark
so the score (or any single check) cannot silently regress.
"""

__version__ = "0.1.0"

from qualitygate.core.checks import Check, CheckRegistry, FunctionCheck, RegistryError
from qualitygate.core.gate import run_gate
from qualitygate.core.models import CheckOptions, CheckResult

__all__ = [
    "Check",
    "CheckOptions",
    "CheckRegistry",
    "CheckResult",
    "FunctionCheck",
    "RegistryError",
    "run_gate",
]
