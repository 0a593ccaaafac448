"""Built-in checks and the default registry.

Registration order below is report order. Weights must sum to 100.
"""

from qualitygate.checks.error_patterns import DEFAULT_RULES, ErrorPatternsCheck, PatternRule
from qualitygate.checks.file_size import FileSizeCheck
from qualitygate.checks.source_tree import SourceTree
from qualitygate.checks.whitespace import WhitespaceCheck
from qualitygate.config.settings import GateSettings
from qualitygate.core.checks import CheckRegistry


def build_default_registry(settings: GateSettings) -> CheckRegistry:
    """Build the built-in registry for the configured source tree.

    Raises:
        RegistryError: If weight overrides break the sum-to-100 rule
    """
    tree = SourceTree.from_settings(settings)
    registry = CheckRegistry(
        [
            ErrorPatternsCheck(tree),
            WhitespaceCheck(tree),
            FileSizeCheck(tree, max_bytes=settings.max_file_bytes),
        ]
    )
    if settings.weights:
        registry = registry.with_weights(settings.weights)
    return registry


__all__ = [
    "DEFAULT_RULES",
    "ErrorPatternsCheck",
    "FileSizeCheck",
    "PatternRule",
    "SourceTree",
    "WhitespaceCheck",
    "build_default_registry",
]
