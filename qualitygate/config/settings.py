"""Configuration for quality-gate.

Settings come from environment variables (prefix ``QUALITY_GATE_``) and an
optional ``.env`` file. CLI flags override them.

Environment Variables:
    QUALITY_GATE_THRESHOLD: Minimum composite score to pass (default: 70)
    QUALITY_GATE_RATCHET_FILE: Baseline path, relative to root (default: .quality-ratchet.json)
    QUALITY_GATE_ROOT: Source tree to analyze (default: current directory)
    QUALITY_GATE_JOBS: Threads for the verify pass (default: 1)
    QUALITY_GATE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: WARNING)
    QUALITY_GATE_WEIGHTS: JSON object overriding check weights.
        Example: '{"error-patterns": 40, "whitespace": 40, "file-size": 20}'
    QUALITY_GATE_SOURCE_DIRS: JSON list of directories to scan (default: ["src"])
    QUALITY_GATE_EXTENSIONS: JSON list of file suffixes to scan
    QUALITY_GATE_EXCLUDE_DIRS: JSON list of directory names to skip
    QUALITY_GATE_MAX_FILE_BYTES: Size limit for the file-size check (default: 500000)

Usage:
    >>> from qualitygate.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.threshold
    70.0
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EXTENSIONS = [".py", ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx", ".css", ".html"]
DEFAULT_EXCLUDE_DIRS = ["node_modules", "dist", "build", "__pycache__", ".venv", "venv"]


class GateSettings(BaseSettings):
    """Runtime configuration for a gate invocation."""

    threshold: float = 70.0
    ratchet_file: Path = Path(".quality-ratchet.json")
    root: Path = Path(".")
    jobs: int = 1
    log_level: str = "WARNING"

    weights: dict[str, int] = Field(default_factory=dict)

    source_dirs: list[str] = Field(default_factory=lambda: ["src"])
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    max_file_bytes: int = 500_000

    model_config = SettingsConfigDict(
        env_prefix="QUALITY_GATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Threshold is a percentage of the composite score."""
        if not (0 <= v <= 100):
            raise ValueError(f"QUALITY_GATE_THRESHOLD must be between 0 and 100, got: {v}")
        return v

    @field_validator("jobs")
    @classmethod
    def validate_jobs(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"QUALITY_GATE_JOBS must be at least 1, got: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"QUALITY_GATE_LOG_LEVEL must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("max_file_bytes")
    @classmethod
    def validate_max_file_bytes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"QUALITY_GATE_MAX_FILE_BYTES must be positive, got: {v}")
        return v

    def ratchet_path(self) -> Path:
        """Baseline file path; relative paths resolve against ``root``."""
        if self.ratchet_file.is_absolute():
            return self.ratchet_file
        return self.root / self.ratchet_file

    def scan_roots(self) -> list[Path]:
        """Directories the built-in checks walk.

        Falls back to ``root`` itself when none of ``source_dirs`` exist.
        """
        roots = [self.root / d for d in self.source_dirs if (self.root / d).is_dir()]
        return roots or [self.root]


def get_settings(**overrides) -> GateSettings:
    """Load settings from the environment, applying non-None overrides."""
    return GateSettings(**{k: v for k, v in overrides.items() if v is not None})
