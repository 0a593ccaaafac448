"""Command-line interface for quality-gate.

The Typer app is exported for use as the entry point:
    quality-gate = "qualitygate.cli.app:app"
"""

from qualitygate.cli.app import app

__all__ = ["app"]
