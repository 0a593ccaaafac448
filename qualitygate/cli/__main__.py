"""Entry point for `python -m qualitygate.cli` invocation.

This module enables running the CLI via:
    python -m qualitygate.cli [options] [command]

The help text will correctly show 'quality-gate' as the command name.
"""


def main():
    """Run the CLI with proper program name."""
    from qualitygate.cli.app import app

    app(prog_name="quality-gate")


if __name__ == "__main__":
    main()
