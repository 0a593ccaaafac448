"""Core gate pipeline: checks, runner, scoring, ratchet, fix mode, reporting.

Headless - nothing in this package writes to the terminal except
``reporter.render_console``, which is handed a Console by the caller.
"""
