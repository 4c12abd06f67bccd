"""buildlight CLI — Typer-based command-line interface.

Provides the ``buildlight`` command: one optional positional argument,
the poll interval in whole seconds.  Credentials come from the
environment (or ``.env``); see ``buildlight.config``.
"""
