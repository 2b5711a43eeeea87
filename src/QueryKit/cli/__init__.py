"""CLI package for QueryKit command orchestration.

Splits the ``build`` command into click wiring, a runner that owns logging
and error handling, and the command that builds and analyzes queries.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from QueryKit.cli.runner import CommandRunner
from QueryKit.cli.ui import cli


def main() -> None:
    """Run QueryKit CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
