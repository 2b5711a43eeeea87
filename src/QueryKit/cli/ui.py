"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click

from QueryKit.cli.runner import CommandRunner
from QueryKit.config import load_config


@click.group(help="QueryKit: build SQL and search queries from YAML and analyze them.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    show_default=True,
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
    """
    cfg = load_config(config_path)
    ctx.obj = cfg


@cli.command("build")
@click.pass_context
def build_cmd(ctx: click.Context) -> None:
    """Build the configured queries and print them with their analysis.

    All parameters are read from the YAML config passed to the root command.

    Args:
        ctx: Click context.

    Raises:
        click.Abort: When the build fails.
    """
    cfg = ctx.obj
    runner = CommandRunner(cfg)
    runner.run_build(action=ctx.command.name)
