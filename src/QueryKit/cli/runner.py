"""Command runner for coordinating CLI execution.

Manages logging configuration, output writer creation and error handling
for command execution.
"""

from __future__ import annotations

import click

from QueryKit.cli.commands import BuildCommand
from QueryKit.config import AppConfig
from QueryKit.renderers import create_output_writer
from QueryKit.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution.

    Handles logging configuration, component creation and error handling
    for CLI commands.
    """

    def __init__(self, config: AppConfig) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
        """
        self.config = config

    def run_build(self, action: str) -> None:
        """Execute build command.

        Args:
            action: The CLI command name (e.g., 'build').

        Raises:
            click.Abort: When the build fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            output_writer = create_output_writer(self.config)
            command = BuildCommand(config=self.config, output_writer=output_writer)
            command.execute()
            output_writer.finalize(action)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Build failed: %s", e)
            raise click.Abort from e
