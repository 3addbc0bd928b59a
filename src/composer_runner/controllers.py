"""Controllers for composer-runner CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from composer_runner.config import RunnerSettings
from composer_runner.errors import ComposerRunnerError
from composer_runner.executor import OutputSink
from composer_runner.installer import Fetcher
from composer_runner.runner import ComposerRunner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ComposerWhichCommand:
    """CLI input for binary resolution."""

    temp_dir: Path | None = None
    installer_url: str | None = None


@dataclass(slots=True)
class ComposerExecCommand:
    """CLI input for running one Composer command."""

    command: str
    arguments: tuple[str, ...] = ()
    timeout_seconds: float | None = None
    temp_dir: Path | None = None
    installer_url: str | None = None


@dataclass(slots=True)
class ControllerResult:
    """Lines to print and overall success flag."""

    lines: list[str]
    success: bool
    error: str | None = None


class RunnerCliController:
    """Builds a runner per CLI invocation and always releases it."""

    def __init__(self, fetcher: Fetcher | None = None) -> None:
        self._fetcher = fetcher

    def which(self, command: ComposerWhichCommand) -> ControllerResult:
        try:
            with self._runner(command.temp_dir, command.installer_url) as runner:
                binary = runner.find_composer()
                installed = runner.resources.binary is not None
        except (ComposerRunnerError, ValueError) as error:
            return ControllerResult(lines=[], success=False, error=str(error))

        lines = [str(binary)]
        if installed:
            lines.append("(temporary installation, removed on exit)")
        return ControllerResult(lines=lines, success=True)

    def execute(self, command: ComposerExecCommand, sink: OutputSink | None) -> ControllerResult:
        try:
            with self._runner(command.temp_dir, command.installer_url) as runner:
                outcome = runner.execute(
                    command.command,
                    list(command.arguments),
                    sink,
                    command.timeout_seconds,
                )
        except (ComposerRunnerError, ValueError) as error:
            logger.debug("Composer command failed", exc_info=True)
            return ControllerResult(lines=[], success=False, error=str(error))

        return ControllerResult(
            lines=[f"Finished in {outcome.elapsed_seconds:.1f}s: {outcome.command_line}"],
            success=True,
        )

    def _runner(self, temp_dir: Path | None, installer_url: str | None) -> ComposerRunner:
        settings = RunnerSettings.from_env()
        if temp_dir is not None:
            settings = replace(settings, temp_dir=temp_dir)
        if installer_url is not None:
            settings = replace(settings, installer_url=installer_url)
        return ComposerRunner(settings, fetcher=self._fetcher)
