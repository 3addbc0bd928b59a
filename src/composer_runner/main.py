"""CLI entrypoint for composer-runner."""

import logging
from pathlib import Path

import rich_click as click

from composer_runner import __version__
from composer_runner.controllers import (
    ComposerExecCommand,
    ComposerWhichCommand,
    ControllerResult,
    RunnerCliController,
)
from composer_runner.executor import StreamType

click.rich_click.USE_MARKDOWN = True
RUNNER_CONTROLLER = RunnerCliController()


@click.group()
@click.version_option(version=__version__, prog_name="composer-runner")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
def composer_runner(verbose: bool) -> None:
    """Locate or bootstrap Composer and run commands with it."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@composer_runner.command("which")
@click.option(
    "--temp-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Parent directory for a temporary installation.",
)
@click.option("--installer-url", default=None, help="Override the bootstrap installer URL.")
def which(temp_dir: Path | None, installer_url: str | None) -> None:
    """Print the Composer binary that would be used."""

    _finish(
        RUNNER_CONTROLLER.which(
            ComposerWhichCommand(temp_dir=temp_dir, installer_url=installer_url),
        ),
    )


@composer_runner.command(
    "exec",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("command")
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Timeout in seconds. Defaults to COMPOSER_RUNNER_TIMEOUT_SECONDS.",
)
@click.option(
    "--temp-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Parent directory for a temporary installation.",
)
@click.option("--installer-url", default=None, help="Override the bootstrap installer URL.")
@click.option(
    "--quiet/--no-quiet",
    default=False,
    show_default=True,
    help="Discard Composer output instead of streaming it.",
)
def exec_command(  # noqa: PLR0913
    command: str,
    arguments: tuple[str, ...],
    timeout_seconds: float | None,
    temp_dir: Path | None,
    installer_url: str | None,
    quiet: bool,
) -> None:
    """Run `composer COMMAND ARGUMENTS...`, installing Composer temporarily if needed.

    Runner options go before COMMAND; everything after it is passed to composer.
    """

    _finish(
        RUNNER_CONTROLLER.execute(
            ComposerExecCommand(
                command=command,
                arguments=arguments,
                timeout_seconds=timeout_seconds,
                temp_dir=temp_dir,
                installer_url=installer_url,
            ),
            sink=None if quiet else _echo_chunk,
        ),
    )


def _echo_chunk(stream: StreamType, chunk: str) -> None:
    click.echo(chunk, nl=False, err=stream is StreamType.STDERR)


def _finish(result: ControllerResult) -> None:
    for line in result.lines:
        click.echo(line)
    if not result.success:
        raise click.ClickException(result.error or "Command failed.")


if __name__ == "__main__":  # pragma: no cover
    composer_runner()
