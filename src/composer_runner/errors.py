"""Error kinds raised while resolving and running Composer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from composer_runner.executor import ExecutionOutcome


class ComposerRunnerError(RuntimeError):
    """Base class for all runner failures."""


class InterpreterNotFound(ComposerRunnerError):
    """No PHP interpreter could be located on the host."""


class BinaryNotFound(ComposerRunnerError):
    """Neither the search path nor the fallback installer produced a binary."""


class InstallError(ComposerRunnerError):
    """Fallback installation failure, absorbed by the installer."""


class DownloadFailed(InstallError):
    """The bootstrap installer could not be fetched."""


class BootstrapFailed(InstallError):
    """The bootstrap installer ran but did not produce the artifact."""


class TempDirFailed(InstallError):
    """No temporary directory could be created for the installation."""


class CommandFailed(ComposerRunnerError):
    """A spawned command exited nonzero, timed out or failed to start."""

    def __init__(
        self,
        command_line: str,
        *,
        exit_code: int | None = None,
        timed_out: bool = False,
        reason: str | None = None,
        outcome: ExecutionOutcome | None = None,
    ) -> None:
        if timed_out:
            detail = "timed out"
        elif reason is not None:
            detail = reason
        else:
            detail = f"exit code {exit_code}"
        super().__init__(
            f'An error occurred when executing the "{command_line}" command ({detail}).',
        )
        self.command_line = command_line
        self.exit_code = exit_code
        self.timed_out = timed_out
        self.outcome = outcome
