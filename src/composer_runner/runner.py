"""Public entry point: resolve Composer and run commands against it."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from composer_runner.config import RunnerSettings
from composer_runner.errors import BinaryNotFound
from composer_runner.executor import CommandExecutor, CommandSpec, ExecutionOutcome, OutputSink
from composer_runner.finder import BinaryLocator, ancestor_dirs
from composer_runner.http.fetcher import InstallerFetcher
from composer_runner.installer import Fetcher, Installer
from composer_runner.resources import ResourceManager
from composer_runner.runtime import RuntimeLocator

logger = logging.getLogger(__name__)


class ComposerRunner:
    """Runs Composer commands, installing Composer temporarily when the host lacks it.

    One runner is one non-reentrant session: the installed binary is cached on
    the instance without locking, so concurrent callers need a runner each.
    Use it as a context manager so the temporary installation is always removed::

        with ComposerRunner() as runner:
            runner.execute("install", ["--no-dev"])
    """

    def __init__(
        self,
        settings: RunnerSettings | None = None,
        *,
        fetcher: Fetcher | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.settings = settings if settings is not None else RunnerSettings.from_env()
        self.settings.validate()

        self._resources = ResourceManager(temp_dir=self.settings.temp_dir)
        self._locator = BinaryLocator(environ=environ)
        self._runtime = RuntimeLocator(self.settings, environ=environ)
        self._executor = CommandExecutor(
            self._runtime,
            non_interactive_flag=self.settings.non_interactive_flag,
            on_failure=self._resources.cleanup,
        )
        self._owned_fetcher: InstallerFetcher | None = None
        if fetcher is None:
            fetcher = self._owned_fetcher = InstallerFetcher(
                timeout_seconds=self.settings.download_timeout_seconds,
            )
        self._installer = Installer(self.settings, self._resources, self._executor, fetcher)

    @property
    def installer(self) -> Installer:
        return self._installer

    @property
    def resources(self) -> ResourceManager:
        return self._resources

    def execute(
        self,
        command: str,
        arguments: Sequence[str] = (),
        output: OutputSink | None = None,
        timeout: float | None = None,
    ) -> ExecutionOutcome:
        """Run ``composer <command> <arguments...> --no-interaction``.

        Output chunks go to ``output`` as they arrive and are discarded when it
        is ``None``. Raises ``BinaryNotFound``, ``InterpreterNotFound`` or
        ``CommandFailed``; a failed command removes any temporary installation
        before the error is raised.
        """

        timeout_seconds = self.settings.timeout_seconds if timeout is None else timeout
        if timeout_seconds <= 0:
            raise ValueError(f"Timeout must be > 0, got {timeout_seconds!r}")

        composer = self.find_composer()
        spec = CommandSpec(
            program=composer,
            arguments=(command, *arguments),
            timeout_seconds=timeout_seconds,
        )
        return self._executor.run(spec, output)

    def find_composer(self) -> Path:
        """Return a usable Composer binary, searching first and installing as fallback."""

        extra_dirs = ancestor_dirs(Path.cwd()) if self.settings.search_ancestors else []
        binary = self._locator.find(
            self.settings.binary_name,
            self.settings.binary_suffixes,
            extra_dirs,
        )
        if binary is not None:
            logger.debug("Using host Composer at %s", binary)
            return binary

        binary = self._installer.install()
        if binary is None:
            raise BinaryNotFound("Cannot find composer") from self._installer.last_error
        return binary

    def cleanup(self) -> None:
        """Remove the temporary installation, if any."""

        self._resources.cleanup()

    def close(self) -> None:
        self.cleanup()
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()
            self._owned_fetcher = None

    def __enter__(self) -> ComposerRunner:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
