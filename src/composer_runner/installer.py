"""Fallback installation of Composer through the official bootstrap installer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from composer_runner.config import RunnerSettings
from composer_runner.errors import (
    BootstrapFailed,
    CommandFailed,
    DownloadFailed,
    InstallError,
    TempDirFailed,
)
from composer_runner.executor import CommandExecutor, CommandSpec
from composer_runner.resources import ResourceManager, TempInstallation

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Anything able to return the bytes behind a URL."""

    def fetch(self, url: str) -> bytes:
        """Return the body or raise ``DownloadFailed``."""


class Installer:
    """Downloads and runs the bootstrap installer into a temporary directory.

    Install failures never escape: they are logged, kept in ``last_error`` and
    reported as ``None`` so the caller can raise ``BinaryNotFound``.
    """

    def __init__(
        self,
        settings: RunnerSettings,
        resources: ResourceManager,
        executor: CommandExecutor,
        fetcher: Fetcher,
    ) -> None:
        self._settings = settings
        self._resources = resources
        self._executor = executor
        self._fetcher = fetcher
        self.last_error: InstallError | None = None
        self.attempts = 0

    def install(self) -> Path | None:
        """Return the installed binary, installing it first if this session has none."""

        cached = self._resources.binary
        if cached is not None:
            return cached

        self.attempts += 1
        try:
            installation = self._create_installation()
            logger.info(
                "Composer not found, installing from %s into %s",
                self._settings.installer_url,
                installation.root,
            )
            artifact = self._install_into(installation)
        except InstallError as error:
            self._resources.cleanup()
            self.last_error = error
            logger.warning("Composer installation failed: %s", error)
            return None
        except BaseException:
            self._resources.cleanup()
            raise

        self.last_error = None
        logger.info("Installed Composer at %s", artifact)
        return self._resources.adopt_binary(artifact)

    def _create_installation(self) -> TempInstallation:
        try:
            return self._resources.create()
        except OSError as error:
            raise TempDirFailed(f"Could not create a temporary directory: {error}") from error

    def _install_into(self, installation: TempInstallation) -> Path:
        payload = self._fetcher.fetch(self._settings.installer_url)
        script_path = installation.root / self._settings.installer_filename
        try:
            script_path.write_bytes(payload)
        except OSError as error:
            raise DownloadFailed(f"Could not write installer to {script_path}: {error}") from error

        try:
            self._executor.run(
                CommandSpec(
                    program=script_path,
                    timeout_seconds=self._settings.timeout_seconds,
                    cwd=installation.root,
                ),
            )
        except CommandFailed as error:
            raise BootstrapFailed(f"Installer script failed: {error}") from error

        artifact = installation.root / self._settings.artifact_name
        if not artifact.is_file():
            raise BootstrapFailed(
                f"Installer finished but {self._settings.artifact_name} was not created "
                f"in {installation.root}",
            )
        return artifact
