"""Runtime configuration for Composer resolution and execution."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_INSTALLER_URL = "https://getcomposer.org/installer"
DEFAULT_TIMEOUT_SECONDS = 5_000.0
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 30.0


@dataclass(slots=True)
class RunnerSettings:
    """Settings for locating PHP, installing Composer and running commands."""

    installer_url: str = DEFAULT_INSTALLER_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    download_timeout_seconds: float = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    php_binary: Path | None = None
    php_ini: Path | None = None
    php_args: tuple[str, ...] = ()
    temp_dir: Path | None = None
    search_ancestors: bool = True
    binary_name: str = "composer"
    binary_suffixes: tuple[str, ...] = (".phar",)
    installer_filename: str = "installer.php"
    artifact_name: str = "composer.phar"
    non_interactive_flag: str = "--no-interaction"

    @classmethod
    def from_env(cls) -> RunnerSettings:
        """Load settings from environment with defaults matching upstream Composer."""

        return cls(
            installer_url=os.getenv("COMPOSER_RUNNER_INSTALLER_URL", DEFAULT_INSTALLER_URL).strip(),
            timeout_seconds=_env_float(
                "COMPOSER_RUNNER_TIMEOUT_SECONDS",
                DEFAULT_TIMEOUT_SECONDS,
            ),
            download_timeout_seconds=_env_float(
                "COMPOSER_RUNNER_DOWNLOAD_TIMEOUT_SECONDS",
                DEFAULT_DOWNLOAD_TIMEOUT_SECONDS,
            ),
            php_binary=_env_path("COMPOSER_RUNNER_PHP_BINARY"),
            php_ini=_env_path("COMPOSER_RUNNER_PHP_INI"),
            php_args=tuple(shlex.split(os.getenv("COMPOSER_RUNNER_PHP_ARGS", ""))),
            temp_dir=_env_path("COMPOSER_RUNNER_TEMP_DIR"),
            search_ancestors=_env_bool("COMPOSER_RUNNER_SEARCH_ANCESTORS", default=True),
        )

    def validate(self) -> None:
        """Raise configuration error if timeouts or the installer URL are invalid."""

        if self.timeout_seconds <= 0:
            raise ValueError("COMPOSER_RUNNER_TIMEOUT_SECONDS must be > 0.")
        if self.download_timeout_seconds <= 0:
            raise ValueError("COMPOSER_RUNNER_DOWNLOAD_TIMEOUT_SECONDS must be > 0.")
        parsed = urlparse(self.installer_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "Invalid installer URL: "
                f"{self.installer_url!r}. "
                "Expected an absolute URL with http:// or https:// scheme.",
            )
        if not self.binary_name.strip():
            raise ValueError("Binary name must not be empty.")


def _env_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    return Path(value).expanduser()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid numeric value for {name}: {value!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
