from __future__ import annotations

from pathlib import Path

import allure
import pytest

from composer_runner.config import DEFAULT_INSTALLER_URL, RunnerSettings

pytestmark = [
    allure.epic("Composer Runner"),
    allure.feature("Configuration"),
]


def test_from_env_defaults(monkeypatch) -> None:
    for name in (
        "COMPOSER_RUNNER_INSTALLER_URL",
        "COMPOSER_RUNNER_TIMEOUT_SECONDS",
        "COMPOSER_RUNNER_DOWNLOAD_TIMEOUT_SECONDS",
        "COMPOSER_RUNNER_PHP_BINARY",
        "COMPOSER_RUNNER_PHP_INI",
        "COMPOSER_RUNNER_PHP_ARGS",
        "COMPOSER_RUNNER_TEMP_DIR",
        "COMPOSER_RUNNER_SEARCH_ANCESTORS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = RunnerSettings.from_env()

    assert settings.installer_url == DEFAULT_INSTALLER_URL
    assert settings.timeout_seconds == 5000
    assert settings.php_binary is None
    assert settings.php_args == ()
    assert settings.search_ancestors is True
    assert settings.artifact_name == "composer.phar"
    settings.validate()


def test_from_env_reads_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("COMPOSER_RUNNER_INSTALLER_URL", "https://mirror.example.com/installer")
    monkeypatch.setenv("COMPOSER_RUNNER_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("COMPOSER_RUNNER_PHP_BINARY", "/opt/php/bin/php")
    monkeypatch.setenv("COMPOSER_RUNNER_PHP_INI", "/etc/php/cli.ini")
    monkeypatch.setenv("COMPOSER_RUNNER_PHP_ARGS", "-d memory_limit=-1 -d 'date.timezone=UTC'")
    monkeypatch.setenv("COMPOSER_RUNNER_TEMP_DIR", str(tmp_path))
    monkeypatch.setenv("COMPOSER_RUNNER_SEARCH_ANCESTORS", "off")

    settings = RunnerSettings.from_env()

    assert settings.installer_url == "https://mirror.example.com/installer"
    assert settings.timeout_seconds == 12.5
    assert settings.php_binary == Path("/opt/php/bin/php")
    assert settings.php_ini == Path("/etc/php/cli.ini")
    assert settings.php_args == ("-d", "memory_limit=-1", "-d", "date.timezone=UTC")
    assert settings.temp_dir == tmp_path
    assert settings.search_ancestors is False


def test_from_env_rejects_invalid_boolean(monkeypatch) -> None:
    monkeypatch.setenv("COMPOSER_RUNNER_SEARCH_ANCESTORS", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value"):
        RunnerSettings.from_env()


def test_from_env_rejects_invalid_timeout(monkeypatch) -> None:
    monkeypatch.setenv("COMPOSER_RUNNER_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ValueError, match="Invalid numeric value"):
        RunnerSettings.from_env()


def test_validate_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError, match="TIMEOUT_SECONDS"):
        RunnerSettings(timeout_seconds=0).validate()


def test_validate_rejects_non_http_installer_url() -> None:
    with pytest.raises(ValueError, match="Invalid installer URL"):
        RunnerSettings(installer_url="ftp://getcomposer.org/installer").validate()
