"""PHP interpreter discovery."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from composer_runner.config import RunnerSettings
from composer_runner.errors import InterpreterNotFound

logger = logging.getLogger(__name__)

_INTERPRETER_ENV_VARS: tuple[str, ...] = ("PHP_BINARY", "PHP_PATH", "PHP_PEAR_PHP_BIN")
_INTERPRETER_NAME = "php"


class RuntimeLocator:
    """Finds the PHP executable and the arguments needed to re-invoke it."""

    def __init__(
        self,
        settings: RunnerSettings,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._settings = settings
        self._environ = environ if environ is not None else os.environ
        self._interpreter: Path | None = None

    def find_interpreter(self) -> Path:
        """Return the PHP executable, raising ``InterpreterNotFound`` when absent."""

        if self._interpreter is not None:
            return self._interpreter

        candidates: list[str] = []
        if self._settings.php_binary is not None:
            candidates.append(str(self._settings.php_binary))
        candidates.extend(
            value for name in _INTERPRETER_ENV_VARS if (value := self._environ.get(name, ""))
        )
        for candidate in candidates:
            if _is_executable_file(Path(candidate)):
                self._interpreter = Path(candidate).absolute()
                return self._interpreter
            logger.debug("Ignoring unusable PHP interpreter candidate %s", candidate)

        found = shutil.which(_INTERPRETER_NAME, path=self._environ.get("PATH"))
        if found is None:
            raise InterpreterNotFound(
                "The php executable could not be found, "
                "add it to your PATH environment variable and try again",
            )
        self._interpreter = Path(found).absolute()
        return self._interpreter

    def find_interpreter_args(self) -> list[str]:
        """Return extra interpreter flags, ending with the ini override when one is known."""

        arguments = list(self._settings.php_args)
        ini_file = self._find_ini_file()
        if ini_file is not None:
            arguments.append(f"--php-ini={ini_file}")
        return arguments

    def _find_ini_file(self) -> Path | None:
        if self._settings.php_ini is not None:
            return self._settings.php_ini
        phprc = self._environ.get("PHPRC", "").strip()
        if not phprc:
            return None
        path = Path(phprc).expanduser()
        if path.is_dir():
            path = path / "php.ini"
        if path.is_file():
            return path
        logger.debug("PHPRC points to %s but no ini file exists there", phprc)
        return None


def _is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)
