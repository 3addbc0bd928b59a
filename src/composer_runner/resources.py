"""Ownership of the temporary Composer installation."""

from __future__ import annotations

import logging
import shutil
import tempfile
import weakref
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "composer-runner-"


@dataclass(slots=True)
class TempInstallation:
    """Temporary directory holding the installer script and, once built, the binary."""

    root: Path
    binary: Path | None = None


class ResourceManager:
    """Tracks at most one live ``TempInstallation`` and removes it on cleanup.

    One manager belongs to one runner session and is not thread-safe. A
    ``weakref.finalize`` hook removes a still-live directory when the manager
    is garbage-collected or the interpreter exits.
    """

    def __init__(self, *, temp_dir: Path | None = None) -> None:
        self._temp_dir = temp_dir
        self._installation: TempInstallation | None = None
        self._finalizer: weakref.finalize | None = None

    @property
    def installation(self) -> TempInstallation | None:
        return self._installation

    @property
    def binary(self) -> Path | None:
        """Installed binary, or ``None`` if nothing has been installed since the last cleanup."""

        if self._installation is None:
            return None
        return self._installation.binary

    def create(self) -> TempInstallation:
        """Create a fresh temporary directory, discarding any previous one."""

        self.cleanup()
        if self._temp_dir is not None:
            self._temp_dir.mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=self._temp_dir))
        self._installation = TempInstallation(root=root)
        self._finalizer = weakref.finalize(self, _remove_tree, root)
        logger.debug("Created temporary installation directory %s", root)
        return self._installation

    def adopt_binary(self, binary: Path) -> Path:
        """Record the binary produced inside the live installation."""

        if self._installation is None:
            raise RuntimeError("No temporary installation to adopt a binary into.")
        self._installation.binary = binary
        return binary

    def cleanup(self) -> None:
        """Remove the live installation, if any. Safe to call repeatedly."""

        if self._installation is None:
            return
        root = self._installation.root
        # Stop serving the binary even if the directory cannot be removed yet.
        self._installation.binary = None
        try:
            _remove_tree(root)
        except OSError as error:
            logger.warning("Could not remove temporary installation %s: %s", root, error)
            return
        if self._finalizer is not None:
            self._finalizer.detach()
        self._installation = None
        self._finalizer = None
        logger.debug("Removed temporary installation directory %s", root)


def _remove_tree(root: Path) -> None:
    if root.exists():
        shutil.rmtree(root)
