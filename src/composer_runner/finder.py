"""Search-path lookup for an already installed Composer binary."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class BinaryLocator:
    """Finds an executable by name across ``PATH`` and caller-supplied directories."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        os_name: str | None = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._os_name = os_name or os.name

    def find(
        self,
        name: str,
        allowed_suffixes: Sequence[str] = (),
        extra_dirs: Iterable[Path] = (),
    ) -> Path | None:
        """Return the first matching executable, or ``None`` when nothing matches.

        Suffixes are tried in order (bare name first); for each suffix the
        directories are scanned in ``PATH`` order, then ``extra_dirs``.
        """

        dirs = self._search_dirs(extra_dirs)
        for suffix in self._suffixes(allowed_suffixes):
            for directory in dirs:
                candidate = directory / f"{name}{suffix}"
                if self._is_match(candidate):
                    logger.debug("Found %s at %s", name, candidate)
                    return candidate.absolute()
        logger.debug("No %s executable in %d directories", name, len(dirs))
        return None

    def _search_dirs(self, extra_dirs: Iterable[Path]) -> list[Path]:
        dirs: list[Path] = []
        seen: set[Path] = set()
        path_value = self._environ.get("PATH", "")
        for entry in [*path_value.split(os.pathsep), *map(str, extra_dirs)]:
            if not entry:
                continue
            directory = Path(entry)
            if directory in seen:
                continue
            seen.add(directory)
            dirs.append(directory)
        return dirs

    def _suffixes(self, allowed_suffixes: Sequence[str]) -> list[str]:
        suffixes = [""]
        if self._os_name == "nt":
            pathext = self._environ.get("PATHEXT", ".exe;.bat;.cmd;.com")
            suffixes.extend(ext.lower() for ext in pathext.split(";") if ext)
        suffixes.extend(allowed_suffixes)
        return list(dict.fromkeys(suffixes))

    def _is_match(self, candidate: Path) -> bool:
        try:
            if not candidate.is_file():
                return False
        except OSError:
            return False
        return self._os_name == "nt" or os.access(candidate, os.X_OK)


def ancestor_dirs(path: Path) -> list[Path]:
    """Return ``path`` (resolved) followed by each of its ancestors up to the root."""

    resolved = path.resolve()
    return [resolved, *resolved.parents]
