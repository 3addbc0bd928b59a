"""Shared test fixtures.

Tests stand in ``sys.executable`` for the PHP interpreter and small Python
scripts for the bootstrap installer and ``composer.phar``.
"""

from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from composer_runner.config import RunnerSettings
from composer_runner.http.fetcher import InstallerFetcher

FAKE_COMPOSER_SOURCE = textwrap.dedent(
    """\
    import json
    import sys
    import time

    args = sys.argv[1:]
    command = args[0] if args else ""
    if command == "fail":
        print("Loading composer repositories", flush=True)
        print("Your requirements could not be resolved", file=sys.stderr, flush=True)
        sys.exit(1)
    if command == "sleep":
        print("sleeping", flush=True)
        time.sleep(30)
    print(json.dumps(args), flush=True)
    """,
)

INSTALLER_SOURCE = (
    "import pathlib\n"
    f"pathlib.Path('composer.phar').write_text({FAKE_COMPOSER_SOURCE!r})\n"
    "print('Composer successfully installed')\n"
)

NO_ARTIFACT_INSTALLER_SOURCE = "print('All settings correct, but nothing was written')\n"

BROKEN_INSTALLER_SOURCE = (
    "import sys\n"
    "sys.exit('Some settings on your machine make Composer unable to work')\n"
)


def write_fake_composer(directory: Path, name: str = "composer") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(FAKE_COMPOSER_SOURCE, "utf-8")
    path.chmod(0o755)
    return path


@dataclass
class FakeInstallerServer:
    """Serves installer bytes through ``httpx.MockTransport`` and counts requests."""

    body: bytes = INSTALLER_SOURCE.encode("utf-8")
    status_code: int = 200
    fail_transport: bool = False
    requests: list[str] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if self.fail_transport:
            raise httpx.ConnectError("Name or service not known", request=request)
        return httpx.Response(self.status_code, content=self.body)

    def fetcher(self) -> InstallerFetcher:
        return InstallerFetcher(transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def installer_server() -> FakeInstallerServer:
    return FakeInstallerServer()


@pytest.fixture()
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "runner-tmp"
    root.mkdir()
    return root


@pytest.fixture()
def settings(temp_root: Path) -> RunnerSettings:
    return RunnerSettings(
        php_binary=Path(sys.executable),
        temp_dir=temp_root,
        timeout_seconds=30,
        search_ancestors=False,
    )


@pytest.fixture()
def empty_environ(tmp_path: Path) -> dict[str, str]:
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    return {"PATH": str(empty_bin)}


@pytest.fixture()
def host_environ(tmp_path: Path) -> dict[str, str]:
    host_bin = tmp_path / "host-bin"
    write_fake_composer(host_bin)
    return {"PATH": str(host_bin)}
