"""Subprocess execution through the PHP interpreter with live output forwarding."""

from __future__ import annotations

import codecs
import logging
import queue
import shlex
import subprocess
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import IO

from composer_runner.config import DEFAULT_TIMEOUT_SECONDS
from composer_runner.errors import CommandFailed, InterpreterNotFound
from composer_runner.runtime import RuntimeLocator

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.1
_READ_SIZE = 65536
_DRAIN_GRACE_SECONDS = 2.0


class StreamType(StrEnum):
    """Origin of an output chunk."""

    STDOUT = "stdout"
    STDERR = "stderr"


class ExecutionStatus(StrEnum):
    """Classification of a finished command."""

    SUCCESS = "success"
    NONZERO_EXIT = "nonzero_exit"
    TIMEOUT = "timeout"


OutputSink = Callable[[StreamType, str], None]
"""Receives decoded output as soon as the child writes it; called on the caller's thread."""

_Chunk = tuple[StreamType, str] | None


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """One command invocation: the program run by PHP plus its literal arguments."""

    program: Path
    arguments: tuple[str, ...] = ()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    cwd: Path | None = None


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Result of a finished command. Output is never retained here."""

    exit_code: int
    status: ExecutionStatus
    command_line: str
    elapsed_seconds: float

    @property
    def is_success(self) -> bool:
        return self.status is ExecutionStatus.SUCCESS


class CommandExecutor:
    """Builds ``php [php args] <program> <args> --no-interaction`` and runs it."""

    def __init__(
        self,
        runtime: RuntimeLocator,
        *,
        non_interactive_flag: str = "--no-interaction",
        on_failure: Callable[[], None] | None = None,
    ) -> None:
        self._runtime = runtime
        self._non_interactive_flag = non_interactive_flag
        self._on_failure = on_failure

    def build_argv(self, spec: CommandSpec) -> list[str]:
        argv = [
            str(self._runtime.find_interpreter()),
            *self._runtime.find_interpreter_args(),
            str(spec.program),
            *spec.arguments,
        ]
        if self._non_interactive_flag:
            argv.append(self._non_interactive_flag)
        return argv

    def run(self, spec: CommandSpec, sink: OutputSink | None = None) -> ExecutionOutcome:
        """Run ``spec`` to completion, raising ``CommandFailed`` on nonzero exit or timeout.

        The failure hook runs before any error is raised.
        """

        try:
            argv = self.build_argv(spec)
        except InterpreterNotFound:
            self._fail()
            raise
        command_line = shlex.join(argv)
        logger.debug(
            "Running %s (timeout=%ss, cwd=%s)",
            command_line,
            spec.timeout_seconds,
            spec.cwd,
        )

        start_monotonic = time.monotonic()
        try:
            process = subprocess.Popen(  # noqa: S603
                argv,
                cwd=spec.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if sink is not None else subprocess.DEVNULL,
                stderr=subprocess.PIPE if sink is not None else subprocess.DEVNULL,
            )
        except OSError as error:
            self._fail()
            raise CommandFailed(command_line, reason=f"failed to start: {error}") from error

        try:
            if sink is None:
                timed_out = _wait_discarding(process, spec.timeout_seconds)
            else:
                deadline = start_monotonic + spec.timeout_seconds
                timed_out = _wait_forwarding(process, sink, deadline)
        except BaseException:
            # A raising sink or an interrupt must not leave the child running.
            _terminate_process(process)
            self._fail()
            raise
        elapsed = time.monotonic() - start_monotonic
        exit_code = process.returncode if process.returncode is not None else -1
        outcome = ExecutionOutcome(
            exit_code=exit_code,
            status=_classify(exit_code, timed_out=timed_out),
            command_line=command_line,
            elapsed_seconds=elapsed,
        )
        if outcome.is_success:
            return outcome

        if timed_out:
            logger.warning("Command timed out after %.1fs: %s", elapsed, command_line)
        else:
            logger.warning("Command exited with code %d: %s", exit_code, command_line)
        self._fail()
        raise CommandFailed(
            command_line,
            exit_code=exit_code,
            timed_out=timed_out,
            outcome=outcome,
        )

    def _fail(self) -> None:
        if self._on_failure is not None:
            self._on_failure()


def _classify(exit_code: int, *, timed_out: bool) -> ExecutionStatus:
    if timed_out:
        return ExecutionStatus.TIMEOUT
    if exit_code != 0:
        return ExecutionStatus.NONZERO_EXIT
    return ExecutionStatus.SUCCESS


def _wait_discarding(process: subprocess.Popen[bytes], timeout_seconds: float) -> bool:
    try:
        process.wait(timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        _terminate_process(process)
        return True
    return False


def _wait_forwarding(process: subprocess.Popen[bytes], sink: OutputSink, deadline: float) -> bool:
    chunks: queue.Queue[_Chunk] = queue.Queue()
    streams = [(process.stdout, StreamType.STDOUT), (process.stderr, StreamType.STDERR)]
    for stream, stream_type in streams:
        threading.Thread(
            target=_read_stream,
            args=(stream, stream_type, chunks),
            name=f"composer-runner-{stream_type}",
            daemon=True,
        ).start()

    open_streams = len(streams)
    timed_out = False
    while open_streams:
        now = time.monotonic()
        if now >= deadline:
            if timed_out or process.poll() is not None:
                # A descendant still holds the pipes open.
                break
            _terminate_process(process)
            timed_out = True
            deadline = time.monotonic() + _DRAIN_GRACE_SECONDS
            continue
        try:
            chunk = chunks.get(timeout=min(deadline - now, _POLL_INTERVAL_SECONDS))
        except queue.Empty:
            continue
        if chunk is None:
            open_streams -= 1
            continue
        sink(*chunk)

    if timed_out:
        return True
    try:
        process.wait(timeout=max(0.0, deadline - time.monotonic()))
    except subprocess.TimeoutExpired:
        _terminate_process(process)
        return True
    return False


def _read_stream(
    stream: IO[bytes] | None,
    stream_type: StreamType,
    chunks: queue.Queue[_Chunk],
) -> None:
    if stream is None:
        chunks.put(None)
        return
    # Forward whatever is available so unterminated progress lines are not held back.
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    try:
        while data := stream.read1(_READ_SIZE):  # type: ignore[attr-defined]
            if text := decoder.decode(data):
                chunks.put((stream_type, text))
        if tail := decoder.decode(b"", final=True):
            chunks.put((stream_type, tail))
    except (OSError, ValueError):
        logger.debug("Stopped reading %s", stream_type, exc_info=True)
    finally:
        chunks.put(None)
        stream.close()


def _terminate_process(process: subprocess.Popen[bytes]) -> None:
    try:
        process.terminate()
    except OSError:
        return
    try:
        process.wait(timeout=2)
    except subprocess.TimeoutExpired:
        try:
            process.kill()
        except OSError:
            return
        process.wait(timeout=2)
