"""Locate, bootstrap and run the Composer dependency manager."""

from composer_runner.errors import (
    BinaryNotFound,
    BootstrapFailed,
    CommandFailed,
    ComposerRunnerError,
    DownloadFailed,
    InterpreterNotFound,
    TempDirFailed,
)
from composer_runner.executor import ExecutionOutcome, ExecutionStatus, OutputSink, StreamType
from composer_runner.runner import ComposerRunner

__version__ = "1.0.0"

__all__ = [
    "BinaryNotFound",
    "BootstrapFailed",
    "CommandFailed",
    "ComposerRunner",
    "ComposerRunnerError",
    "DownloadFailed",
    "ExecutionOutcome",
    "ExecutionStatus",
    "InterpreterNotFound",
    "OutputSink",
    "StreamType",
    "TempDirFailed",
    "__version__",
]
