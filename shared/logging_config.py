"""Central logging configuration for the installer.

This module configures Python's logging framework so that every install run
leaves a record in a deterministic location that can be shared when
diagnosing a failed installation.  The configuration avoids duplicate
handler registration when invoked repeatedly (as happens in tests).

Two environment variables allow customising where the log file is written:

``VITALS_LOG_FILE``
    Absolute path to the log file that should be created.

``VITALS_LOG_DIR``
    Directory where the default log file name will be created.  Ignored when
    ``VITALS_LOG_FILE`` is present.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Iterable

_LOG_FILE_ENV = "VITALS_LOG_FILE"
_LOG_DIR_ENV = "VITALS_LOG_DIR"
_DEFAULT_DIRNAME = ".vitals_installer"
_DEFAULT_LOGNAME = "install.log"
_CONFIGURED = False
_LOG_PATH: Path | None = None
_HANDLER_TAG = "_vitals_logging_handler"
_FILE_HANDLER: logging.FileHandler | None = None

USER_HOME_PLACEHOLDER = "<user_home>"


class LogVerbosity(str, Enum):
    """Verbosity levels supported by the installer log file."""

    DISABLED = "disabled"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


_VERBOSITY_LEVELS: dict[LogVerbosity, int] = {
    LogVerbosity.DISABLED: logging.CRITICAL + 1,
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.INFO: logging.INFO,
    LogVerbosity.VERBOSE: logging.DEBUG,
}

_DEFAULT_VERBOSITY = LogVerbosity.INFO
_CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


def _build_home_pattern() -> re.Pattern[str] | None:
    home = os.path.normpath(str(Path.home()))
    if not home or home == os.sep:
        return None
    return re.compile(re.escape(home))


_HOME_PATTERN = _build_home_pattern()


class _RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if _HOME_PATTERN is None:
            return formatted
        return _HOME_PATTERN.sub(USER_HOME_PLACEHOLDER, formatted)


def ensure_app_logging(
    log_file: Path | str | None = None,
    *,
    console_level: int = logging.INFO,
    log_to_stderr: bool | None = None,
) -> Path:
    """Configure the root logger for the installer.

    The first invocation sets up a file handler (at the selected verbosity)
    and a stderr handler at ``console_level``.  When ``log_to_stderr`` is
    ``None`` the stderr handler is only added for an interactive terminal.
    Subsequent calls are no-ops and return the configured log file path.
    """

    global _CONFIGURED, _LOG_PATH, _FILE_HANDLER

    if _CONFIGURED and _LOG_PATH is not None:
        return _LOG_PATH

    log_path = Path(log_file).expanduser() if log_file else _resolve_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    formatter = _RedactingFormatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(_VERBOSITY_LEVELS[_CURRENT_VERBOSITY])
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_TAG, True)
    root.addHandler(file_handler)
    _FILE_HANDLER = file_handler

    if log_to_stderr is None:
        log_to_stderr = _stderr_is_interactive()
    if log_to_stderr and _stderr_not_handled(root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(console_level)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        setattr(stream_handler, _HANDLER_TAG, True)
        root.addHandler(stream_handler)

    _CONFIGURED = True
    _LOG_PATH = log_path

    logging.getLogger(__name__).info(
        "Writing installer logs to %s (verbosity=%s)",
        log_path,
        _CURRENT_VERBOSITY.value,
    )
    return log_path


def set_file_log_verbosity(verbosity: LogVerbosity | str) -> None:
    """Adjust the minimum severity recorded in the installer log file."""

    global _CURRENT_VERBOSITY

    if isinstance(verbosity, str):
        try:
            verbosity = LogVerbosity(verbosity.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported log verbosity: {verbosity}") from exc

    _CURRENT_VERBOSITY = verbosity
    handler = _FILE_HANDLER
    if handler is None:
        return
    handler.setLevel(_VERBOSITY_LEVELS[verbosity])
    logging.getLogger(__name__).info("File log verbosity set to %s", verbosity.value)


def get_file_log_verbosity() -> LogVerbosity:
    """Return the current verbosity level for the installer log file."""

    return _CURRENT_VERBOSITY


def _resolve_log_path() -> Path:
    env_file = os.environ.get(_LOG_FILE_ENV)
    if env_file:
        return Path(env_file).expanduser()

    env_dir = os.environ.get(_LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser() / _DEFAULT_LOGNAME

    return Path.home() / _DEFAULT_DIRNAME / "logs" / _DEFAULT_LOGNAME


def _stderr_is_interactive() -> bool:
    stderr = getattr(sys, "stderr", None)
    is_tty = getattr(stderr, "isatty", None)
    if not callable(is_tty):
        return False
    try:
        return bool(is_tty())
    except ValueError:
        return False


def _stderr_not_handled(handlers: Iterable[logging.Handler]) -> bool:
    for handler in handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            return False
    return True


def _reset_for_tests() -> None:
    """Remove handlers installed by :func:`ensure_app_logging`."""

    global _CONFIGURED, _LOG_PATH, _FILE_HANDLER, _CURRENT_VERBOSITY

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    _CONFIGURED = False
    _LOG_PATH = None
    _FILE_HANDLER = None
    _CURRENT_VERBOSITY = _DEFAULT_VERBOSITY
