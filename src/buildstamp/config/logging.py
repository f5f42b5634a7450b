# topmark:header:start
#
#   project      : BuildStamp
#   file         : logging.py
#   file_relpath : src/buildstamp/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""BuildStamp logging with a TRACE level and colored stderr output.

Standard output is the host build tool's directive channel: any stray line there
is parsed as a directive. Log records are therefore always written to
``sys.stderr``, which cargo captures into the build script's output log.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from buildstamp.constants import LOG_LEVEL_ENV_VAR

if TYPE_CHECKING:
    from collections.abc import Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5


class BuildstampLogger(logging.Logger):
    """Logger class with support for a TRACE log level below DEBUG."""

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log 'msg % args' with severity 'TRACE'.

        Args:
            msg (object): The message to be logged.
            *args (object): Variable length argument list for the message.
            extra (Mapping[str, object] | None): Optional extra information for the record.
        """
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(
                TRACE_LEVEL,
                msg=msg,
                args=args,
                extra=extra,
                stacklevel=2,
            )


if not hasattr(logging, "TRACE"):
    logging.addLevelName(TRACE_LEVEL, "TRACE")
    logging.TRACE = TRACE_LEVEL  # type: ignore

logging.setLoggerClass(BuildstampLogger)


LOG_FORMAT = "[buildstamp] [%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[buildstamp] [%(levelname)s] [%(filename)s:%(lineno)d] %(message)s"

_LEVEL_NAMES: Final[dict[str, int]] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}


class ChalkFormatter(logging.Formatter):
    """Formatter that colors records by severity."""

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelno
        message = super().format(record)

        if level >= logging.CRITICAL:
            return chalk.red_bright(message)
        if level >= logging.ERROR:
            return chalk.red(message)
        if level >= logging.WARNING:
            return chalk.yellow(message)
        if level >= logging.INFO:
            return chalk.green(message)
        if level >= logging.DEBUG:
            return chalk.gray(message)
        return chalk.blue(message)


def resolve_env_log_level(environ: Mapping[str, str] | None = None) -> int | None:
    """Return a logging level from the environment, or None if unset or unknown.

    Honors ``BUILDSTAMP_LOG_LEVEL`` (e.g. ``"TRACE"``, ``"debug"``, numeric ``"10"``).

    Args:
        environ (Mapping[str, str] | None): Environment to consult; defaults to
            ``os.environ``.

    Returns:
        int | None: The resolved level.
    """
    source: Mapping[str, str] = os.environ if environ is None else environ
    val: str | None = source.get(LOG_LEVEL_ENV_VAR)
    if not val:
        return None
    v: str = val.strip().upper()
    if v.isdigit():
        return int(v)
    return _LEVEL_NAMES.get(v)


def setup_logging(level: int | None = None) -> None:
    """Configure the root logger with colored output on stderr.

    If ``level`` is None, ``BUILDSTAMP_LOG_LEVEL`` is consulted; the default is WARNING
    so that only failed providers show up in the build log.
    """
    if level is None:
        level = resolve_env_log_level() or logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    formatter = ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def ensure_logging() -> bool:
    """Call `setup_logging` unless the root logger already has handlers.

    Build scripts rarely configure logging themselves; an application that does
    keeps its own setup.

    Returns:
        bool: True if logging was configured by this call.
    """
    if logging.getLogger().handlers:
        return False
    setup_logging()
    return True

def get_logger(name: str) -> BuildstampLogger:
    """Retrieve a BuildstampLogger instance with the specified name.

    Args:
        name (str): The name of the logger.

    Returns:
        BuildstampLogger: A BuildstampLogger instance.
    """
    logger = logging.getLogger(name)
    return cast("BuildstampLogger", logger)
