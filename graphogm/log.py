"""Logging interface, a default stderr logger and a driver adapter."""

from __future__ import annotations

import sys
import time
from typing import Any, Protocol, TextIO, runtime_checkable


@runtime_checkable
class Logger(Protocol):
    """Anything that can log printf-style messages at five levels."""

    def debug(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def warn(self, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...

    def fatal(self, msg: str, *args: Any) -> None: ...


def _format(msg: str, args: tuple[Any, ...]) -> str:
    return msg % args if args else msg


class DefaultLogger:
    """Writes every message, timestamped and tagged with its level, to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _write(self, level: str, msg: str, args: tuple[Any, ...]) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        stamp = time.strftime("%Y/%m/%d %H:%M:%S")
        stream.write(f"{stamp} [{level}] {_format(msg, args)}\n")
        stream.flush()

    def debug(self, msg: str, *args: Any) -> None:
        self._write("DEBUG", msg, args)

    def info(self, msg: str, *args: Any) -> None:
        self._write("INFO", msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        self._write("WARN", msg, args)

    def error(self, msg: str, *args: Any) -> None:
        self._write("ERROR", msg, args)

    def fatal(self, msg: str, *args: Any) -> None:
        """Log the message and exit with status 1."""
        self._write("FATAL", msg, args)
        raise SystemExit(1)


class DriverLogger:
    """Adapts a Logger to the name/id style logging a database driver uses."""

    def __init__(self, logger: Logger) -> None:
        self._log = logger

    def error(self, name: str, ident: str, err: object) -> None:
        self._log.error("[name=%s] [id=%s] [err=%s]", name, ident, err)

    def warn(self, name: str, ident: str, msg: str, *args: Any) -> None:
        self._log.warn("[name=%s] [id=%s] " + msg, name, ident, *args)

    def info(self, name: str, ident: str, msg: str, *args: Any) -> None:
        self._log.info("[name=%s] [id=%s] " + msg, name, ident, *args)

    def debug(self, name: str, ident: str, msg: str, *args: Any) -> None:
        self._log.debug("[name=%s] [id=%s] " + msg, name, ident, *args)


def get_default_logger() -> Logger:
    """Return a logger that writes to standard error."""
    return DefaultLogger()