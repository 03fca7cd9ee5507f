"""Structured logging for the transcoding engine.

The rest of the package only touches a few names:

``configure(...)`` -- attach handlers and pick a level for the ``utf8_engine`` logger
``get_logger(name)`` -- a child of the package logger
``record_event(name, ...)`` -- one ``event=<name> key=value ...`` line
``span(name, ...)`` -- time a block, report failure or cancellation

Records are plain ``key=value`` lines. Nothing is configured on import, so an
application that never calls :func:`configure` gets whatever its root logger
does. Codec loops never log; only session boundaries and faults do.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from rich.logging import RichHandler

ENV_PREFIX = "UTF8_ENGINE_"
ROOT_LOGGER = "utf8_engine"

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_HANDLERS: List[logging.Handler] = []


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _level_number(level: str) -> int:
    number = logging.getLevelName(str(level).upper())
    if not isinstance(number, int):
        raise ValueError(f"Unsupported log level '{level}'.")
    return number


def _stringify(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex(" ")
    return str(value)


def _format_pairs(data: Dict[str, Any]) -> str:
    return " ".join(f"{key}={_stringify(value)}" for key, value in data.items())


def configure(
    *,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: Optional[bool] = None,
) -> logging.Logger:
    """(Re)install the package handlers.

    Arguments left as ``None`` fall back to ``UTF8_ENGINE_LOG_LEVEL``
    (default ``WARNING``), ``UTF8_ENGINE_LOG_FILE`` and
    ``UTF8_ENGINE_LOG_CONSOLE``. Calling it again replaces the handlers
    installed by the previous call.
    """

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(_level_number(level or env("LOG_LEVEL") or "WARNING"))

    for handler in _HANDLERS:
        root.removeHandler(handler)
        handler.close()
    _HANDLERS.clear()

    if console if console is not None else env_flag("LOG_CONSOLE", False):
        _HANDLERS.append(RichHandler(show_path=False, rich_tracebacks=False))

    path = log_file if log_file is not None else env("LOG_FILE")
    if path:
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        _HANDLERS.append(file_handler)

    for handler in _HANDLERS:
        root.addHandler(handler)
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    log = get_logger(logger_name)
    number = _level_number(level)
    if log.isEnabledFor(number):
        log.log(number, "event=%s %s", name, _format_pairs(data or {}))


@dataclass
class SpanHandle:
    """Handle yielded by ``span`` for metadata updates and outcomes."""

    logger: logging.Logger
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000.0

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _log(self, level: int, status: str, **extra: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        payload: Dict[str, Any] = {"status": status, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        payload.update(extra)
        payload["elapsed_ms"] = f"{self.elapsed_ms:.3f}"
        self.logger.log(level, "span=%s %s", self.span_name, _format_pairs(payload))

    def fail(self, reason: str) -> None:
        self._log(logging.ERROR, "fail", reason=reason)

    def cancel(self, reason: str | None = None) -> None:
        if reason:
            self._log(logging.INFO, "cancel", reason=reason)
        else:
            self._log(logging.INFO, "cancel")


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time a block; ``component=True`` reuses ``name`` as the component."""

    handle = SpanHandle(
        logger=get_logger(logger_name),
        span_name=name,
        component_name=name if component is True else component or None,
        metadata={key: _stringify(value) for key, value in (metadata or {}).items()},
    )
    try:
        yield handle
    except Exception as exc:
        handle.fail(f"{type(exc).__name__}: {exc}")
        raise
    handle._log(logging.DEBUG, "ok")


__all__ = [
    "ENV_PREFIX",
    "ROOT_LOGGER",
    "SpanHandle",
    "configure",
    "env",
    "env_flag",
    "get_logger",
    "record_event",
    "span",
]
