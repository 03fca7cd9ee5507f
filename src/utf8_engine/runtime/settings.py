"""Environment-driven settings shared by cursors and sessions."""

from __future__ import annotations

from typing import Optional

from .telemetry import env

DEFAULT_WINDOW_CAPACITY = 64


def _parse_capacity(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"UTF8_ENGINE_WINDOW_SIZE must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"UTF8_ENGINE_WINDOW_SIZE must be positive, got {value}")
    return value


def window_capacity(override: Optional[int] = None) -> int:
    """Return the window capacity C, preferring ``override`` over the environment."""

    if override is not None:
        if override <= 0:
            raise ValueError(f"capacity must be positive, got {override}")
        return override
    raw = env("WINDOW_SIZE")
    if raw is None or not raw.strip():
        return DEFAULT_WINDOW_CAPACITY
    return _parse_capacity(raw.strip())


__all__ = ["DEFAULT_WINDOW_CAPACITY", "window_capacity"]
