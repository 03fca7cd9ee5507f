"""Lazy code-point cursor backed by a bounded decode window."""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Tuple, Union

from utf8_engine.codec import MalformedUTF8Error, decode
from utf8_engine.runtime import telemetry
from utf8_engine.runtime.settings import window_capacity

CursorState = Literal["fresh", "buffered", "exhausted"]
Payload = Union[bytes, bytearray, memoryview]


def borrow_payload(source: Any) -> Payload:
    """Return the bytes behind a buffer or bytes-like ``source`` without copying."""

    data = getattr(source, "data", source)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return data
    return bytes(data)


class CodePointCursor:
    """Forward cursor yielding the code points of a UTF-8 payload.

    At most ``capacity`` decoded code points are held at a time. Advancing
    only moves the vernier; the window is refilled the next time
    :meth:`current` needs a value past its end.

    The cursor borrows its source. For a :class:`Utf8Buffer` it holds the
    payload that was current at construction, so committing a reconstruct
    session never disturbs a running cursor. A ``bytearray`` source cannot be
    resized while a cursor over it is alive. Cursors compare by the identity
    of the object they were created from.
    """

    def __init__(
        self,
        source: Any,
        *,
        capacity: Optional[int] = None,
        end: bool = False,
    ) -> None:
        self._owner = source
        self._source = borrow_payload(source)
        self._view = memoryview(self._source)
        self._capacity = window_capacity(capacity)
        self._window: List[int] = []
        self._vernier = 0
        self._position = 0
        self._is_end = end

    @classmethod
    def begin(cls, source: Any, *, capacity: Optional[int] = None) -> "CodePointCursor":
        cursor = cls(source, capacity=capacity)
        cursor._refill()
        return cursor

    @classmethod
    def end(cls, source: Any) -> "CodePointCursor":
        return cls(source, end=True)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def source_position(self) -> int:
        """Byte offset of the first byte not yet decoded into the window."""

        return self._position

    @property
    def vernier(self) -> int:
        return self._vernier

    @property
    def window(self) -> Tuple[int, ...]:
        return tuple(self._window)

    @property
    def is_sentinel(self) -> bool:
        return self._is_end

    @property
    def source_exhausted(self) -> bool:
        return self._position >= len(self._source)

    @property
    def at_end(self) -> bool:
        return self.source_exhausted and self._vernier == len(self._window)

    @property
    def state(self) -> CursorState:
        """``"fresh"`` means the window must be (re)filled before the next read."""

        if self._vernier < len(self._window):
            return "buffered"
        if self.source_exhausted:
            return "exhausted"
        return "fresh"

    def current(self) -> int:
        self._require_live()
        while self._vernier >= len(self._window):
            if self.source_exhausted:
                raise IndexError("cursor is past the end of its source")
            self._vernier -= len(self._window)
            self._refill()
        return self._window[self._vernier]

    def advance(self, n: int = 1) -> "CodePointCursor":
        self._require_live()
        if n < 0:
            raise ValueError("cursors only move forward")
        self._vernier += n
        return self

    def __iadd__(self, n: int) -> "CodePointCursor":
        return self.advance(n)

    def copy(self) -> "CodePointCursor":
        clone = type(self)(self._owner, capacity=self._capacity, end=self._is_end)
        clone._source = self._source
        clone._view = self._view
        clone._window = list(self._window)
        clone._vernier = self._vernier
        clone._position = self._position
        return clone

    __copy__ = copy

    def __iter__(self) -> "CodePointCursor":
        return self

    def __next__(self) -> int:
        try:
            value = self.current()
        except IndexError:
            raise StopIteration from None
        self._vernier += 1
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CodePointCursor):
            return NotImplemented
        if self._owner is not other._owner:
            return False
        if self._is_end or other._is_end:
            live = other if self._is_end else self
            return live._is_end or live.at_end
        return self._position == other._position and self._vernier == other._vernier

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._is_end:
            return f"CodePointCursor(end, size={len(self._source)})"
        return (
            f"CodePointCursor(position={self._position}, vernier={self._vernier}, "
            f"window={len(self._window)}/{self._capacity})"
        )

    def _require_live(self) -> None:
        if self._is_end:
            raise RuntimeError("the end sentinel cannot be read or advanced")

    def _refill(self) -> None:
        self._window.clear()
        remaining = len(self._source) - self._position
        if not remaining:
            return
        try:
            _, consumed = decode(
                self._view[self._position :],
                min(self._capacity, remaining),
                into=self._window,
            )
        except MalformedUTF8Error as exc:
            # Adds a byte offset to a code-point ordinal: a locator, not an index.
            telemetry.record_event(
                "decode.malformed",
                level="warning",
                data={"window_start": self._position, "ordinal": exc.position},
            )
            self._window.clear()
            raise exc.rebased(self._position) from exc
        self._position += consumed


__all__ = ["CodePointCursor", "CursorState", "Payload", "borrow_payload"]
