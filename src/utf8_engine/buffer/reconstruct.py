"""Reconstruct sessions: edit a buffer as code points, commit as UTF-8.

Typical use::

    with buffer.reconstruct() as session:
        for proxy in session:
            if proxy.original == ord("b"):
                proxy.delete()
            else:
                proxy.keep()

The session reads the original payload through a :class:`CodePointCursor`,
accumulates the edited code points in a bounded output window, encodes the
window into a private ``bytearray`` whenever it fills, and swaps that
``bytearray`` into the buffer in one assignment when the ``with`` block ends.
If the block raises, the cursor is abandoned early, or :meth:`abort` is
called, the original buffer is left byte-for-byte untouched.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, ContextManager, List, Optional, Tuple

from utf8_engine.codec import FatalInnerError, MalformedUTF32Error, encode
from utf8_engine.runtime import telemetry

from .iterator import CodePointCursor

if TYPE_CHECKING:
    from utf8_engine.runtime.telemetry import SpanHandle

    from .buffer import Utf8Buffer


def _checked(code_point: object) -> int:
    # Range is checked at flush time; only the type is checked here.
    if isinstance(code_point, bool) or not isinstance(code_point, int):
        raise TypeError(
            f"code points are ints, got {type(code_point).__name__}: {code_point!r}"
        )
    return code_point


class WriteProxy:
    """Handle on one position of an :class:`EditCursor`.

    Unless something is written through :attr:`value` (or :meth:`keep` is
    called) before the cursor advances, the character is dropped from the
    output. Code points passed to :meth:`insert` are emitted ahead of the
    slot either way.
    """

    def __init__(self, original: int) -> None:
        self._original = original
        self._value: Optional[int] = None
        self._inserted: List[int] = []
        self._live = True

    @property
    def original(self) -> int:
        return self._original

    @property
    def written(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> int:
        return self._original if self._value is None else self._value

    @value.setter
    def value(self, code_point: int) -> None:
        self._require_live()
        self._value = _checked(code_point)

    @property
    def inserted(self) -> Tuple[int, ...]:
        return tuple(self._inserted)

    def keep(self) -> "WriteProxy":
        self.value = self._original
        return self

    def delete(self) -> "WriteProxy":
        self._require_live()
        self._value = None
        return self

    def insert(self, *code_points: int) -> "WriteProxy":
        self._require_live()
        self._inserted.extend([_checked(code_point) for code_point in code_points])
        return self

    def settle(self) -> List[int]:
        """Retire the proxy and return what it contributes to the output."""

        self._require_live()
        self._live = False
        emitted = list(self._inserted)
        if self._value is not None:
            emitted.append(self._value)
        return emitted

    def __repr__(self) -> str:
        state = "kept" if self.written else "deleted"
        return f"WriteProxy(original={self._original:#x}, {state}, inserted={len(self._inserted)})"

    def _require_live(self) -> None:
        if not self._live:
            raise RuntimeError("write proxy is no longer attached to its cursor")


class EditCursor:
    """Single-pass editing cursor owned by a :class:`ReconstructSession`."""

    def __init__(
        self,
        session: "ReconstructSession",
        *,
        capacity: Optional[int] = None,
        end: bool = False,
    ) -> None:
        self._session = session
        self._is_end = end
        self._read: Optional[CodePointCursor] = None
        self._capacity = 0
        if not end:
            self._read = CodePointCursor.begin(session.target, capacity=capacity)
            self._capacity = self._read.capacity
        self._window: List[int] = []
        self._proxy: Optional[WriteProxy] = None
        self._pending_next = False
        self._closed = end
        self._completed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def completed(self) -> bool:
        """True once every original code point was visited and flushed."""

        return self._completed

    @property
    def at_end(self) -> bool:
        if self._read is None:
            return True
        return self._read.at_end

    @property
    def pending(self) -> Tuple[int, ...]:
        """Edited code points not yet encoded into the session output."""

        return tuple(self._window)

    def proxy(self) -> WriteProxy:
        self._require_open()
        if self._proxy is None:
            self._proxy = WriteProxy(self._reader().current())
        return self._proxy

    def advance(self) -> "EditCursor":
        proxy = self.proxy()
        self._proxy = None
        self._pending_next = False
        for code_point in proxy.settle():
            self._push(code_point)
        reader = self._reader()
        reader.advance()
        if reader.at_end:
            self.close()
        return self

    def close(self) -> None:
        """Flush if every position was visited, otherwise drop the partial output."""

        if self._closed:
            return
        if not self.at_end:
            self.abandon()
            return
        self._closed = True
        self._proxy = None
        self._flush()
        self._completed = True

    def abandon(self) -> None:
        """Close without flushing; pending output is discarded."""

        self._closed = True
        self._proxy = None
        self._pending_next = False
        self._window.clear()

    def __iter__(self) -> "EditCursor":
        return self

    def __next__(self) -> WriteProxy:
        if self._pending_next:
            self.advance()
        if self._closed:
            raise StopIteration
        if self.at_end:
            self.close()
            raise StopIteration
        proxy = self.proxy()
        self._pending_next = True
        return proxy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EditCursor):
            return NotImplemented
        if self._session is not other._session:
            return False
        if self._is_end or other._is_end:
            live = other if self._is_end else self
            return live._is_end or live.at_end
        return self._read == other._read

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self._is_end:
            return "EditCursor(end)"
        return f"EditCursor(read={self._read!r}, pending={len(self._window)})"

    def _reader(self) -> CodePointCursor:
        if self._read is None:
            raise RuntimeError("the end sentinel has no read side")
        return self._read

    def _require_open(self) -> None:
        if self._is_end:
            raise RuntimeError("the end sentinel cannot be dereferenced")
        if self._closed:
            raise RuntimeError("edit cursor is closed")

    def _push(self, code_point: int) -> None:
        self._window.append(code_point)
        if len(self._window) >= self._capacity:
            self._flush()

    def _flush(self) -> None:
        if not self._window:
            return
        try:
            encode(self._window, into=self._session.output)
        except MalformedUTF32Error as exc:
            self._session.mark_faulted()
            raise FatalInnerError("EditCursor.flush") from exc
        finally:
            self._window.clear()


class ReconstructSession(AbstractContextManager["ReconstructSession"]):
    """Scoped transaction turning code-point edits into one byte swap."""

    def __init__(self, target: "Utf8Buffer", *, capacity: Optional[int] = None) -> None:
        self.target = target
        self.output = bytearray()
        self.committed = False
        self._capacity = capacity
        self._cursor: Optional[EditCursor] = None
        self._active = False
        self._aborted = False
        self._faulted = False
        self._span_cm: Optional[ContextManager["SpanHandle"]] = None
        self._handle: Optional["SpanHandle"] = None

    def __enter__(self) -> "ReconstructSession":
        self.target._acquire(self)
        self._active = True
        self._span_cm = telemetry.span(
            "reconstruct::session",
            component="reconstruct",
            metadata={"buffer": self.target.name, "bytes": len(self.target)},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def begin(self) -> EditCursor:
        if not self._active:
            raise RuntimeError("reconstruct sessions must be entered with `with`")
        if self._cursor is not None:
            raise RuntimeError("a reconstruct session has a single edit cursor")
        self._cursor = EditCursor(self, capacity=self._capacity)
        return self._cursor

    def end(self) -> EditCursor:
        return EditCursor(self, end=True)

    def __iter__(self) -> EditCursor:
        return self.begin()

    def abort(self, reason: str = "aborted") -> None:
        """Discard every edit; the buffer is left as it was."""

        self._aborted = True
        if self._handle is not None:
            self._handle.add_metadata("abort_reason", reason)
        if self._cursor is not None:
            self._cursor.abandon()
        self.output.clear()

    def mark_faulted(self) -> None:
        self._faulted = True

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is None:
                self._finish()
            else:
                self._discard(f"{exc_type.__name__} raised in edit scope")
        except BaseException as error:
            self._release(type(error), error, error.__traceback__)
            raise
        self._release(exc_type, exc, tb)
        return False

    def _finish(self) -> None:
        cursor = self._cursor
        if self._aborted:
            self._discard("aborted")
            return
        if cursor is None:
            self._discard("no edit cursor")
            return
        if not cursor.closed and cursor.at_end:
            cursor.close()
        if self._faulted or not cursor.completed:
            self._discard("fault" if self._faulted else "abandoned")
            return

        before = len(self.target)
        self.target._replace(bytes(self.output), owner=self)
        self.committed = True
        telemetry.record_event(
            "reconstruct.commit",
            level="debug",
            data={"buffer": self.target.name, "before": before, "after": len(self.output)},
        )
        self.output = bytearray()

    def _discard(self, reason: str) -> None:
        if self._cursor is not None:
            self._cursor.abandon()
        self.output = bytearray()
        if self._handle is not None:
            self._handle.cancel(reason)
        telemetry.record_event(
            "reconstruct.abort",
            level="info",
            data={"buffer": self.target.name, "reason": reason},
        )

    def _release(self, exc_type, exc, tb) -> None:
        self._active = False
        self.target._release(self)
        if self._span_cm is not None:
            span_cm, self._span_cm = self._span_cm, None
            span_cm.__exit__(exc_type, exc, tb)


__all__ = ["EditCursor", "ReconstructSession", "WriteProxy"]
