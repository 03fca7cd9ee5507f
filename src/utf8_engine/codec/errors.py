"""Error types raised by the codec, cursors and reconstruct sessions."""

from __future__ import annotations

from typing import ClassVar, Literal, TypeVar

EncodingKind = Literal["utf8", "utf32"]

_E = TypeVar("_E", bound="MalformedEncodingError")


class MalformedEncodingError(ValueError):
    """A unit in the source violates the transcoding grammar.

    ``position`` is a diagnostic locator. The codec reports the ordinal of the
    failing code point; cursors may add a byte offset on top (see
    :meth:`rebased`), so it is not guaranteed to be an exact byte index.
    """

    kind: ClassVar[EncodingKind]

    def __init__(self, position: int) -> None:
        super().__init__(position)
        self._position = position

    @property
    def position(self) -> int:
        return self._position

    def rebased(self: _E, offset: int) -> _E:
        """Return a copy of this error with ``offset`` added to its position."""

        return type(self)(self._position + offset)

    def __str__(self) -> str:
        return f"{self.kind} bad formatted at {self._position}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(position={self._position})"


class MalformedUTF8Error(MalformedEncodingError):
    kind = "utf8"


class MalformedUTF32Error(MalformedEncodingError):
    kind = "utf32"


class FatalInnerError(RuntimeError):
    """An encode fault surfaced while a reconstruct session was flushing.

    The caller wrote a value outside the encodable range through a write
    proxy. The session cannot commit, so this always aborts the edit scope.
    """

    def __init__(self, site: str) -> None:
        super().__init__(site)
        self.site = site

    def __str__(self) -> str:
        return f"fatal inner error occurred at {self.site}"


class BufferBusyError(RuntimeError):
    """Raised when a buffer with an open reconstruct session is touched."""

    def __init__(self, message: str, *, buffer_name: str | None = None) -> None:
        super().__init__(message)
        self.buffer_name = buffer_name


__all__ = [
    "BufferBusyError",
    "EncodingKind",
    "FatalInnerError",
    "MalformedEncodingError",
    "MalformedUTF32Error",
    "MalformedUTF8Error",
]
