"""Owning UTF-8 byte buffer with lazy decode and reconstruct sessions."""

from __future__ import annotations

from typing import Iterable, List, Optional, Union

from utf8_engine.codec import (
    BufferBusyError,
    MalformedUTF32Error,
    encode,
    encode_code_point,
)

from .iterator import CodePointCursor
from .reconstruct import ReconstructSession

BytesLike = Union[bytes, bytearray, memoryview]

UNICODE_MAX = 0x10FFFF


class Utf8Buffer:
    """UTF-8 text stored as bytes; only ever replaced wholesale.

    The payload is not validated on construction. Malformed bytes surface as
    :class:`~utf8_engine.codec.MalformedUTF8Error` when something decodes
    them.
    """

    def __init__(self, data: BytesLike = b"", *, name: str = "default") -> None:
        self.name = name
        self._data = bytes(data)
        self._version = 0
        self._session: Optional[ReconstructSession] = None

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Utf8Buffer":
        return cls.from_code_points(map(ord, text), name=name)

    @classmethod
    def from_code_points(
        cls, code_points: Iterable[int], *, name: str = "default"
    ) -> "Utf8Buffer":
        data, _ = encode(code_points)
        return cls(data, name=name)

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def version(self) -> int:
        """Bumped on every replacement of the payload."""

        return self._version

    @property
    def busy(self) -> bool:
        return self._session is not None

    def append(self, other: Union["Utf8Buffer", BytesLike]) -> "Utf8Buffer":
        payload = other.data if isinstance(other, Utf8Buffer) else bytes(other)
        self._store(self._data + payload)
        return self

    def push_code_point(self, code_point: int) -> "Utf8Buffer":
        self._store(self._data + encode_code_point(code_point))
        return self

    def begin(self, *, capacity: Optional[int] = None) -> CodePointCursor:
        return CodePointCursor.begin(self, capacity=capacity)

    def end(self) -> CodePointCursor:
        return CodePointCursor.end(self)

    def __iter__(self) -> CodePointCursor:
        return self.begin()

    def code_points(self, *, capacity: Optional[int] = None) -> List[int]:
        return list(self.begin(capacity=capacity))

    def to_text(self) -> str:
        """Decode into a ``str``.

        ``str`` stops at U+10FFFF while the codec carries 21 bits, so a code
        point above that raises :class:`MalformedUTF32Error` with its ordinal.
        """

        chars = []
        for ordinal, code_point in enumerate(self):
            if code_point > UNICODE_MAX:
                raise MalformedUTF32Error(ordinal)
            chars.append(chr(code_point))
        return "".join(chars)

    def reconstruct(self, *, capacity: Optional[int] = None) -> ReconstructSession:
        """Return a session that rewrites this buffer when its ``with`` block ends."""

        return ReconstructSession(self, capacity=capacity)

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Utf8Buffer):
            return self._data == other._data
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._data == bytes(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Utf8Buffer(name={self.name!r}, data={self._data!r})"

    def _store(self, data: bytes) -> None:
        if self._session is not None:
            raise BufferBusyError(
                f"Buffer '{self.name}' is locked by an open reconstruct session",
                buffer_name=self.name,
            )
        self._data = data
        self._version += 1

    def _acquire(self, session: ReconstructSession) -> None:
        if self._session is not None:
            raise BufferBusyError(
                f"Buffer '{self.name}' already has an open reconstruct session",
                buffer_name=self.name,
            )
        self._session = session

    def _release(self, session: ReconstructSession) -> None:
        if self._session is session:
            self._session = None

    def _replace(self, data: bytes, *, owner: ReconstructSession) -> None:
        if self._session is not owner:
            raise BufferBusyError(
                f"Buffer '{self.name}' is not held by the committing session",
                buffer_name=self.name,
            )
        self._data = data
        self._version += 1


__all__ = ["BytesLike", "Utf8Buffer"]
