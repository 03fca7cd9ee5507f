"""Bounded-memory UTF-8 transcoding with atomic code-point editing."""

from .buffer import CodePointCursor, EditCursor, ReconstructSession, Utf8Buffer, WriteProxy
from .codec import (
    BufferBusyError,
    FatalInnerError,
    MalformedEncodingError,
    MalformedUTF8Error,
    MalformedUTF32Error,
    decode,
    encode,
)

__all__ = [
    "BufferBusyError",
    "CodePointCursor",
    "EditCursor",
    "FatalInnerError",
    "MalformedEncodingError",
    "MalformedUTF8Error",
    "MalformedUTF32Error",
    "ReconstructSession",
    "Utf8Buffer",
    "WriteProxy",
    "decode",
    "encode",
]

__version__ = "0.1.0"
