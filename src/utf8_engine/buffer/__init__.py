"""Byte buffer, decode cursor and reconstruct session."""

from .buffer import BytesLike, Utf8Buffer
from .iterator import CodePointCursor, CursorState
from .reconstruct import EditCursor, ReconstructSession, WriteProxy

__all__ = [
    "BytesLike",
    "CodePointCursor",
    "CursorState",
    "EditCursor",
    "ReconstructSession",
    "Utf8Buffer",
    "WriteProxy",
]
