"""Stateless UTF-8 / UTF-32 transcoding and its error types."""

from .errors import (
    BufferBusyError,
    FatalInnerError,
    MalformedEncodingError,
    MalformedUTF8Error,
    MalformedUTF32Error,
)
from .transcode import CODE_POINT_LIMIT, decode, encode, encode_code_point

__all__ = [
    "CODE_POINT_LIMIT",
    "BufferBusyError",
    "FatalInnerError",
    "MalformedEncodingError",
    "MalformedUTF8Error",
    "MalformedUTF32Error",
    "decode",
    "encode",
    "encode_code_point",
]
