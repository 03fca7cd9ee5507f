"""Chunked UTF-8 <-> UTF-32 transcoding over plain integer sequences.

Both directions are pure: they only touch their arguments, report how much of
the source they consumed, and can be resumed by handing them the unread tail
(a ``memoryview`` slice works without copying).
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import MalformedUTF8Error, MalformedUTF32Error

CODE_POINT_LIMIT = 1 << 21

# (exclusive upper bound of the lead byte, sequence width, payload mask)
_LEAD_FORMS: Tuple[Tuple[int, int, int], ...] = (
    (0x80, 1, 0x7F),
    (0xC0, 0, 0x00),  # continuation byte in lead position
    (0xE0, 2, 0x1F),
    (0xF0, 3, 0x0F),
    (0xF8, 4, 0x07),
)


def _next_unit(units: Iterator[int], ordinal: int) -> int:
    unit = next(units, None)
    if unit is None:
        raise MalformedUTF8Error(ordinal)
    return unit


def _lead_form(lead: int, ordinal: int) -> Tuple[int, int]:
    for bound, width, mask in _LEAD_FORMS:
        if lead < bound:
            if not width:
                break
            return width, lead & mask
    raise MalformedUTF8Error(ordinal)


def decode(
    source: Iterable[int],
    max_count: Optional[int] = None,
    *,
    into: Optional[List[int]] = None,
) -> Tuple[List[int], int]:
    """Decode up to ``max_count`` code points from UTF-8 ``source``.

    Returns the list the code points were appended to (``into`` when given)
    and the number of source bytes consumed. Raises
    :class:`MalformedUTF8Error` carrying the ordinal of the code point being
    decoded when a lead byte is invalid, a continuation byte does not match
    ``10xxxxxx``, or the source ends mid-sequence.
    """

    out = [] if into is None else into
    units = iter(source)
    consumed = 0
    ordinal = 0
    while max_count is None or ordinal < max_count:
        lead = next(units, None)
        if lead is None:
            break
        width, value = _lead_form(lead, ordinal)
        for _ in range(width - 1):
            unit = _next_unit(units, ordinal)
            if unit & 0xC0 != 0x80:
                raise MalformedUTF8Error(ordinal)
            value = value << 6 | unit & 0x3F
        out.append(value)
        consumed += width
        ordinal += 1
    return out, consumed


def encode_code_point(code_point: int, ordinal: int = 0) -> bytes:
    """Return the shortest UTF-8 form of ``code_point``."""

    if code_point < 0 or code_point >= CODE_POINT_LIMIT:
        raise MalformedUTF32Error(ordinal)
    if code_point < 0x80:
        return bytes((code_point,))
    if code_point < 0x800:
        return bytes((0xC0 | code_point >> 6, 0x80 | code_point & 0x3F))
    if code_point < 0x10000:
        return bytes(
            (
                0xE0 | code_point >> 12,
                0x80 | code_point >> 6 & 0x3F,
                0x80 | code_point & 0x3F,
            )
        )
    return bytes(
        (
            0xF0 | code_point >> 18,
            0x80 | code_point >> 12 & 0x3F,
            0x80 | code_point >> 6 & 0x3F,
            0x80 | code_point & 0x3F,
        )
    )


def encode(
    source: Iterable[int],
    max_count: Optional[int] = None,
    *,
    into: Optional[bytearray] = None,
) -> Tuple[bytes | bytearray, int]:
    """Encode up to ``max_count`` code points from ``source`` as UTF-8.

    Returns the encoded bytes (or ``into``, extended in place) and the number
    of code points consumed. A value outside ``[0, 2**21)`` raises
    :class:`MalformedUTF32Error` with its ordinal.
    """

    out = bytearray() if into is None else into
    consumed = 0
    for code_point in islice(source, max_count):
        out += encode_code_point(code_point, consumed)
        consumed += 1
    if into is None:
        return bytes(out), consumed
    return out, consumed


__all__ = ["CODE_POINT_LIMIT", "decode", "encode", "encode_code_point"]
