import pytest

from utf8_engine.buffer import CodePointCursor, Utf8Buffer
from utf8_engine.codec import MalformedUTF32Error


def test_from_text_encodes_utf8() -> None:
    buffer = Utf8Buffer.from_text("café")

    assert buffer.data == b"caf\xc3\xa9"
    assert len(buffer) == 5
    assert buffer.to_text() == "café"


def test_from_code_points() -> None:
    buffer = Utf8Buffer.from_code_points([0x1F600, 0x41])

    assert bytes(buffer) == b"\xf0\x9f\x98\x80A"


def test_append_accepts_bytes_and_buffers() -> None:
    buffer = Utf8Buffer(b"ab")

    buffer.append(b"c").append(bytearray(b"d")).append(Utf8Buffer.from_text("é"))

    assert buffer.to_text() == "abcdé"
    assert buffer.version == 3


def test_push_code_point() -> None:
    buffer = Utf8Buffer()

    buffer.push_code_point(0x24).push_code_point(0x20AC)

    assert bytes(buffer) == b"$\xe2\x82\xac"


def test_push_out_of_range_code_point_leaves_buffer_unchanged() -> None:
    buffer = Utf8Buffer(b"x")

    with pytest.raises(MalformedUTF32Error) as info:
        buffer.push_code_point(0x200000)

    assert info.value.position == 0
    assert bytes(buffer) == b"x"
    assert buffer.version == 0


def test_equality() -> None:
    buffer = Utf8Buffer.from_text("abc")

    assert buffer == Utf8Buffer(b"abc")
    assert buffer == b"abc"
    assert buffer == bytearray(b"abc")
    assert buffer != Utf8Buffer(b"abd")
    assert buffer != "abc"


def test_iteration_yields_code_point_cursor() -> None:
    buffer = Utf8Buffer.from_text("hé")

    assert isinstance(iter(buffer), CodePointCursor)
    assert list(buffer) == [0x68, 0xE9]
    assert buffer.code_points(capacity=1) == [0x68, 0xE9]


def test_to_text_rejects_code_points_beyond_unicode() -> None:
    buffer = Utf8Buffer.from_code_points([0x41, 0x1FFFFF])

    assert buffer.code_points() == [0x41, 0x1FFFFF]
    with pytest.raises(MalformedUTF32Error) as info:
        buffer.to_text()

    assert info.value.position == 1


def test_to_text_accepts_the_last_unicode_scalar() -> None:
    assert Utf8Buffer.from_code_points([0x10FFFF]).to_text() == "\U0010ffff"
