import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fuzzcover.msgpack import MsgpackParser
from fuzzcover.reader import DomBuilder, ParseError, SaxHandler


def _parse(data: bytes):
    builder = DomBuilder()
    assert MsgpackParser(data, builder).parse() is True
    return builder.result()


class _Recorder(SaxHandler):
    def __init__(self):
        self.events = []

    def null(self):
        self.events.append(("null",))
        return True

    def boolean(self, value):
        self.events.append(("boolean", value))
        return True

    def number_unsigned(self, value):
        self.events.append(("unsigned", value))
        return True

    def start_array(self, size):
        self.events.append(("start_array", size))
        return True

    def end_array(self):
        self.events.append(("end_array",))
        return True


class _StopOnArray(SaxHandler):
    def start_array(self, size):
        return False


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x05", 5),
        (b"\x7f", 127),
        (b"\xff", -1),
        (b"\xe0", -32),
        (b"\xc0", None),
        (b"\xc2", False),
        (b"\xc3", True),
        (b"\xcd\x01\x00", 256),
        (b"\xd0\x80", -128),
    ],
)
def test_scalars(data, expected):
    assert _parse(data) == expected


def test_int64_and_uint64():
    assert _parse(b"\xd3" + struct.pack(">q", -5)) == -5
    assert _parse(b"\xcf" + struct.pack(">Q", 2**64 - 1)) == 2**64 - 1


def test_floats():
    assert _parse(b"\xcb" + struct.pack(">d", 2.25)) == 2.25
    assert _parse(b"\xca" + struct.pack(">f", 1.5)) == 1.5


def test_strings():
    assert _parse(b"\xa3abc") == "abc"
    assert _parse(b"\xd9\x03abc") == "abc"
    assert _parse(b"\xda\x00\x02hi") == "hi"
    assert _parse(b"\xa0") == ""


def test_arrays_and_maps():
    assert _parse(b"\x93\x01\x02\x03") == [1, 2, 3]
    assert _parse(b"\xdc\x00\x02\xc3\xc2") == [True, False]
    assert _parse(b"\x81\xa1a\x01") == {"a": 1}
    assert _parse(b"\xde\x00\x01\xa1k\x90") == {"k": []}


def test_nested_structure():
    data = b"\x82\xa1x\x92\x01\xc0\xa1y\x81\xa1z\xa2ok"
    assert _parse(data) == {"x": [1, None], "y": {"z": "ok"}}


def test_event_order():
    recorder = _Recorder()
    assert MsgpackParser(b"\x92\xc0\xc3", recorder).parse() is True
    assert recorder.events == [
        ("start_array", 2),
        ("null",),
        ("boolean", True),
        ("end_array",),
    ]


def test_handler_can_stop():
    assert MsgpackParser(b"\x91\x01", _StopOnArray()).parse() is False


def test_empty_input_raises():
    with pytest.raises(ParseError) as info:
        _parse(b"")
    assert info.value.error_id == 110
    assert "unexpected end of input" in info.value.message


def test_invalid_byte_raises():
    with pytest.raises(ParseError) as info:
        _parse(b"\xc1")
    assert info.value.error_id == 112
    assert "invalid byte: 0xC1" in info.value.message
    assert "MessagePack" in info.value.message


def test_non_string_key_raises():
    with pytest.raises(ParseError) as info:
        _parse(b"\x81\x01\x01")
    assert info.value.error_id == 113


def test_truncated_string_raises():
    with pytest.raises(ParseError) as info:
        _parse(b"\xa3ab")
    assert info.value.error_id == 110


def test_truncated_array_raises():
    with pytest.raises(ParseError) as info:
        _parse(b"\x92\x01")
    assert info.value.error_id == 110


@given(st.integers(min_value=0, max_value=2**64 - 1))
def test_uint64_round_trip(value):
    assert _parse(b"\xcf" + struct.pack(">Q", value)) == value


@given(st.integers(min_value=-(2**63), max_value=2**63 - 1))
def test_int64_round_trip(value):
    assert _parse(b"\xd3" + struct.pack(">q", value)) == value


@given(st.text(max_size=40))
def test_str16_round_trip(text):
    raw = text.encode("utf-8")
    assert _parse(b"\xda" + struct.pack(">H", len(raw)) + raw) == text