import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fuzzcover.binary import (
    from_bson,
    from_cbor,
    from_msgpack,
    from_ubjson,
    parse,
    sax_parse,
)
from fuzzcover.reader import InputFormat, ParseError, SaxHandler


class _Recorder(SaxHandler):
    def __init__(self, stop_on=None):
        self.events = []
        self.stop_on = stop_on

    def _record(self, name, *args):
        self.events.append((name, *args))
        return name != self.stop_on

    def null(self):
        return self._record("null")

    def boolean(self, value):
        return self._record("boolean", value)

    def number_unsigned(self, value):
        return self._record("number_unsigned", value)

    def number_integer(self, value):
        return self._record("number_integer", value)

    def start_array(self, size):
        return self._record("start_array", size)

    def end_array(self):
        return self._record("end_array")


def test_cbor_simple_values():
    assert from_cbor(b"\xf5") is True
    assert from_cbor(b"\xf4") is False
    assert from_cbor(b"\xf6") is None
    assert from_cbor(b"\x18\x64") == 0x64


def test_msgpack_array():
    assert from_msgpack(b"\x93\x01\x02\x03") == [1, 2, 3]


def test_ubjson_counted_array():
    assert from_ubjson(b"[#U\x02i\x01i\x02") == [1, 2]


def test_bson_document():
    doc = struct.pack("<i", 12) + b"\x10a\x00" + struct.pack("<i", 1) + b"\x00"
    assert from_bson(doc) == {"a": 1}


def test_parse_dispatches_by_format():
    assert parse(b"\xc3", InputFormat.MSGPACK) is True
    assert parse(b"T", InputFormat.UBJSON) is True


def test_strict_rejects_trailing_bytes():
    with pytest.raises(ParseError) as info:
        from_cbor(b"\xf5\x00")
    assert info.value.error_id == 110
    assert info.value.message == (
        "syntax error while parsing CBOR value: expected end of input; last byte: 0x00"
    )


def test_non_strict_ignores_trailing_bytes():
    assert from_cbor(b"\xf5\x00", strict=False) is True
    assert from_msgpack(b"\x01\x02", strict=False) == 1


def test_ubjson_strict_allows_trailing_noops():
    assert from_ubjson(b"TNNN") is True
    with pytest.raises(ParseError) as info:
        from_ubjson(b"TNT")
    assert info.value.error_id == 110


def test_empty_input_raises():
    for decode in (from_cbor, from_msgpack, from_ubjson, from_bson):
        with pytest.raises(ParseError) as info:
            decode(b"")
        assert info.value.error_id == 110
        assert "unexpected end of input" in info.value.message


def test_sax_parse_reports_events():
    recorder = _Recorder()
    assert sax_parse(b"\x92\xc0\x05", InputFormat.MSGPACK, recorder) is True
    assert recorder.events == [
        ("start_array", 2),
        ("null",),
        ("number_unsigned", 5),
        ("end_array",),
    ]


def test_sax_stop_returns_false_without_strict_check():
    recorder = _Recorder(stop_on="null")
    # Trailing data is not checked once the handler has stopped the parse.
    assert sax_parse(b"\x92\xc0\x05\xff", InputFormat.MSGPACK, recorder) is False
    assert recorder.events[-1] == ("null",)


def test_bson_unterminated_string_gives_no_value():
    doc = struct.pack("<i", 20) + b"\x02k\x00" + struct.pack("<i", 2) + b"a"
    assert sax_parse(doc, InputFormat.BSON, SaxHandler()) is False
    with pytest.raises(ValueError):
        from_bson(doc)


def test_invalid_byte_error():
    with pytest.raises(ParseError) as info:
        from_msgpack(b"\xc1")
    assert info.value.error_id == 112


@given(st.integers(min_value=0, max_value=(1 << 64) - 1))
def test_cbor_uint64_round_trip(number):
    assert from_cbor(b"\x1b" + struct.pack(">Q", number)) == number


@given(st.integers(min_value=-(1 << 63), max_value=(1 << 63) - 1))
def test_msgpack_int64_round_trip(number):
    assert from_msgpack(b"\xd3" + struct.pack(">q", number)) == number


@given(st.text(max_size=40))
def test_ubjson_string_round_trip(text):
    raw = text.encode("utf-8", errors="surrogatepass")
    if len(raw) > 255 or any(0xD800 <= ord(c) <= 0xDFFF for c in text):
        raw = text.encode("ascii", errors="ignore")[:255]
        text = raw.decode("ascii")
    assert from_ubjson(b"SU" + bytes((len(raw),)) + raw) == text


@given(st.lists(st.booleans(), max_size=23))
def test_cbor_bool_array_round_trip(values):
    data = bytes((0x80 + len(values),)) + bytes(0xF5 if v else 0xF4 for v in values)
    assert from_cbor(data) == values