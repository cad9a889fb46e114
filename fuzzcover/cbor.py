"""Parser for CBOR values, reporting values to a SAX handler."""

from __future__ import annotations

import math

from .reader import EOF, ByteReader, InputFormat

_CBOR = InputFormat.CBOR
_UINT_FORMATS = (">B", ">H", ">I", ">Q")
_INDEFINITE = -1
_MAX_U64 = (1 << 64) - 1
_BREAK = 0xFF


def _size(length: int) -> int:
    # The largest 64-bit length coincides with the indefinite-length marker.
    return _INDEFINITE if length == _MAX_U64 else length


def _half_to_float(half: int) -> float:
    exponent = (half >> 10) & 0x1F
    mantissa = half & 0x3FF
    if exponent == 0:
        value = math.ldexp(mantissa, -24)
    elif exponent == 31:
        value = math.inf if mantissa == 0 else math.nan
    else:
        value = math.ldexp(mantissa + 1024, exponent - 25)
    return -value if half & 0x8000 else value


class CborParser(ByteReader):
    """Reads one CBOR value from the input and reports it as events.

    Malformed input raises :class:`~fuzzcover.reader.ParseError`; the parse
    returns False when the handler asks to stop.
    """

    def parse(self) -> bool:
        """Parse the next value in the input."""
        return self._parse_value(get_char=True)

    def _read_uint(self, width_index: int) -> int:
        return int(self.read_number(_CBOR, _UINT_FORMATS[width_index]))

    def _parse_value(self, get_char: bool) -> bool:
        byte = self.get() if get_char else self.current
        sax = self.sax

        if byte == EOF:
            self.expect_not_eof(_CBOR, "value")
        if byte <= 0x17:
            return sax.number_unsigned(byte)
        if 0x18 <= byte <= 0x1B:
            return sax.number_unsigned(self._read_uint(byte - 0x18))
        if 0x20 <= byte <= 0x37:
            return sax.number_integer(0x20 - 1 - byte)
        if 0x38 <= byte <= 0x3B:
            number = self._read_uint(byte - 0x38)
            if number >= 1 << 63:
                number -= 1 << 64
            return sax.number_integer(-1 - number)
        if 0x60 <= byte <= 0x7B or byte == 0x7F:
            return sax.string(self._read_cbor_string())
        if 0x80 <= byte <= 0x97:
            return self._array(byte & 0x1F)
        if 0x98 <= byte <= 0x9B:
            return self._array(_size(self._read_uint(byte - 0x98)))
        if byte == 0x9F:
            return self._array(_INDEFINITE)
        if 0xA0 <= byte <= 0xB7:
            return self._object(byte & 0x1F)
        if 0xB8 <= byte <= 0xBB:
            return self._object(_size(self._read_uint(byte - 0xB8)))
        if byte == 0xBF:
            return self._object(_INDEFINITE)
        if byte == 0xF4:
            return sax.boolean(False)
        if byte == 0xF5:
            return sax.boolean(True)
        if byte == 0xF6:
            return sax.null()
        if byte == 0xF9:
            self.get()
            self.expect_not_eof(_CBOR, "number")
            high = self.current
            self.get()
            self.expect_not_eof(_CBOR, "number")
            return sax.number_float(_half_to_float((high << 8) + self.current), "")
        if byte == 0xFA:
            return sax.number_float(float(self.read_number(_CBOR, ">f")), "")
        if byte == 0xFB:
            return sax.number_float(float(self.read_number(_CBOR, ">d")), "")

        raise self.error(112, _CBOR, f"invalid byte: 0x{self.token_string()}", "value")

    def _read_cbor_string(self) -> str:
        return self._read_string_bytes().decode("utf-8", errors="surrogateescape")

    def _read_string_bytes(self) -> bytes:
        self.expect_not_eof(_CBOR, "string")
        byte = self.current
        if 0x60 <= byte <= 0x77:
            length = byte & 0x1F
        elif 0x78 <= byte <= 0x7B:
            length = self._read_uint(byte - 0x78)
        elif byte == 0x7F:
            chunks = bytearray()
            while self.get() != _BREAK:
                chunks += self._read_string_bytes()
            return bytes(chunks)
        else:
            raise self.error(
                113,
                _CBOR,
                "expected length specification (0x60-0x7B) or indefinite string type "
                f"(0x7F); last byte: 0x{self.token_string()}",
                "string",
            )
        text = self.read_string(_CBOR, length)
        return text.encode("utf-8", errors="surrogateescape")

    def _array(self, size: int) -> bool:
        if not self.sax.start_array(size):
            return False
        if size != _INDEFINITE:
            for _ in range(size):
                if not self._parse_value(get_char=True):
                    return False
        else:
            while self.get() != _BREAK:
                if not self._parse_value(get_char=False):
                    return False
        return self.sax.end_array()

    def _member(self) -> bool:
        if not self.sax.key(self._read_cbor_string()):
            return False
        return self._parse_value(get_char=True)

    def _object(self, size: int) -> bool:
        if not self.sax.start_object(size):
            return False
        if size != _INDEFINITE:
            for _ in range(size):
                self.get()
                if not self._member():
                    return False
        else:
            while self.get() != _BREAK:
                if not self._member():
                    return False
        return self.sax.end_object()