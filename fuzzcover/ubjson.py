"""Parser for UBJSON values, reporting values to a SAX handler."""

from __future__ import annotations

from .reader import EOF, ByteReader, InputFormat

_UBJSON = InputFormat.UBJSON
_UNKNOWN_SIZE = -1
_MAX_U64 = (1 << 64) - 1
_NO_TYPE = 0

_LENGTH_FORMATS = {
    ord("U"): ">B",
    ord("i"): ">b",
    ord("I"): ">h",
    ord("l"): ">i",
    ord("L"): ">q",
}

_T, _F, _Z = ord("T"), ord("F"), ord("Z")
_CHAR, _STRING = ord("C"), ord("S")
_FLOAT32, _FLOAT64 = ord("d"), ord("D")
_ARRAY_OPEN, _ARRAY_CLOSE = ord("["), ord("]")
_OBJECT_OPEN, _OBJECT_CLOSE = ord("{"), ord("}")
_TYPE_MARK, _COUNT_MARK = ord("$"), ord("#")
_NOOP = ord("N")


class UbjsonParser(ByteReader):
    """Reads one UBJSON value from the input and reports it as events.

    Malformed input raises :class:`~fuzzcover.reader.ParseError`; the parse
    returns False when the handler asks to stop.
    """

    def parse(self) -> bool:
        """Parse the next value in the input, skipping no-op markers."""
        return self._parse_value(get_char=True)

    def _parse_value(self, get_char: bool) -> bool:
        return self._value(self.get_ignore_noop() if get_char else self.current)

    def _value(self, prefix: int) -> bool:
        sax = self.sax
        if prefix == EOF:
            self.expect_not_eof(_UBJSON, "value")
        if prefix == _T:
            return sax.boolean(True)
        if prefix == _F:
            return sax.boolean(False)
        if prefix == _Z:
            return sax.null()
        if prefix == ord("U"):
            return sax.number_unsigned(int(self.read_number(_UBJSON, ">B")))
        if prefix in _LENGTH_FORMATS:
            return sax.number_integer(int(self.read_number(_UBJSON, _LENGTH_FORMATS[prefix])))
        if prefix == _FLOAT32:
            return sax.number_float(float(self.read_number(_UBJSON, ">f")), "")
        if prefix == _FLOAT64:
            return sax.number_float(float(self.read_number(_UBJSON, ">d")), "")
        if prefix == _CHAR:
            self.get()
            self.expect_not_eof(_UBJSON, "char")
            if self.current > 127:
                raise self.error(
                    113,
                    _UBJSON,
                    "byte after 'C' must be in range 0x00..0x7F; "
                    f"last byte: 0x{self.token_string()}",
                    "char",
                )
            return sax.string(chr(self.current))
        if prefix == _STRING:
            return sax.string(self._read_ubjson_string(get_char=True))
        if prefix == _ARRAY_OPEN:
            return self._array()
        if prefix == _OBJECT_OPEN:
            return self._object()

        raise self.error(112, _UBJSON, f"invalid byte: 0x{self.token_string()}", "value")

    def _read_ubjson_string(self, get_char: bool) -> str:
        if get_char:
            self.get()
        self.expect_not_eof(_UBJSON, "value")
        fmt = _LENGTH_FORMATS.get(self.current)
        if fmt is None:
            raise self.error(
                113,
                _UBJSON,
                "expected length type specification (U, i, I, l, L); "
                f"last byte: 0x{self.token_string()}",
                "string",
            )
        length = int(self.read_number(_UBJSON, fmt))
        return self.read_string(_UBJSON, length)

    def _size_value(self) -> int:
        fmt = _LENGTH_FORMATS.get(self.get_ignore_noop())
        if fmt is None:
            raise self.error(
                113,
                _UBJSON,
                "expected length type specification (U, i, I, l, L) after '#'; "
                f"last byte: 0x{self.token_string()}",
                "size",
            )
        size = int(self.read_number(_UBJSON, fmt)) & _MAX_U64
        # A count wrapping to the largest size reads as "no count given".
        return _UNKNOWN_SIZE if size == _MAX_U64 else size

    def _size_and_type(self) -> tuple[int, int]:
        self.get_ignore_noop()
        if self.current == _TYPE_MARK:
            value_type = self.get()
            self.expect_not_eof(_UBJSON, "type")
            self.get_ignore_noop()
            if self.current != _COUNT_MARK:
                self.expect_not_eof(_UBJSON, "value")
                raise self.error(
                    112,
                    _UBJSON,
                    f"expected '#' after type information; last byte: 0x{self.token_string()}",
                    "size",
                )
            return self._size_value(), value_type
        if self.current == _COUNT_MARK:
            return self._size_value(), _NO_TYPE
        return _UNKNOWN_SIZE, _NO_TYPE

    def _array(self) -> bool:
        size, value_type = self._size_and_type()
        sax = self.sax
        if size != _UNKNOWN_SIZE:
            if not sax.start_array(size):
                return False
            if value_type != _NO_TYPE:
                if value_type != _NOOP:
                    for _ in range(size):
                        if not self._value(value_type):
                            return False
            else:
                for _ in range(size):
                    if not self._parse_value(get_char=True):
                        return False
        else:
            if not sax.start_array(_UNKNOWN_SIZE):
                return False
            while self.current != _ARRAY_CLOSE:
                if not self._parse_value(get_char=False):
                    return False
                self.get_ignore_noop()
        return sax.end_array()

    def _object(self) -> bool:
        size, value_type = self._size_and_type()
        sax = self.sax
        if size != _UNKNOWN_SIZE:
            if not sax.start_object(size):
                return False
            for _ in range(size):
                if not sax.key(self._read_ubjson_string(get_char=True)):
                    return False
                if value_type != _NO_TYPE:
                    if not self._value(value_type):
                        return False
                elif not self._parse_value(get_char=True):
                    return False
        else:
            if not sax.start_object(_UNKNOWN_SIZE):
                return False
            while self.current != _OBJECT_CLOSE:
                if not sax.key(self._read_ubjson_string(get_char=False)):
                    return False
                if not self._parse_value(get_char=True):
                    return False
                self.get_ignore_noop()
        return sax.end_object()