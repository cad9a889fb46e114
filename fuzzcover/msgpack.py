"""Parser for MessagePack values, reporting values to a SAX handler."""

from __future__ import annotations

from .reader import EOF, ByteReader, InputFormat

_MSGPACK = InputFormat.MSGPACK
_UINT_FORMATS = (">B", ">H", ">I", ">Q")
_INT_FORMATS = (">b", ">h", ">i", ">q")


class MsgpackParser(ByteReader):
    """Reads one MessagePack value from the input and reports it as events.

    Malformed input raises :class:`~fuzzcover.reader.ParseError`; the parse
    returns False when the handler asks to stop.
    """

    def parse(self) -> bool:
        """Parse the next value in the input."""
        return self._parse_value()

    def _read_uint(self, width_index: int) -> int:
        return int(self.read_number(_MSGPACK, _UINT_FORMATS[width_index]))

    def _read_int(self, width_index: int) -> int:
        return int(self.read_number(_MSGPACK, _INT_FORMATS[width_index]))

    def _parse_value(self) -> bool:
        byte = self.get()
        sax = self.sax

        if byte == EOF:
            self.expect_not_eof(_MSGPACK, "value")
        if byte <= 0x7F:
            return sax.number_unsigned(byte)
        if 0x80 <= byte <= 0x8F:
            return self._object(byte & 0x0F)
        if 0x90 <= byte <= 0x9F:
            return self._array(byte & 0x0F)
        if 0xA0 <= byte <= 0xBF or 0xD9 <= byte <= 0xDB:
            return sax.string(self._read_msgpack_string())
        if byte == 0xC0:
            return sax.null()
        if byte == 0xC2:
            return sax.boolean(False)
        if byte == 0xC3:
            return sax.boolean(True)
        if byte == 0xCA:
            return sax.number_float(float(self.read_number(_MSGPACK, ">f")), "")
        if byte == 0xCB:
            return sax.number_float(float(self.read_number(_MSGPACK, ">d")), "")
        if 0xCC <= byte <= 0xCF:
            return sax.number_unsigned(self._read_uint(byte - 0xCC))
        if 0xD0 <= byte <= 0xD3:
            return sax.number_integer(self._read_int(byte - 0xD0))
        if byte == 0xDC:
            return self._array(self._read_uint(1))
        if byte == 0xDD:
            return self._array(self._read_uint(2))
        if byte == 0xDE:
            return self._object(self._read_uint(1))
        if byte == 0xDF:
            return self._object(self._read_uint(2))
        if byte >= 0xE0:
            return sax.number_integer(byte - 0x100)

        raise self.error(112, _MSGPACK, f"invalid byte: 0x{self.token_string()}", "value")

    def _read_msgpack_string(self) -> str:
        self.expect_not_eof(_MSGPACK, "string")
        byte = self.current
        if 0xA0 <= byte <= 0xBF:
            length = byte & 0x1F
        elif 0xD9 <= byte <= 0xDB:
            length = self._read_uint(byte - 0xD9)
        else:
            raise self.error(
                113,
                _MSGPACK,
                "expected length specification (0xA0-0xBF, 0xD9-0xDB); "
                f"last byte: 0x{self.token_string()}",
                "string",
            )
        return self.read_string(_MSGPACK, length)

    def _array(self, size: int) -> bool:
        if not self.sax.start_array(size):
            return False
        for _ in range(size):
            if not self._parse_value():
                return False
        return self.sax.end_array()

    def _object(self, size: int) -> bool:
        if not self.sax.start_object(size):
            return False
        for _ in range(size):
            self.get()
            if not self.sax.key(self._read_msgpack_string()):
                return False
            if not self._parse_value():
                return False
        return self.sax.end_object()