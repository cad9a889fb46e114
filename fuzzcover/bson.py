"""Parser for BSON documents, reporting values to a SAX handler."""

from __future__ import annotations

from .reader import EOF, ByteReader, InputFormat, ParseError

_BSON = InputFormat.BSON
_UNKNOWN_SIZE = -1


class BsonParser(ByteReader):
    """Reads one BSON document from the input and reports it as events.

    Malformed input raises :class:`~fuzzcover.reader.ParseError`; the parse
    methods return False when the handler asks to stop, or when a string
    element is missing its terminating byte.
    """

    def parse(self) -> bool:
        """Parse a document and report it as an object."""
        self.read_number(_BSON, "<i")  # document size, not needed
        if not self.sax.start_object(_UNKNOWN_SIZE):
            return False
        if not self._element_list(is_array=False):
            return False
        return self.sax.end_object()

    def _parse_array(self) -> bool:
        self.read_number(_BSON, "<i")
        if not self.sax.start_array(_UNKNOWN_SIZE):
            return False
        if not self._element_list(is_array=True):
            return False
        return self.sax.end_array()

    def _cstring(self) -> str:
        raw = bytearray()
        while True:
            self.get()
            self.expect_not_eof(_BSON, "cstring")
            if self.current == 0:
                return bytes(raw).decode("utf-8", errors="surrogateescape")
            raw.append(self.current)

    def _element_list(self, is_array: bool) -> bool:
        while True:
            element_type = self.get()
            if element_type == 0:
                return True
            self.expect_not_eof(_BSON, "element list")
            type_position = self.chars_read
            key = self._cstring()
            if not is_array and not self.sax.key(key):
                return False
            if not self._element(element_type, type_position):
                return False

    def _string(self) -> bool:
        length = int(self.read_number(_BSON, "<i"))
        if length < 1:
            raise self.error(
                112, _BSON, f"string length must be at least 1, is {length}", "string"
            )
        value = self.read_string(_BSON, length - 1)
        if self.get() == EOF:
            return False
        return self.sax.string(value)

    def _element(self, element_type: int, type_position: int) -> bool:
        sax = self.sax
        if element_type == 0x01:
            return sax.number_float(float(self.read_number(_BSON, "<d")), "")
        if element_type == 0x02:
            return self._string()
        if element_type == 0x03:
            return self.parse()
        if element_type == 0x04:
            return self._parse_array()
        if element_type == 0x08:
            return sax.boolean(self.get() != 0)
        if element_type == 0x0A:
            return sax.null()
        if element_type == 0x10:
            return sax.number_integer(int(self.read_number(_BSON, "<i")))
        if element_type == 0x12:
            return sax.number_integer(int(self.read_number(_BSON, "<q")))
        token = f"{element_type & 0xFF:02X}"
        raise ParseError(114, type_position, f"Unsupported BSON record type 0x{token}")