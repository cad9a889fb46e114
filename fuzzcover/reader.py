"""Byte-level reading shared by the binary format parsers, and SAX event sinks."""

from __future__ import annotations

import enum
import struct
from typing import Any

EOF = -1
"""Value of :attr:`ByteReader.current` once the input is exhausted."""

_NOOP = ord("N")


class InputFormat(enum.Enum):
    """Binary input formats; the value is the name used in error messages."""

    CBOR = "CBOR"
    MSGPACK = "MessagePack"
    UBJSON = "UBJSON"
    BSON = "BSON"


class ParseError(Exception):
    """Raised when binary input is malformed or ends too early."""

    def __init__(self, error_id: int, position: int, message: str) -> None:
        super().__init__(f"parse error {error_id} at byte {position}: {message}")
        self.error_id = error_id
        self.position = position
        self.message = message


class SaxHandler:
    """Receives parse events; a method returning False stops the parse."""

    def null(self) -> bool:
        return True

    def boolean(self, value: bool) -> bool:
        return True

    def number_integer(self, value: int) -> bool:
        return True

    def number_unsigned(self, value: int) -> bool:
        return True

    def number_float(self, value: float, text: str) -> bool:
        return True

    def string(self, value: str) -> bool:
        return True

    def start_object(self, size: int) -> bool:
        return True

    def key(self, value: str) -> bool:
        return True

    def end_object(self) -> bool:
        return True

    def start_array(self, size: int) -> bool:
        return True

    def end_array(self) -> bool:
        return True


_UNSET = object()


class DomBuilder(SaxHandler):
    """Builds plain Python values (dict, list, str, int, float, bool, None) from events."""

    def __init__(self) -> None:
        self._root: Any = _UNSET
        # Each entry is [container, pending key for dicts].
        self._stack: list[list[Any]] = []

    def result(self) -> Any:
        """Return the value built so far."""
        if self._root is _UNSET:
            raise ValueError("no value has been parsed")
        return self._root

    def _add(self, value: Any) -> None:
        if not self._stack:
            self._root = value
            return
        container, pending = self._stack[-1]
        if isinstance(container, list):
            container.append(value)
        else:
            container[pending] = value

    def null(self) -> bool:
        self._add(None)
        return True

    def boolean(self, value: bool) -> bool:
        self._add(bool(value))
        return True

    def number_integer(self, value: int) -> bool:
        self._add(int(value))
        return True

    def number_unsigned(self, value: int) -> bool:
        self._add(int(value))
        return True

    def number_float(self, value: float, text: str) -> bool:
        self._add(float(value))
        return True

    def string(self, value: str) -> bool:
        self._add(value)
        return True

    def start_object(self, size: int) -> bool:
        obj: dict[str, Any] = {}
        self._add(obj)
        self._stack.append([obj, None])
        return True

    def key(self, value: str) -> bool:
        self._stack[-1][1] = value
        return True

    def end_object(self) -> bool:
        self._stack.pop()
        return True

    def start_array(self, size: int) -> bool:
        arr: list[Any] = []
        self._add(arr)
        self._stack.append([arr, None])
        return True

    def end_array(self) -> bool:
        self._stack.pop()
        return True


class ByteReader:
    """Reads bytes one at a time, tracking the current byte and the read count."""

    def __init__(self, data: bytes | bytearray | memoryview, sax: SaxHandler) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.sax = sax
        self.current = EOF
        self.chars_read = 0

    def get(self) -> int:
        """Advance and return the next byte, or :data:`EOF`."""
        self.chars_read += 1
        if self._pos < len(self._data):
            self.current = self._data[self._pos]
            self._pos += 1
        else:
            self.current = EOF
        return self.current

    def get_ignore_noop(self) -> int:
        """Advance past any ``N`` bytes and return the first other byte."""
        while self.get() == _NOOP:
            pass
        return self.current

    def read_number(self, input_format: InputFormat, fmt: str) -> int | float:
        """Read and unpack one number described by a :mod:`struct` format."""
        raw = bytearray()
        for _ in range(struct.calcsize(fmt)):
            self.get()
            self.expect_not_eof(input_format, "number")
            raw.append(self.current)
        return struct.unpack(fmt, bytes(raw))[0]

    def read_string(self, input_format: InputFormat, length: int) -> str:
        """Read ``length`` bytes as a string; a non-positive length reads nothing."""
        raw = bytearray()
        for _ in range(max(length, 0)):
            self.get()
            self.expect_not_eof(input_format, "string")
            raw.append(self.current)
        return bytes(raw).decode("utf-8", errors="surrogateescape")

    def expect_not_eof(self, input_format: InputFormat, context: str) -> None:
        """Raise :class:`ParseError` if the last read hit the end of input."""
        if self.current == EOF:
            raise self.error(110, input_format, "unexpected end of input", context)

    def token_string(self) -> str:
        """Two-digit hexadecimal form of the current byte."""
        return f"{self.current & 0xFF:02X}"

    def error(
        self, error_id: int, input_format: InputFormat, detail: str, context: str
    ) -> ParseError:
        """Build a parse error at the current position."""
        message = f"syntax error while parsing {input_format.value} {context}: {detail}"
        return ParseError(error_id, self.chars_read, message)