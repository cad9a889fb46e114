"""Entry points for decoding CBOR, MessagePack, UBJSON and BSON input."""

from __future__ import annotations

from typing import Any

from .bson import BsonParser
from .cbor import CborParser
from .msgpack import MsgpackParser
from .reader import EOF, ByteReader, DomBuilder, InputFormat, SaxHandler
from .ubjson import UbjsonParser

_PARSERS: dict[InputFormat, type[ByteReader]] = {
    InputFormat.BSON: BsonParser,
    InputFormat.CBOR: CborParser,
    InputFormat.MSGPACK: MsgpackParser,
    InputFormat.UBJSON: UbjsonParser,
}


def sax_parse(
    data: bytes | bytearray | memoryview,
    input_format: InputFormat,
    sax: SaxHandler,
    strict: bool = True,
) -> bool:
    """Parse one value of ``input_format`` from ``data``, reporting events to ``sax``.

    Returns False if the handler stopped the parse. In strict mode, input
    left over after the value raises :class:`~fuzzcover.reader.ParseError`;
    for UBJSON, trailing no-op markers are allowed.
    """
    parser = _PARSERS[input_format](data, sax)
    result = parser.parse()  # type: ignore[attr-defined]

    if result and strict:
        if input_format is InputFormat.UBJSON:
            parser.get_ignore_noop()
        else:
            parser.get()
        if parser.current != EOF:
            raise parser.error(
                110,
                input_format,
                f"expected end of input; last byte: 0x{parser.token_string()}",
                "value",
            )
    return result


def parse(
    data: bytes | bytearray | memoryview,
    input_format: InputFormat,
    strict: bool = True,
) -> Any:
    """Decode one value into plain Python objects.

    Raises :class:`~fuzzcover.reader.ParseError` for malformed input and
    :class:`ValueError` when the input ends without completing a value.
    """
    builder = DomBuilder()
    if not sax_parse(data, input_format, builder, strict):
        raise ValueError(f"{input_format.value} input did not yield a complete value")
    return builder.result()


def from_cbor(data: bytes | bytearray | memoryview, strict: bool = True) -> Any:
    """Decode a CBOR value."""
    return parse(data, InputFormat.CBOR, strict)


def from_msgpack(data: bytes | bytearray | memoryview, strict: bool = True) -> Any:
    """Decode a MessagePack value."""
    return parse(data, InputFormat.MSGPACK, strict)


def from_ubjson(data: bytes | bytearray | memoryview, strict: bool = True) -> Any:
    """Decode a UBJSON value."""
    return parse(data, InputFormat.UBJSON, strict)


def from_bson(data: bytes | bytearray | memoryview, strict: bool = True) -> Any:
    """Decode a BSON document."""
    return parse(data, InputFormat.BSON, strict)