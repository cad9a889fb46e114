"""Deterministic fuzz-input splitting and CBOR, MessagePack, UBJSON and BSON decoding."""

__version__ = "0.3.0"
__all__ = ["provider", "reader", "bson", "cbor", "msgpack", "ubjson", "binary"]