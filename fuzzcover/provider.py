"""Split a fuzzer's raw input bytes into typed values, deterministically."""

from __future__ import annotations

import enum
import math
import struct
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=enum.Enum)


class IntType(enum.Enum):
    """Fixed-width integer types a provider can produce."""

    INT8 = (8, True)
    UINT8 = (8, False)
    INT16 = (16, True)
    UINT16 = (16, False)
    INT32 = (32, True)
    UINT32 = (32, False)
    INT64 = (64, True)
    UINT64 = (64, False)

    @property
    def bits(self) -> int:
        return self.value[0]

    @property
    def signed(self) -> bool:
        return self.value[1]

    @property
    def minimum(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def maximum(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


def _round_f32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _round_f64(value: float) -> float:
    return float(value)


class FloatType(enum.Enum):
    """IEEE 754 floating point types a provider can produce."""

    FLOAT32 = "float32"
    FLOAT64 = "float64"

    @property
    def max(self) -> float:
        if self is FloatType.FLOAT32:
            return struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]
        return 1.7976931348623157e308

    @property
    def lowest(self) -> float:
        return -self.max

    @property
    def integral(self) -> IntType:
        """Integer type whose values feed probabilities of this type."""
        return IntType.UINT32 if self is FloatType.FLOAT32 else IntType.UINT64

    def round(self, value: float) -> float:
        """Round a Python float to the precision of this type."""
        if self is FloatType.FLOAT32:
            return _round_f32(value)
        return _round_f64(value)


class FuzzedDataProvider:
    """Hands out pieces of a byte string as bytes, strings, numbers and choices.

    The same input always yields the same values when the same calls are made
    in the same order. Byte and string data come from the front of the input;
    integers are taken from its end.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._start = 0
        self._end = len(self._data)

    @property
    def remaining_bytes(self) -> int:
        """Number of input bytes not yet consumed."""
        return self._end - self._start

    def _take_front(self, num_bytes: int) -> bytes:
        if num_bytes < 0:
            raise ValueError("number of bytes must not be negative")
        num_bytes = min(num_bytes, self.remaining_bytes)
        chunk = self._data[self._start:self._start + num_bytes]
        self._start += num_bytes
        return chunk

    def consume_bytes(self, num_bytes: int) -> bytes:
        """Return up to ``num_bytes`` bytes; fewer if the input runs short."""
        return self._take_front(num_bytes)

    def consume_bytes_with_terminator(self, num_bytes: int, terminator: int = 0) -> bytes:
        """Like :meth:`consume_bytes`, with ``terminator`` appended."""
        if not 0 <= terminator <= 0xFF:
            raise ValueError("terminator must be a byte value")
        return self._take_front(num_bytes) + bytes((terminator,))

    def consume_remaining_bytes(self) -> bytes:
        """Return every byte that is left."""
        return self._take_front(self.remaining_bytes)

    def consume_bytes_as_string(self, num_bytes: int) -> str:
        """Return up to ``num_bytes`` bytes as a string, one character per byte."""
        return self._take_front(num_bytes).decode("latin-1")

    def consume_random_length_string(self, max_length: int | None = None) -> str:
        """Return a string of at most ``max_length`` characters.

        A backslash followed by a backslash yields one backslash; a backslash
        followed by anything else ends the string. Without ``max_length`` the
        limit is the number of remaining bytes.
        """
        if max_length is None:
            max_length = self.remaining_bytes
        chars: list[str] = []
        while len(chars) < max_length and self.remaining_bytes:
            current = self._take_front(1)
            if current == b"\\" and self.remaining_bytes:
                current = self._take_front(1)
                if current != b"\\":
                    break
            chars.append(current.decode("latin-1"))
        return "".join(chars)

    def consume_remaining_bytes_as_string(self) -> str:
        """Return every byte that is left as a string."""
        return self.consume_bytes_as_string(self.remaining_bytes)

    def consume_integral(self, int_type: IntType) -> int:
        """Return a value covering the whole range of ``int_type``."""
        return self.consume_integral_in_range(int_type.minimum, int_type.maximum, int_type)

    def consume_integral_in_range(
        self, minimum: int, maximum: int, int_type: IntType = IntType.INT64
    ) -> int:
        """Return a value in ``[minimum, maximum]``, or ``minimum`` once input is exhausted."""
        if minimum > maximum:
            raise ValueError("minimum must not exceed maximum")
        if minimum < int_type.minimum or maximum > int_type.maximum:
            raise ValueError(f"range does not fit in {int_type.name}")

        span = maximum - minimum
        result = 0
        offset = 0
        while offset < int_type.bits and (span >> offset) > 0 and self.remaining_bytes:
            self._end -= 1
            result = ((result << 8) | self._data[self._end]) & 0xFFFFFFFFFFFFFFFF
            offset += 8

        if span != 0xFFFFFFFFFFFFFFFF:
            result %= span + 1
        return minimum + result

    def consume_floating_point(self, float_type: FloatType = FloatType.FLOAT64) -> float:
        """Return a value in the whole finite range of ``float_type``."""
        return self.consume_floating_point_in_range(float_type.lowest, float_type.max, float_type)

    def consume_floating_point_in_range(
        self, minimum: float, maximum: float, float_type: FloatType = FloatType.FLOAT64
    ) -> float:
        """Return a value in ``[minimum, maximum]``, or ``minimum`` once input is exhausted."""
        if minimum > maximum:
            raise ValueError("minimum must not exceed maximum")
        rnd = float_type.round
        minimum = rnd(minimum)
        maximum = rnd(maximum)

        result = minimum
        if maximum > 0.0 and minimum < 0.0 and maximum > rnd(minimum + float_type.max):
            # The full difference would overflow, so split it in two halves.
            span = rnd(rnd(maximum / 2.0) - rnd(minimum / 2.0))
            if self.consume_bool():
                result = rnd(result + span)
        else:
            span = rnd(maximum - minimum)

        return rnd(result + rnd(span * self.consume_probability(float_type)))

    def consume_probability(self, float_type: FloatType = FloatType.FLOAT64) -> float:
        """Return a value in ``[0.0, 1.0]``; 0.0 once input is exhausted."""
        integral = float_type.integral
        rnd = float_type.round
        numerator = rnd(float(self.consume_integral(integral)))
        denominator = rnd(float(integral.maximum))
        return rnd(numerator / denominator)

    def consume_bool(self) -> bool:
        """Return the lowest bit of one byte; False once input is exhausted."""
        return bool(self.consume_integral(IntType.UINT8) & 1)

    def consume_enum(self, enum_type: type[E]) -> E:
        """Return one member of ``enum_type`` in definition order."""
        members = list(enum_type)
        if not members:
            raise ValueError("enum has no members")
        index = self.consume_integral_in_range(0, len(members) - 1, IntType.UINT32)
        return members[index]

    def pick_value_in_array(self, values: Sequence[T]) -> T:
        """Return one element of a non-empty sequence."""
        if not values:
            raise ValueError("cannot pick from an empty sequence")
        return values[self.consume_integral_in_range(0, len(values) - 1, IntType.UINT64)]

    def consume_data(self, destination: bytearray | memoryview) -> int:
        """Fill ``destination`` from the input and return how many bytes were written."""
        view = memoryview(destination).cast("B")
        chunk = self._take_front(len(view))
        view[:len(chunk)] = chunk
        return len(chunk)