# fuzzcover

Building blocks for writing deterministic, coverage-driven test inputs.

- `fuzzcover.provider.FuzzedDataProvider` splits one byte string into typed
  values: integers, floats, booleans, enum members, strings and byte chunks.
  The same input always produces the same values, as long as the consume
  methods are called in the same order with the same arguments.
- `fuzzcover.binary` decodes CBOR, MessagePack, UBJSON and BSON into plain
  Python values, or streams events to a SAX-style handler.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Splitting fuzz input

```python
from fuzzcover.provider import FuzzedDataProvider, IntType, FloatType

provider = FuzzedDataProvider(b"\x01\x02\x03\x04hello")
state = provider.consume_integral(IntType.UINT8)
ratio = provider.consume_probability(FloatType.FLOAT64)
flag = provider.consume_bool()
rest = provider.consume_remaining_bytes()
print(provider.remaining_bytes)  # 0
```

Integers are taken from the end of the data, and byte chunks and strings from
the start. When the data is used up, integers come back as the range minimum
and probabilities as `0.0`. A range whose minimum is greater than its maximum,
or that does not fit the requested `IntType`, raises `ValueError`.

`IntType` covers the signed and unsigned 8-, 16-, 32- and 64-bit integers;
`FloatType.FLOAT32` and `FloatType.FLOAT64` select the precision of floating
point results. Other methods include `consume_bytes`,
`consume_bytes_with_terminator`, `consume_bytes_as_string`,
`consume_random_length_string`, `consume_remaining_bytes_as_string`,
`consume_integral_in_range`, `consume_floating_point`,
`consume_floating_point_in_range`, `consume_enum`, `pick_value_in_array` and
`consume_data`.

## Decoding binary formats

```python
from fuzzcover.binary import from_cbor, from_msgpack, from_ubjson, from_bson

from_cbor(bytes([0x83, 0x01, 0x02, 0x03]))        # [1, 2, 3]
from_msgpack(bytes([0x81, 0xA1, 0x61, 0xC3]))     # {"a": True}
from_ubjson(b"[#U\x02TF")                         # [True, False]
```

Malformed or truncated input raises `fuzzcover.reader.ParseError`, whose
`error_id` and `position` say what went wrong and where. With `strict=True`,
the default, the input must end exactly where the value ends.

To handle events yourself, subclass `fuzzcover.reader.SaxHandler` and pass it
to `fuzzcover.binary.sax_parse` with a `fuzzcover.reader.InputFormat`. A
handler method that returns `False` stops the parse, and `sax_parse` then
returns `False`. `fuzzcover.reader.DomBuilder` is the handler that
`fuzzcover.binary.parse` uses to build dicts, lists and scalars.

## What it does not do

The package is a library only. It has no command-line tool, does not run a
fuzzing engine or measure code coverage, and only decodes the binary formats:
it cannot encode values into CBOR, MessagePack, UBJSON or BSON.