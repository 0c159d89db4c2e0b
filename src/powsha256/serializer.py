"""
Canonical Codec

Deterministic, byte-exact encoding of the values a proof can target.
Independent implementations must agree on every byte, so there are no
type tags and no self-description: the reader supplies the schema.

Encoding rules:
- FixedUInt (U8 .. U128): WIDTH bytes, big-endian
- bytes / str (UTF-8): verbatim in final position, otherwise
  LEN (8 bytes, big-endian) || BYTES
- tuple: concatenation of fields in order; a field is in final
  position iff it is the record's last field and the record itself
  is in final position
- Proof: nonce (8 bytes) || score (16 bytes), in any position
- registered types: the encoding of their wire form

Schemas:
- a FixedUInt subclass, `bytes`, `str`, `Proof` or `Proof[T]`
- a registered class
- a tuple of schemas
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
import typing

from .errors import Unencodable, DecodeError, TruncatedInput
from .types import FixedUInt, Proof, NONCE_BYTES, SCORE_BYTES, PROOF_BYTES


LENGTH_PREFIX_BYTES = 8


# =============================================================================
# ENCODING REGISTRY
# =============================================================================

@dataclass(frozen=True)
class Encoding:
    """
    Canonical encoding for an externally-defined type.

    The value is mapped to a wire value (anything the codec already
    encodes) and back. `schema` describes that wire value.
    """
    schema: Any
    to_wire: Callable[[Any], Any]
    from_wire: Callable[[Any], Any]


_REGISTRY: Dict[type, Encoding] = {}

_UNREGISTRABLE = (
    object, bool, int, float, list, dict, type(None),
    tuple, bytes, bytearray, memoryview, str,
)


def register_encoding(
    cls: type,
    schema: Any,
    to_wire: Callable[[Any], Any],
    from_wire: Callable[[Any], Any]
) -> None:
    """
    Give instances of `cls` a canonical encoding.

    A registered encoding takes precedence over the structural rules,
    so subclasses of tuple, bytes or str (NamedTuples included) encode
    through their wire form. The builtins themselves are fixed.
    """
    if cls in _UNREGISTRABLE:
        raise Unencodable(f"Cannot register an encoding for builtin {cls.__name__}")
    _REGISTRY[cls] = Encoding(schema=schema, to_wire=to_wire, from_wire=from_wire)


def unregister_encoding(cls: type) -> None:
    _REGISTRY.pop(cls, None)


def _lookup(cls: type) -> Optional[Encoding]:
    if not _REGISTRY:
        return None
    for klass in cls.__mro__:
        if klass in _REGISTRY:
            return _REGISTRY[klass]
    return None


# =============================================================================
# ENCODER
# =============================================================================

class CanonicalEncoder:
    """
    Value -> bytes.

    Never fails for supported values; anything else raises Unencodable,
    including failures inside registered to_wire hooks and records
    nested deeper than the interpreter's recursion limit.
    """

    @classmethod
    def encode(cls, value: Any, final: bool = True) -> bytes:
        """Encode a value. `final` marks the value as the last field of the stream."""
        try:
            return b''.join(cls._encode_parts(value, final))
        except RecursionError as e:
            raise Unencodable("Value is nested too deeply to encode") from e

    @classmethod
    def _encode_parts(cls, value: Any, final: bool):
        encoding = _lookup(type(value))
        if encoding is not None:
            try:
                wire = encoding.to_wire(value)
            except Exception as e:
                raise Unencodable(
                    f"Encoding hook for {type(value).__name__} failed: {e!r}"
                ) from e
            yield from cls._encode_parts(wire, final)

        elif isinstance(value, FixedUInt):
            yield value.to_bytes()

        elif isinstance(value, Proof):
            yield value.to_bytes()

        elif isinstance(value, (bytes, bytearray, memoryview)):
            yield from cls._encode_variable(bytes(value), final)

        elif isinstance(value, str):
            yield from cls._encode_variable(value.encode('utf-8'), final)

        elif isinstance(value, tuple):
            last = len(value) - 1
            for i, field in enumerate(value):
                yield from cls._encode_parts(field, final and i == last)

        else:
            raise Unencodable(cls._explain(value))

    @staticmethod
    def _encode_variable(data: bytes, final: bool):
        if not final:
            yield len(data).to_bytes(LENGTH_PREFIX_BYTES, 'big')
        yield data

    @staticmethod
    def _explain(value: Any) -> str:
        if isinstance(value, int) and not isinstance(value, bool):
            return (
                f"Integer {value} has no declared width; "
                "wrap it in U8/U16/U32/U64/U128"
            )
        return f"No canonical encoding for {type(value).__name__}"


# =============================================================================
# DECODER
# =============================================================================

class CanonicalDecoder:
    """
    (schema, bytes) -> (value, remaining bytes).

    Short input raises TruncatedInput; nothing is ever padded.
    """

    @classmethod
    def decode(cls, schema: Any, data: bytes, final: bool = True) -> Tuple[Any, bytes]:
        data = bytes(data)
        origin = typing.get_origin(schema) or schema

        encoding = _lookup(origin) if isinstance(origin, type) else None
        if encoding is not None:
            wire, rest = cls.decode(encoding.schema, data, final)
            try:
                return encoding.from_wire(wire), rest
            except Exception as e:
                raise DecodeError(
                    f"Decoding hook for {origin.__name__} failed: {e!r}"
                ) from e

        if isinstance(origin, type) and issubclass(origin, FixedUInt):
            head, rest = cls._take(data, origin.WIDTH, origin.__name__)
            return origin(int.from_bytes(head, 'big')), rest

        if isinstance(origin, type) and issubclass(origin, Proof):
            head, rest = cls._take(data, PROOF_BYTES, 'Proof')
            return origin(
                nonce=int.from_bytes(head[:NONCE_BYTES], 'big'),
                score=int.from_bytes(head[NONCE_BYTES:NONCE_BYTES + SCORE_BYTES], 'big')
            ), rest

        if origin is bytes:
            return cls._decode_variable(data, final)

        if origin is str:
            raw, rest = cls._decode_variable(data, final)
            try:
                return raw.decode('utf-8'), rest
            except UnicodeDecodeError as e:
                raise DecodeError(f"Invalid UTF-8 in text field: {e}") from e

        if isinstance(schema, tuple):
            return cls._decode_record(schema, data, final)

        # typing.Tuple[...] spelling of a record
        if origin is tuple and typing.get_args(schema):
            return cls._decode_record(typing.get_args(schema), data, final)

        raise Unencodable(f"No canonical decoding for schema {schema!r}")

    @classmethod
    def _decode_record(cls, schema: tuple, data: bytes, final: bool) -> Tuple[tuple, bytes]:
        values = []
        remaining = data
        last = len(schema) - 1
        for i, field_schema in enumerate(schema):
            value, remaining = cls.decode(field_schema, remaining, final and i == last)
            values.append(value)
        return tuple(values), remaining

    @classmethod
    def _decode_variable(cls, data: bytes, final: bool) -> Tuple[bytes, bytes]:
        if final:
            return data, b''
        head, rest = cls._take(data, LENGTH_PREFIX_BYTES, 'length prefix')
        length = int.from_bytes(head, 'big')
        return cls._take(rest, length, 'variable-width field')

    @staticmethod
    def _take(data: bytes, n: int, what: str) -> Tuple[bytes, bytes]:
        if len(data) < n:
            raise TruncatedInput(n, len(data), what)
        return data[:n], data[n:]


# =============================================================================
# MODULE API
# =============================================================================

def encode(value: Any) -> bytes:
    """Canonical bytes of a value (top-level, final position)."""
    return CanonicalEncoder.encode(value)


def decode(schema: Any, data: bytes) -> Tuple[Any, bytes]:
    """Parse one value; return it with whatever bytes follow it."""
    return CanonicalDecoder.decode(schema, data)


def decode_exact(schema: Any, data: bytes) -> Any:
    """Parse one value that must consume `data` entirely."""
    value, remaining = CanonicalDecoder.decode(schema, data)
    if remaining:
        raise DecodeError(f"Trailing bytes after value: {len(remaining)}")
    return value
