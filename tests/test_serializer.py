"""
Tests for the Canonical Codec

Pins the exact bytes produced for every supported shape, since
proofs made by one implementation must verify under another.
"""

import typing
from dataclasses import dataclass

import pytest

from powsha256.errors import Unencodable, DecodeError, TruncatedInput
from powsha256.serializer import (
    CanonicalEncoder,
    CanonicalDecoder,
    encode,
    decode,
    decode_exact,
    register_encoding,
    unregister_encoding,
)
from powsha256.types import U8, U16, U32, U64, U128, Proof, MAX_U64, MAX_U128


class TestFixedWidthIntegers:
    """Integers encode big-endian at their declared width."""

    def test_u64_is_eight_bytes_big_endian(self):
        assert encode(U64(1)) == b'\x00' * 7 + b'\x01'
        assert encode(U64(0x0102030405060708)) == bytes([1, 2, 3, 4, 5, 6, 7, 8])

    def test_u128_is_sixteen_bytes_big_endian(self):
        assert encode(U128(MAX_U128)) == b'\xff' * 16
        assert encode(U128(1 << 120)) == b'\x01' + b'\x00' * 15

    def test_small_widths(self):
        assert encode(U8(0xab)) == b'\xab'
        assert encode(U16(0x0102)) == b'\x01\x02'
        assert encode(U32(7)) == b'\x00\x00\x00\x07'

    def test_out_of_range_rejected_at_construction(self):
        with pytest.raises(ValueError):
            U8(256)
        with pytest.raises(ValueError):
            U64(-1)
        with pytest.raises(ValueError):
            U64(MAX_U64 + 1)

    def test_bare_int_unencodable(self):
        """A Python int has no width, so the codec refuses to guess."""
        with pytest.raises(Unencodable):
            encode(42)

    def test_widths_are_distinct_types(self):
        assert U64(1) != U128(1)

    def test_decode_returns_remainder(self):
        value, rest = decode(U32, b'\x00\x00\x00\x05tail')
        assert value == U32(5)
        assert rest == b'tail'


class TestVariableWidth:
    """Bytes and text are verbatim when final, length-prefixed otherwise."""

    def test_bytes_verbatim_at_top_level(self):
        assert encode(b"hello") == b"hello"

    def test_str_is_utf8_verbatim_at_top_level(self):
        assert encode("ironmansucks") == b"ironmansucks"
        assert encode("é") == b"\xc3\xa9"

    def test_bytes_prefixed_when_not_final(self):
        assert encode((b"ab", U8(1))) == (
            b'\x00\x00\x00\x00\x00\x00\x00\x02' + b"ab" + b'\x01'
        )

    def test_bytes_verbatim_when_last_field(self):
        assert encode((U8(1), b"ab")) == b'\x01ab'

    def test_nested_final_field_inherits_position(self):
        """The last field of a non-final record still needs a prefix."""
        encoded = encode(((U8(1), b"ab"), U8(2)))
        assert encoded == b'\x01' + (2).to_bytes(8, 'big') + b"ab" + b'\x02'

    def test_decode_bytes_final_takes_everything(self):
        assert decode(bytes, b"abc") == (b"abc", b'')

    def test_decode_prefixed_bytes(self):
        data = (3).to_bytes(8, 'big') + b"abc" + b'\x07'
        assert decode((bytes, U8), data) == ((b"abc", U8(7)), b'')

    def test_invalid_utf8_raises_decode_error(self):
        with pytest.raises(DecodeError):
            decode(str, b'\xff\xfe')

    def test_bytearray_and_memoryview_encode_like_bytes(self):
        assert encode(bytearray(b"xy")) == b"xy"
        assert encode(memoryview(b"xy")) == b"xy"


class TestRecords:
    """Tuples encode as the concatenation of their fields."""

    def test_empty_tuple(self):
        assert encode(()) == b''
        assert decode((), b'rest') == ((), b'rest')

    def test_field_order_preserved(self):
        assert encode((U8(1), U8(2))) != encode((U8(2), U8(1)))

    def test_typing_tuple_schema(self):
        data = encode((U16(9), "name"))
        assert decode(typing.Tuple[U16, str], data) == ((U16(9), "name"), b'')

    def test_four_tuple_roundtrip(self):
        value = (U128(1), U128(2), U128(3), U128(MAX_U128))
        assert decode_exact((U128, U128, U128, U128), encode(value)) == value


class TestProofEncoding:
    """Proofs are 24 bytes: nonce then score."""

    def test_proof_is_24_bytes(self):
        p = Proof(nonce=1, score=2)
        assert encode(p) == (1).to_bytes(8, 'big') + (2).to_bytes(16, 'big')
        assert len(encode(p)) == 24

    def test_proof_fixed_width_in_any_position(self):
        p = Proof(nonce=5, score=6)
        assert encode((p, U8(1))) == encode(p) + b'\x01'

    def test_proof_to_bytes_matches_codec(self):
        p = Proof(nonce=MAX_U64, score=MAX_U128)
        assert p.to_bytes() == encode(p)
        assert Proof.from_bytes(p.to_bytes()) == p

    def test_target_proof_pair_roundtrip(self):
        pair = ("ironmansucks", Proof(nonce=1234, score=99))
        data = encode(pair)
        assert decode_exact((str, Proof), data) == pair

    def test_generic_alias_schema(self):
        p = Proof(nonce=3, score=4)
        assert decode_exact(Proof[bytes], encode(p)) == p

    def test_nested_proofs(self):
        """Proof of a proof of a proof encodes uniformly."""
        inner = Proof(nonce=1, score=1)
        record = (inner, (Proof(nonce=2, score=2), b"payload"))
        schema = (Proof, (Proof, bytes))
        assert decode_exact(schema, encode(record)) == record

    def test_out_of_range_fields_rejected(self):
        with pytest.raises(ValueError):
            Proof(nonce=MAX_U64 + 1, score=0)
        with pytest.raises(ValueError):
            Proof(nonce=0, score=-1)


class TestFailures:
    """Short input is an error, never padded."""

    def test_truncated_integer(self):
        with pytest.raises(TruncatedInput) as excinfo:
            decode(U64, b'\x00\x01')
        assert excinfo.value.needed == 8
        assert excinfo.value.available == 2

    def test_truncated_proof(self):
        with pytest.raises(TruncatedInput):
            Proof.from_bytes(b'\x00' * 23)

    def test_truncated_length_prefix(self):
        with pytest.raises(TruncatedInput):
            decode((bytes, U8), b'\x00\x00')

    def test_length_prefix_longer_than_data(self):
        with pytest.raises(TruncatedInput):
            decode((bytes, U8), (10).to_bytes(8, 'big') + b"abc")

    def test_record_exhausted_early(self):
        with pytest.raises(TruncatedInput):
            decode((U8, U8, U8), b'\x01\x02')

    def test_truncated_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode(U16, b'')

    def test_trailing_bytes_on_exact_decode(self):
        with pytest.raises(DecodeError):
            decode_exact(U8, b'\x01\x02')
        with pytest.raises(DecodeError):
            Proof.from_bytes(b'\x00' * 25)

    @pytest.mark.parametrize("value", [1.5, None, [1, 2], {"a": 1}, True, object()])
    def test_unsupported_values(self, value):
        with pytest.raises(Unencodable):
            encode(value)

    def test_unsupported_schema(self):
        with pytest.raises(Unencodable):
            decode(float, b'\x00' * 8)

    def test_unencodable_is_a_type_error(self):
        with pytest.raises(TypeError):
            encode(3.0)


@dataclass(frozen=True)
class Stamp:
    """An externally-defined type."""
    seconds: int
    label: str


class Point(typing.NamedTuple):
    x: int
    y: int


class TestRegistry:
    """External types get a canonical encoding by registration."""

    def setup_method(self):
        register_encoding(
            Stamp,
            schema=(U64, str),
            to_wire=lambda s: (U64(s.seconds), s.label),
            from_wire=lambda w: Stamp(int(w[0]), w[1]),
        )
        register_encoding(
            Point,
            schema=(U64, U64),
            to_wire=lambda p: (U64(p.x), U64(p.y)),
            from_wire=lambda w: Point(int(w[0]), int(w[1])),
        )

    def teardown_method(self):
        unregister_encoding(Stamp)
        unregister_encoding(Point)

    def test_registered_type_encodes_as_wire_form(self):
        assert encode(Stamp(1, "x")) == encode((U64(1), "x"))

    def test_registered_type_roundtrip_inside_record(self):
        value = (Stamp(7, "seven"), U8(1))
        assert decode_exact((Stamp, U8), encode(value)) == value

    def test_unregistered_after_removal(self):
        unregister_encoding(Stamp)
        with pytest.raises(Unencodable):
            encode(Stamp(1, "x"))

    def test_builtins_cannot_be_registered(self):
        with pytest.raises(Unencodable):
            register_encoding(int, U64, U64, int)

    def test_structural_builtins_cannot_be_registered(self):
        for cls in (tuple, bytes, str):
            with pytest.raises(Unencodable):
                register_encoding(cls, U64, U64, cls)

    def test_named_tuple_uses_registered_encoding(self):
        assert encode(Point(1, 2)) == encode((U64(1), U64(2)))
        assert decode_exact(Point, encode(Point(1, 2))) == Point(1, 2)

    def test_named_tuple_roundtrip_inside_record(self):
        value = (Point(3, 4), "tail")
        decoded = decode_exact((Point, str), encode(value))
        assert decoded == value
        assert type(decoded[0]) is Point

    def test_failing_encoding_hook_is_unencodable(self):
        register_encoding(Stamp, U64, lambda s: U64(s.missing), lambda w: w)
        with pytest.raises(Unencodable) as exc_info:
            encode(Stamp(1, "x"))
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_failing_decoding_hook_is_decode_error(self):
        register_encoding(Stamp, U64, U64, lambda w: Stamp(w.missing, ""))
        with pytest.raises(DecodeError):
            decode_exact(Stamp, encode(U64(1)))


class TestClassApi:
    """CanonicalEncoder/CanonicalDecoder expose the position flag."""

    def test_non_final_encoding(self):
        assert CanonicalEncoder.encode(b"ab", final=False) == (2).to_bytes(8, 'big') + b"ab"

    def test_non_final_decoding(self):
        data = (2).to_bytes(8, 'big') + b"abXY"
        assert CanonicalDecoder.decode(bytes, data, final=False) == (b"ab", b"XY")


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
