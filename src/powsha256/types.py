"""
Wire Types for powsha256

Python integers carry no width, so values destined for the canonical
codec are wrapped in fixed-width unsigned types (U8 .. U128). The
Proof record lives here too: it is both the product of a search and
an ordinary encodable value, which is what makes proofs over proofs
work without special cases.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar


MAX_U64 = (1 << 64) - 1
MAX_U128 = (1 << 128) - 1

NONCE_BYTES = 8
SCORE_BYTES = 16
PROOF_BYTES = NONCE_BYTES + SCORE_BYTES  # 24


def salt_bytes(salt) -> bytes:
    """Salt as raw bytes; text salts are UTF-8 encoded."""
    if isinstance(salt, str):
        return salt.encode('utf-8')
    if isinstance(salt, (bytes, bytearray, memoryview)):
        return bytes(salt)
    raise TypeError(f"Salt must be bytes or str, got {type(salt).__name__}")


# =============================================================================
# FIXED-WIDTH UNSIGNED INTEGERS
# =============================================================================

@dataclass(frozen=True)
class FixedUInt:
    """
    Unsigned integer with a declared bit width.

    Encodes as exactly WIDTH bytes, big-endian. Construction rejects
    values that do not fit, so an instance is always encodable.
    """
    WIDTH: ClassVar[int] = 0

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(
                f"{type(self).__name__} requires an int, got {type(self.value).__name__}"
            )
        if not 0 <= self.value < (1 << (8 * self.WIDTH)):
            raise ValueError(
                f"{type(self).__name__} out of range: {self.value}"
            )

    @classmethod
    def max_value(cls) -> int:
        return (1 << (8 * cls.WIDTH)) - 1

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(self.WIDTH, 'big')

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value


@dataclass(frozen=True)
class U8(FixedUInt):
    WIDTH: ClassVar[int] = 1


@dataclass(frozen=True)
class U16(FixedUInt):
    WIDTH: ClassVar[int] = 2


@dataclass(frozen=True)
class U32(FixedUInt):
    WIDTH: ClassVar[int] = 4


@dataclass(frozen=True)
class U64(FixedUInt):
    WIDTH: ClassVar[int] = 8


@dataclass(frozen=True)
class U128(FixedUInt):
    WIDTH: ClassVar[int] = 16


# =============================================================================
# PROOF
# =============================================================================

T = TypeVar('T')


@dataclass(frozen=True)
class Proof(Generic[T]):
    """
    Proof of work over a target of type T.

    T only exists for static checking: Proof[str] and Proof[bytes]
    share the same 24-byte wire form and nothing of T is stored.

    Wire format:
        nonce (8 bytes, big-endian) || score (16 bytes, big-endian)

    The score is a claim. Verification recomputes it from the salt,
    the target and the nonce; it is never trusted as stored.
    """
    nonce: int
    score: int

    def __post_init__(self):
        for name, limit in (('nonce', MAX_U64), ('score', MAX_U128)):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"Proof.{name} must be an int")
            if not 0 <= v <= limit:
                raise ValueError(f"Proof.{name} out of range: {v}")

    def to_bytes(self) -> bytes:
        """The 24-byte canonical encoding."""
        return (
            self.nonce.to_bytes(NONCE_BYTES, 'big') +
            self.score.to_bytes(SCORE_BYTES, 'big')
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Proof[T]':
        """Parse exactly 24 bytes."""
        from .serializer import decode_exact
        return decode_exact(cls, data)

    def __repr__(self) -> str:
        return f"Proof(nonce={self.nonce}, score=0x{self.score:032x})"
