"""
Salted Scorer

score = int_be(SHA256(salt || encoded_target || nonce_be64)[:16])

The salt and target are absorbed once into a prefix hasher; each
attempt clones it and appends only the 8 nonce bytes.
"""

from __future__ import annotations
import hashlib

from .types import MAX_U64, NONCE_BYTES, SCORE_BYTES


def prefix_hasher(salt: bytes, encoded_target: bytes):
    """SHA-256 state after absorbing salt || encoded_target."""
    h = hashlib.sha256()
    h.update(salt)
    h.update(encoded_target)
    return h


def score_prefixed(prefix, nonce: int) -> int:
    """Score one nonce against a pre-absorbed prefix. The prefix is not mutated."""
    if not 0 <= nonce <= MAX_U64:
        raise ValueError(f"Nonce out of 64-bit range: {nonce}")
    h = prefix.copy()
    h.update(nonce.to_bytes(NONCE_BYTES, 'big'))
    return int.from_bytes(h.digest()[:SCORE_BYTES], 'big')


def score(salt: bytes, encoded_target: bytes, nonce: int) -> int:
    """128-bit score of (salt, encoded target, nonce)."""
    return score_prefixed(prefix_hasher(salt, encoded_target), nonce)
