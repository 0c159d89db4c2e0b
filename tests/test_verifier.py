"""
Tests for the Verifier

Forged, tampered, stale and malformed proofs must all come back False
without raising.
"""

import pytest

from powsha256.difficulty import AverageAttempts, Threshold
from powsha256.prover import Prover
from powsha256.serializer import register_encoding, unregister_encoding
from powsha256.types import MAX_U128, U64, Proof
from powsha256.verifier import (
    Verifier,
    VerificationResult,
    is_valid,
    meets_difficulty,
    calculate,
)


SALT = b"verifier test salt"
EASY = AverageAttempts(16)


@pytest.fixture(scope="module")
def proof():
    return Prover(SALT).prove(b"target", EASY)


class Broken:
    """A registered type whose encoding hook fails."""


@pytest.fixture
def broken_registered():
    register_encoding(Broken, U64, lambda b: U64(b.missing), lambda w: Broken())
    yield
    unregister_encoding(Broken)


def deeply_nested(depth=5000):
    value = b"x"
    for _ in range(depth):
        value = (value,)
    return value


class TestAuthenticity:
    """Recomputed score must equal the claimed score."""

    def test_valid(self, proof):
        assert is_valid(proof, b"target", SALT)

    def test_wire_form_accepted(self, proof):
        assert is_valid(proof.to_bytes(), b"target", SALT)

    def test_calculate_matches_claim(self, proof):
        assert calculate(proof, b"target", SALT) == proof.score

    def test_tampered_score(self, proof):
        forged = Proof(nonce=proof.nonce, score=(proof.score + 1) % (MAX_U128 + 1))
        assert not is_valid(forged, b"target", SALT)

    def test_inflated_score(self, proof):
        """Claiming a huge score does not survive recomputation."""
        forged = Proof(nonce=proof.nonce, score=MAX_U128)
        assert not is_valid(forged, b"target", SALT)
        assert meets_difficulty(forged, Threshold(MAX_U128))

    def test_tampered_nonce(self, proof):
        forged = Proof(nonce=proof.nonce + 1, score=proof.score)
        assert not is_valid(forged, b"target", SALT)

    def test_other_target(self, proof):
        assert not is_valid(proof, b"targes", SALT)

    def test_other_salt(self, proof):
        assert not is_valid(proof, b"target", b"another deployment")

    def test_type_mismatch_of_target(self, proof):
        """Same bytes under a record shape with a length prefix are a different target."""
        assert not is_valid(proof, (b"target", b""), SALT)


class TestMalformedInput:
    """Malformed is folded into not-valid."""

    def test_short_wire_form(self, proof):
        assert not is_valid(proof.to_bytes()[:23], b"target", SALT)

    def test_long_wire_form(self, proof):
        assert not is_valid(proof.to_bytes() + b'\x00', b"target", SALT)

    def test_unencodable_target(self, proof):
        assert not is_valid(proof, 3.14, SALT)

    def test_not_a_proof(self):
        assert not is_valid("not a proof", b"target", SALT)

    def test_meets_difficulty_on_garbage(self):
        assert not meets_difficulty(b'\x01\x02', EASY)

    def test_failing_encoding_hook(self, broken_registered):
        assert not is_valid(Proof(nonce=1, score=1), Broken(), SALT)

    def test_failing_encoding_hook_in_verify(self, broken_registered):
        result = Verifier(SALT).verify(Proof(nonce=1, score=1), Broken(), EASY)
        assert not result.valid
        assert result.error.startswith("Target not encodable")

    def test_deeply_nested_target(self, proof):
        assert not is_valid(proof, deeply_nested(), SALT)


class TestDifficulty:
    """Pure comparison of the claimed score."""

    def test_meets_own_difficulty(self, proof):
        assert meets_difficulty(proof, EASY)

    def test_boundary(self, proof):
        assert meets_difficulty(proof, Threshold(proof.score))
        if proof.score < MAX_U128:
            assert not meets_difficulty(proof, Threshold(proof.score + 1))

    def test_stricter_policy_rejects_old_proof(self, proof):
        assert not meets_difficulty(proof, Threshold(MAX_U128))

    def test_decoupled_from_recomputation(self):
        """A forged score can meet difficulty; only is_valid catches it."""
        forged = Proof(nonce=1, score=MAX_U128)
        assert meets_difficulty(forged, AverageAttempts(1 << 100))
        assert not is_valid(forged, b"target", SALT)

    def test_bare_int_rejected(self, proof):
        with pytest.raises(TypeError):
            meets_difficulty(proof, 5)


class TestVerifierResult:
    """Verifier.verify reports both checks."""

    def test_valid(self, proof):
        result = Verifier(SALT).verify(proof, b"target", EASY)
        assert result == VerificationResult(
            valid=True,
            authentic=True,
            sufficient=True,
            computed_score=proof.score,
        )

    def test_insufficient(self, proof):
        result = Verifier(SALT).verify(proof, b"target", Threshold(MAX_U128))
        assert result.authentic
        assert not result.sufficient
        assert not result.valid

    def test_forged(self, proof):
        forged = Proof(nonce=proof.nonce, score=MAX_U128)
        result = Verifier(SALT).verify(forged, b"target", EASY)
        assert not result.authentic
        assert result.sufficient
        assert not result.valid
        assert result.error == "Score mismatch"
        assert result.computed_score == proof.score

    def test_malformed(self):
        result = Verifier(SALT).verify(b'\x00' * 3, b"target", EASY)
        assert not result.valid
        assert result.error.startswith("Malformed proof")

    def test_unencodable_target(self, proof):
        result = Verifier(SALT).verify(proof, [1, 2], EASY)
        assert not result.valid
        assert result.computed_score is None

    def test_is_valid_serialized(self, proof):
        assert Verifier(SALT).is_valid_serialized(proof, b"target")
        assert not Verifier(SALT).is_valid_serialized(proof, b"other")


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
