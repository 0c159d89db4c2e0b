"""
Verifier

Two independent checks, usually both required:

- authenticity: recompute the score from salt, target and the
  proof's nonce; it must equal the score the proof claims
- difficulty: the claimed score must clear the threshold in force
  now, which may be stricter than the one the proof was made for

Neither check raises on malformed input. A proof that fails to parse
and a proof that does not verify are the same thing to the caller.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Union
import logging

from .difficulty import Difficulty, as_threshold
from .errors import PowError
from .scorer import score
from .serializer import encode, decode_exact
from .types import Proof, salt_bytes


logger = logging.getLogger(__name__)

ProofLike = Union[Proof, bytes]


def _as_proof(proof: ProofLike) -> Proof:
    if isinstance(proof, Proof):
        return proof
    if isinstance(proof, (bytes, bytearray, memoryview)):
        return decode_exact(Proof, bytes(proof))
    raise TypeError(f"Expected Proof or bytes, got {type(proof).__name__}")


@dataclass
class VerificationResult:
    """Result of verifying one proof."""
    valid: bool
    authentic: bool
    sufficient: bool
    computed_score: Optional[int] = None
    error: Optional[str] = None


class Verifier:
    """
    Verify proofs against one salt.

    Cost: one SHA-256 per check, independent of difficulty.
    """

    def __init__(self, salt: bytes):
        self.salt = salt_bytes(salt)

    def calculate(self, proof: Proof, target: Any) -> int:
        """Recompute a proof's score. Raises on unencodable targets."""
        return self.calculate_serialized(proof, encode(target))

    def calculate_serialized(self, proof: Proof, encoded_target: bytes) -> int:
        return score(self.salt, encoded_target, proof.nonce)

    def is_valid(self, proof: ProofLike, target: Any) -> bool:
        """True iff the proof's score is what its nonce really produces for target."""
        try:
            encoded = encode(target)
        except (PowError, TypeError, ValueError) as e:
            logger.debug("Target not encodable: %s", e)
            return False
        return self.is_valid_serialized(proof, encoded)

    def is_valid_serialized(self, proof: ProofLike, encoded_target: bytes) -> bool:
        try:
            p = _as_proof(proof)
            return self.calculate_serialized(p, encoded_target) == p.score
        except (PowError, TypeError, ValueError) as e:
            logger.debug("Malformed proof: %s", e)
            return False

    def meets_difficulty(self, proof: ProofLike, difficulty: Difficulty) -> bool:
        return meets_difficulty(proof, difficulty)

    def verify(
        self,
        proof: ProofLike,
        target: Any,
        difficulty: Difficulty
    ) -> VerificationResult:
        """
        Run both checks.

        Args:
            proof: Proof or its 24-byte wire form
            target: The value the proof claims to cover
            difficulty: Policy in force at verification time

        Returns:
            VerificationResult with both outcomes and the recomputed score
        """
        threshold = as_threshold(difficulty)

        try:
            p = _as_proof(proof)
        except (PowError, TypeError, ValueError) as e:
            return VerificationResult(
                valid=False,
                authentic=False,
                sufficient=False,
                error=f"Malformed proof: {e}"
            )

        try:
            computed = self.calculate(p, target)
        except (PowError, TypeError, ValueError) as e:
            return VerificationResult(
                valid=False,
                authentic=False,
                sufficient=threshold.is_met_by(p.score),
                error=f"Target not encodable: {e}"
            )

        authentic = computed == p.score
        sufficient = threshold.is_met_by(p.score)
        return VerificationResult(
            valid=authentic and sufficient,
            authentic=authentic,
            sufficient=sufficient,
            computed_score=computed,
            error=None if authentic else "Score mismatch"
        )


def meets_difficulty(proof: ProofLike, difficulty: Difficulty) -> bool:
    """True iff the proof's claimed score clears the difficulty. Pure comparison."""
    threshold = as_threshold(difficulty)
    try:
        p = _as_proof(proof)
    except (PowError, TypeError, ValueError):
        return False
    return threshold.is_met_by(p.score)


def is_valid(proof: ProofLike, target: Any, salt: bytes) -> bool:
    """Convenience function: authenticity check under `salt`."""
    return Verifier(salt).is_valid(proof, target)


def calculate(proof: Proof, target: Any, salt: bytes) -> int:
    """Convenience function: recompute a proof's score under `salt`."""
    return Verifier(salt).calculate(proof, target)
