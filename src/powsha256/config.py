"""
Process-Wide Configuration

PowConfig holds the deployment salt. Build it once at startup and
pass it by reference; it is frozen, so sharing it across threads
needs no locking.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional
import threading

from .difficulty import Difficulty
from .prover import Prover, ParallelProver
from .types import Proof, salt_bytes
from .verifier import ProofLike, Verifier, VerificationResult


@dataclass(frozen=True)
class PowConfig:
    """
    Public parameters shared by provers and verifiers.

    The salt namespaces every proof: a proof made under one salt never
    verifies under another. It should be long and unpredictable; the
    core does not enforce a minimum.
    """

    salt: bytes
    """Domain-separation salt. A str is stored as its UTF-8 bytes."""

    workers: int = 1
    """Search threads for proving. 1 searches on the calling thread."""

    def __post_init__(self):
        object.__setattr__(self, 'salt', salt_bytes(self.salt))
        if self.workers < 1:
            raise ValueError(f"Worker count must be positive, got {self.workers}")

    def prover(self) -> Prover:
        if self.workers > 1:
            return ParallelProver(self.salt, self.workers)
        return Prover(self.salt)

    def verifier(self) -> Verifier:
        return Verifier(self.salt)

    # ==========================================================================
    # Proving
    # ==========================================================================

    def prove_work(
        self,
        target: Any,
        difficulty: Difficulty,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Proof:
        """Prove work over a target. Blocks until a passing nonce is found."""
        return self.prover().prove(target, difficulty, cancel=cancel, timeout=timeout)

    def prove_work_serialized(
        self,
        encoded_target: bytes,
        difficulty: Difficulty,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Proof:
        return self.prover().prove_serialized(
            encoded_target, difficulty, cancel=cancel, timeout=timeout
        )

    # ==========================================================================
    # Verification
    # ==========================================================================

    def calculate(self, proof: Proof, target: Any) -> int:
        """Recompute the score of (target, proof) under this salt."""
        return self.verifier().calculate(proof, target)

    def calculate_serialized(self, proof: Proof, encoded_target: bytes) -> int:
        return self.verifier().calculate_serialized(proof, encoded_target)

    def is_valid_proof(self, proof: ProofLike, target: Any) -> bool:
        """True iff the proof's claimed score is its real score for target."""
        return self.verifier().is_valid(proof, target)

    def is_sufficient_difficulty(self, proof: ProofLike, difficulty: Difficulty) -> bool:
        """True iff the proof's claimed score clears difficulty."""
        return self.verifier().meets_difficulty(proof, difficulty)

    def verify(self, proof: ProofLike, target: Any, difficulty: Difficulty) -> VerificationResult:
        return self.verifier().verify(proof, target, difficulty)

    def __repr__(self) -> str:
        # keep the salt out of logs and tracebacks
        return f"PowConfig(salt=<{len(self.salt)} bytes>, workers={self.workers})"
