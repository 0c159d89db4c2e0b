"""
powsha256: Typed SHA-256 Proof of Work

Tag any canonically encodable value with proof that a chosen amount of
hashing was spent on it, and let anyone holding the same salt re-check
the claim with a single hash.

    score(t, p) = int_be(SHA256(salt || encode(t) || nonce_be64)[:16])
    p passes D  <=>  score(t, p) >= D

Usage:
    from powsha256 import PowConfig, AverageAttempts

    config = PowConfig(salt=b"long unpredictable deployment salt")
    difficulty = AverageAttempts(1000)

    proof = config.prove_work("ironmansucks", difficulty)
    assert config.is_valid_proof(proof, "ironmansucks")
    assert config.is_sufficient_difficulty(proof, difficulty)

    # Proofs are encodable targets themselves
    proof2 = config.prove_work(proof, difficulty)
"""

# Types
from .types import (
    MAX_U64,
    MAX_U128,
    PROOF_BYTES,
    FixedUInt,
    U8,
    U16,
    U32,
    U64,
    U128,
    Proof,
)

# Errors
from .errors import (
    PowError,
    Unencodable,
    DecodeError,
    TruncatedInput,
    InvalidDifficulty,
    SearchExhausted,
    SearchCancelled,
)

# Codec
from .serializer import (
    CanonicalEncoder,
    CanonicalDecoder,
    encode,
    decode,
    decode_exact,
    register_encoding,
    unregister_encoding,
)

# Scoring and difficulty
from .scorer import score, prefix_hasher, score_prefixed
from .difficulty import (
    Threshold,
    AverageAttempts,
    Difficulty,
    average_to_threshold,
    threshold_to_average,
    success_probability,
    as_threshold,
)

# Prove / verify
from .prover import Prover, ParallelProver, prove_work
from .verifier import (
    Verifier,
    VerificationResult,
    is_valid,
    meets_difficulty,
    calculate,
)
from .config import PowConfig

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Types
    "MAX_U64",
    "MAX_U128",
    "PROOF_BYTES",
    "FixedUInt",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "Proof",
    # Errors
    "PowError",
    "Unencodable",
    "DecodeError",
    "TruncatedInput",
    "InvalidDifficulty",
    "SearchExhausted",
    "SearchCancelled",
    # Codec
    "CanonicalEncoder",
    "CanonicalDecoder",
    "encode",
    "decode",
    "decode_exact",
    "register_encoding",
    "unregister_encoding",
    # Scoring and difficulty
    "score",
    "prefix_hasher",
    "score_prefixed",
    "Threshold",
    "AverageAttempts",
    "Difficulty",
    "average_to_threshold",
    "threshold_to_average",
    "success_probability",
    "as_threshold",
    # Prove / verify
    "Prover",
    "ParallelProver",
    "prove_work",
    "Verifier",
    "VerificationResult",
    "is_valid",
    "meets_difficulty",
    "calculate",
    "PowConfig",
]
