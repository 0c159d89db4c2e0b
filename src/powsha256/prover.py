"""
Prover: Brute-Force Nonce Search

Encode the target once, absorb salt || target into a prefix hasher,
then try nonce = 1, 2, 3, ... until score >= threshold.

The nonce never wraps. Running past MAX_U64 raises SearchExhausted.

There is no attempt cap. Callers that need a bound pass a
threading.Event (polled every attempt) or a timeout; either one
stopping the search raises SearchCancelled.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, FIRST_COMPLETED, wait
from typing import Any, List, Optional, Sequence, Tuple
import logging
import os
import threading
import time

from .difficulty import Difficulty, as_threshold
from .errors import SearchCancelled, SearchExhausted
from .scorer import prefix_hasher, score_prefixed
from .serializer import encode
from .types import MAX_U64, Proof, salt_bytes


logger = logging.getLogger(__name__)

NONCE_START = 1
DEADLINE_POLL_INTERVAL = 4096


def search(
    prefix,
    threshold: int,
    start: int,
    stop: int,
    events: Sequence[threading.Event] = (),
    deadline: Optional[float] = None
) -> Optional[Tuple[int, int]]:
    """
    Scan nonces in [start, stop) for a passing score.

    Returns (nonce, score) on success, None if the range ran out or an
    event was set or the deadline passed. The caller tells those
    apart.
    """
    nonce = start
    while nonce < stop:
        for event in events:
            if event.is_set():
                return None
        if deadline is not None and (nonce - start) % DEADLINE_POLL_INTERVAL == 0:
            if time.monotonic() >= deadline:
                return None

        value = score_prefixed(prefix, nonce)
        if value >= threshold:
            return nonce, value
        nonce += 1
    return None


class Prover:
    """
    Single-threaded prover bound to one salt.

    Usage:
        prover = Prover(b"deployment salt")
        proof = prover.prove(b"payload", AverageAttempts(1000))
    """

    def __init__(self, salt: bytes):
        self.salt = salt_bytes(salt)
        self.workers = 1

    def prove(
        self,
        target: Any,
        difficulty: Difficulty,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Proof:
        """Prove work over a target value."""
        return self.prove_serialized(
            encode(target), difficulty, cancel=cancel, timeout=timeout
        )

    def prove_serialized(
        self,
        encoded_target: bytes,
        difficulty: Difficulty,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        start_nonce: int = NONCE_START
    ) -> Proof:
        """
        Prove work over an already encoded target.

        Args:
            encoded_target: Canonical bytes of the target
            difficulty: Threshold or AverageAttempts
            cancel: Event polled once per attempt
            timeout: Seconds before giving up
            start_nonce: First nonce to try

        Returns:
            Proof whose score clears the threshold

        Raises:
            SearchExhausted: no nonce in [start_nonce, MAX_U64] passed
            SearchCancelled: cancel was set or timeout elapsed
        """
        threshold = as_threshold(difficulty).value
        if not 0 <= start_nonce <= MAX_U64:
            raise ValueError(f"Start nonce out of 64-bit range: {start_nonce}")
        deadline = None if timeout is None else time.monotonic() + timeout

        logger.debug(
            "Searching from nonce %d for score >= 0x%032x (%d bytes of target, %d workers)",
            start_nonce, threshold, len(encoded_target), self.workers
        )
        prefix = prefix_hasher(self.salt, encoded_target)
        found = self._search(prefix, threshold, start_nonce, cancel, deadline)

        if found is None:
            self._raise_unfound(cancel, deadline, start_nonce)
        nonce, value = found
        if self.workers == 1:
            logger.debug(
                "Found nonce %d after %d attempts (score 0x%032x)",
                nonce, nonce - start_nonce + 1, value
            )
        else:
            # workers scan their ranges concurrently; only the winner is known
            logger.debug(
                "Found nonce %d across %d workers (score 0x%032x)",
                nonce, self.workers, value
            )
        return Proof(nonce=nonce, score=value)

    def _search(
        self,
        prefix,
        threshold: int,
        start_nonce: int,
        cancel: Optional[threading.Event],
        deadline: Optional[float]
    ) -> Optional[Tuple[int, int]]:
        events = (cancel,) if cancel is not None else ()
        return search(prefix, threshold, start_nonce, MAX_U64 + 1, events, deadline)

    @staticmethod
    def _raise_unfound(
        cancel: Optional[threading.Event],
        deadline: Optional[float],
        start_nonce: int
    ) -> None:
        if cancel is not None and cancel.is_set():
            logger.warning("Proof search cancelled")
            raise SearchCancelled("Proof search cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning("Proof search timed out")
            raise SearchCancelled("Proof search timed out")
        raise SearchExhausted(
            f"No passing nonce in [{start_nonce}, {MAX_U64}]"
        )


class ParallelProver(Prover):
    """
    Prover that splits the nonce space across worker threads.

    [start_nonce, MAX_U64] is cut into contiguous disjoint ranges, one
    per worker. The first worker to find a passing nonce sets a shared
    event and the others stop at their next attempt. Which passing
    nonce wins is not deterministic across runs.
    """

    def __init__(self, salt: bytes, workers: Optional[int] = None):
        super().__init__(salt)
        self.workers = (os.cpu_count() or 1) if workers is None else workers
        if self.workers < 1:
            raise ValueError(f"Worker count must be positive, got {self.workers}")

    def _search(
        self,
        prefix,
        threshold: int,
        start_nonce: int,
        cancel: Optional[threading.Event],
        deadline: Optional[float]
    ) -> Optional[Tuple[int, int]]:
        ranges = partition(start_nonce, MAX_U64 + 1, self.workers)
        if len(ranges) == 1:
            return super()._search(prefix, threshold, start_nonce, cancel, deadline)

        done = threading.Event()
        events = (done, cancel) if cancel is not None else (done,)

        with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
            pending = {
                executor.submit(search, prefix.copy(), threshold, lo, hi, events, deadline)
                for lo, hi in ranges
            }
            while pending:
                finished, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in finished:
                    result = future.result()
                    if result is not None:
                        done.set()
                        return result
        return None


def partition(start: int, stop: int, parts: int) -> List[Tuple[int, int]]:
    """Split [start, stop) into at most `parts` contiguous, disjoint, covering ranges."""
    total = stop - start
    if total <= 0:
        return []
    parts = max(1, min(parts, total))
    size, extra = divmod(total, parts)
    ranges = []
    lo = start
    for i in range(parts):
        hi = lo + size + (1 if i < extra else 0)
        ranges.append((lo, hi))
        lo = hi
    return ranges


def prove_work(
    target: Any,
    difficulty: Difficulty,
    salt: bytes,
    workers: int = 1
) -> Proof:
    """Convenience function to prove work over a target."""
    prover = Prover(salt) if workers == 1 else ParallelProver(salt, workers)
    return prover.prove(target, difficulty)
