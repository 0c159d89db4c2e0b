"""
Difficulty Model

Two units, kept apart on purpose:

- Threshold D in [0, MAX_U128]: a score passes iff score >= D.
- AverageAttempts A >= 1: expected number of nonces tried before a
  pass.

Conversions (integer division, truncating):

    D = MAX_U128 - MAX_U128 // A
    A = MAX_U128 // (MAX_U128 - D)      (D == MAX_U128 maps to MAX_U128)

Scores are uniform over [0, MAX_U128], so one attempt passes D with
probability (MAX_U128 - D + 1) / (MAX_U128 + 1), roughly 1/A, and the
attempt count to first success is geometric with mean roughly A.

The truncation direction is part of the interop contract: two
implementations that round differently disagree on what "A = 1000"
means.
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
from typing import Union

from .errors import InvalidDifficulty
from .types import MAX_U128


def average_to_threshold(average: int) -> int:
    """Threshold whose expected attempt count is `average`."""
    if isinstance(average, bool) or not isinstance(average, int):
        raise TypeError(f"Average attempts must be an int, got {type(average).__name__}")
    if average == 0:
        raise InvalidDifficulty("It is impossible to prove work in zero attempts")
    if not 0 < average <= MAX_U128:
        raise InvalidDifficulty(f"Average attempts out of range: {average}")
    return MAX_U128 - MAX_U128 // average


def threshold_to_average(threshold: int) -> int:
    """Expected attempt count for `threshold` (saturates at MAX_U128)."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise TypeError(f"Threshold must be an int, got {type(threshold).__name__}")
    if not 0 <= threshold <= MAX_U128:
        raise InvalidDifficulty(f"Threshold out of 128-bit range: {threshold}")
    if threshold == MAX_U128:
        return MAX_U128
    return MAX_U128 // (MAX_U128 - threshold)


def meets(score: int, threshold: int) -> bool:
    """The pass rule."""
    return score >= threshold


def success_probability(threshold: int) -> Fraction:
    """Exact probability that a single uniform score passes `threshold`."""
    if not 0 <= threshold <= MAX_U128:
        raise InvalidDifficulty(f"Threshold out of 128-bit range: {threshold}")
    return Fraction(MAX_U128 - threshold + 1, MAX_U128 + 1)


@dataclass(frozen=True, order=True)
class Threshold:
    """Difficulty in score space (canonical form)."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("Threshold value must be an int")
        if not 0 <= self.value <= MAX_U128:
            raise InvalidDifficulty(f"Threshold out of 128-bit range: {self.value}")

    @classmethod
    def from_average(cls, average: Union['AverageAttempts', int]) -> 'Threshold':
        return cls(average_to_threshold(int(average)))

    def to_average(self) -> 'AverageAttempts':
        return AverageAttempts(threshold_to_average(self.value))

    def is_met_by(self, score: int) -> bool:
        return meets(score, self.value)

    @property
    def probability(self) -> Fraction:
        return success_probability(self.value)

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, order=True)
class AverageAttempts:
    """Difficulty as the expected number of hashes (configuration form)."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("AverageAttempts value must be an int")
        if self.value == 0:
            raise InvalidDifficulty("It is impossible to prove work in zero attempts")
        if not 0 < self.value <= MAX_U128:
            raise InvalidDifficulty(f"Average attempts out of range: {self.value}")

    def to_threshold(self) -> Threshold:
        return Threshold(average_to_threshold(self.value))

    def __int__(self) -> int:
        return self.value


Difficulty = Union[Threshold, AverageAttempts]


def as_threshold(difficulty: Difficulty) -> Threshold:
    """
    Normalize a difficulty to threshold form.

    Bare ints are rejected: a number alone does not say which unit it
    is in.
    """
    if isinstance(difficulty, Threshold):
        return difficulty
    if isinstance(difficulty, AverageAttempts):
        return difficulty.to_threshold()
    raise TypeError(
        "Difficulty must be Threshold or AverageAttempts, "
        f"got {type(difficulty).__name__}"
    )
