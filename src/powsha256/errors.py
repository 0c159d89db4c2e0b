"""
Error Taxonomy

Every failure this package can surface derives from PowError. Each
class also mixes in the builtin a caller would naturally catch, so
`except ValueError` around a decode still works.

Verification never raises these: a malformed proof and an invalid
proof are both just "not valid".
"""


class PowError(Exception):
    """Base class for all powsha256 errors."""


class Unencodable(PowError, TypeError):
    """The codec has no canonical encoding for a value or schema."""


class DecodeError(PowError, ValueError):
    """Bytes do not parse under the requested schema."""


class TruncatedInput(DecodeError):
    """Fewer bytes remain than the next field requires."""

    def __init__(self, needed: int, available: int, what: str = "field"):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Truncated input: {what} needs {needed} bytes, {available} available"
        )


class InvalidDifficulty(PowError, ValueError):
    """A difficulty outside its unit's domain (e.g. zero average attempts)."""


class SearchExhausted(PowError):
    """The 64-bit nonce space ran out without a passing score."""


class SearchCancelled(PowError):
    """The nonce search was stopped by a cancellation event or timeout."""
