"""
Exception hierarchy for the transcoder.

Programmer errors (bad configuration, broken internal invariants) raise
ContractViolation and are not meant to be caught. Malformed runtime input
raises one of the ValueError subclasses so callers can recover.
"""


class TranscoderError(Exception):
    """Base class for all transcoder errors."""


class ContractViolation(TranscoderError, AssertionError):
    """A precondition, postcondition or internal assertion failed."""


class InvalidFrameError(TranscoderError, ValueError):
    """The source frame cannot be foveated with the current configuration."""


class ElevationOutOfRangeError(TranscoderError, ValueError):
    """The vertical focus band would leave the frame."""


class InvalidRecordError(TranscoderError, ValueError):
    """An OptimizedImage was built from inconsistent panels or metadata."""


class SerializationError(InvalidRecordError):
    """A stored OptimizedImage could not be read back."""


def require(condition: bool, message: str) -> None:
    """Precondition check."""
    if not condition:
        raise ContractViolation(f"Precondition failed: {message}")


def ensure(condition: bool, message: str) -> None:
    """Postcondition check."""
    if not condition:
        raise ContractViolation(f"Postcondition failed: {message}")


def check(condition: bool, message: str) -> None:
    """Internal assertion."""
    if not condition:
        raise ContractViolation(f"Assertion failed: {message}")
