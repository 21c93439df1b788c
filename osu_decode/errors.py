"""Decode error taxonomy shared by the replay and beatmap decoders.

Every decoder is fail-fast: the first bad field aborts the decode of the
whole file. Each error names the field (or stage) that failed so a caller
can tell a truncated header from a corrupt frame stream.

The taxonomy is closed:

    TruncatedInputError    fewer bytes/tokens than the format requires
    InvalidEncodingError   bad UTF-8, unknown enum code, bits outside a mask
    MalformedNumberError   a token that should be numeric is not
    StructuralError        missing tokens, degenerate geometry
"""


class DecodeError(ValueError):
    """Base class for all decode failures."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class TruncatedInputError(DecodeError):
    """Input ended before the field could be read."""


class InvalidEncodingError(DecodeError):
    """Field was present but its encoding is not valid for the format."""


class MalformedNumberError(DecodeError):
    """Token could not be parsed as the required number."""


class StructuralError(DecodeError):
    """Record shape does not match what the format (or the math) requires."""
