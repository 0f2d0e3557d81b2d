"""Input validation errors raised by the decoders."""


class DecodeInputError(ValueError):
    """Base class for contract violations on decoder input."""


class EmptyInputError(DecodeInputError):
    """Raised when a required text input is empty."""


class InvalidIcaoError(DecodeInputError):
    """Raised when an ICAO hint is not a 4-character code."""

    def __init__(self, code: str, role: str = 'ICAO'):
        self.code = code
        self.role = role
        super().__init__(
            f"{role} code '{code}' is invalid. Use a 4-character airport code (e.g., EGLL, KJFK)."
        )
