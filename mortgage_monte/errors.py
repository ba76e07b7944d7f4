"""Exception types raised by the projection engine."""


class InvalidInputError(ValueError):
    """Input parameters are missing, non-finite or out of domain.

    Raised before any trial runs. ``errors`` holds one message per offending field.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class NumericDegeneracyError(ArithmeticError):
    """An aggregated trajectory field came out NaN or infinite."""
