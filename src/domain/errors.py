"""Domain error hierarchy for the balance sheet."""


class BalanceSheetError(Exception):
    """Base error carrying a machine-readable code.

    Attributes:
        code: Short error code (for example INVALID_NAME).
        details: Optional underlying cause or payload.
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details=None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def __str__(self) -> str:
        return self.message


class ValidationError(BalanceSheetError):
    """Raised when input fields fail local validation."""


class NotAuthenticatedError(BalanceSheetError):
    """Raised when an operation needs a user and none is available."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, "NOT_AUTHENTICATED")


__all__ = [
    "BalanceSheetError",
    "ValidationError",
    "NotAuthenticatedError",
]
