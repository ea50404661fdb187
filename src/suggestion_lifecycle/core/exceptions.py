"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NetworkError(AppError):
    """Raised on a non-2xx response or a failed request to the suggestions backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message, code="NETWORK_ERROR")


class UnknownStatusError(AppError):
    """Raised when an operation needs a suggestion status that has not been loaded."""

    def __init__(self, portfolio_id: str):
        super().__init__(
            f"Suggestion status not loaded for portfolio {portfolio_id}",
            code="UNKNOWN_STATUS",
        )


class InvalidTransitionError(AppError):
    """Raised when the lifecycle state machine is asked for an illegal transition."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Invalid lifecycle transition: {current} -> {target}",
            code="INVALID_TRANSITION",
        )
