"""
Failure taxonomy for the recipe generation pipeline.

Every failure carries a kind, a message safe to show to the user and,
optionally, diagnostic detail that is only exposed in development mode.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    INPUT_VALIDATION = "input_validation"
    CONFIGURATION = "configuration"
    REMOTE_UNAUTHORIZED = "remote_unauthorized"
    REMOTE_FORBIDDEN = "remote_forbidden"
    REMOTE_NOT_FOUND = "remote_not_found"
    REMOTE_RATE_LIMITED = "remote_rate_limited"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    REMOTE_SERVER_ERROR = "remote_server_error"
    REMOTE_UNEXPECTED_STATUS = "remote_unexpected_status"
    REMOTE_TIMEOUT = "remote_timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    EMPTY_GENERATION = "empty_generation"
    RECIPE_NOT_FOUND = "recipe_not_found"


class RecipeError(Exception):
    kind: ErrorKind = ErrorKind.REMOTE_UNEXPECTED_STATUS

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        detail: Any = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.detail = detail
        self.retry_after = retry_after

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class InputValidationError(RecipeError):
    kind = ErrorKind.INPUT_VALIDATION


class ConfigurationError(RecipeError):
    kind = ErrorKind.CONFIGURATION


class GenerationError(RecipeError):
    """Raised when the remote model call fails or yields nothing usable."""


class EmptyGenerationError(GenerationError):
    kind = ErrorKind.EMPTY_GENERATION


class RecipeNotFoundError(RecipeError):
    kind = ErrorKind.RECIPE_NOT_FOUND
