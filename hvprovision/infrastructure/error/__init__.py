"""Error translation for the CLI and the REST API."""

from .exception_handler import (
    EXIT_FAILURE,
    EXIT_INVALID,
    EXIT_OK,
    EXIT_UNREACHABLE,
    ErrorResponse,
    ExceptionHandler,
)

__all__ = [
    "ExceptionHandler",
    "ErrorResponse",
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_INVALID",
    "EXIT_UNREACHABLE",
]
