"""Shared kernel - common value types and the error taxonomy."""

from .common_types import HardwareAddress, IPAddress
from .exceptions import (
    ConfigurationError,
    DomainException,
    RemoteOperationError,
    RemoteUnavailableError,
    ResourceConflictError,
    ResourceNotFoundError,
    ValidationError,
)

__all__ = [
    "HardwareAddress",
    "IPAddress",
    "DomainException",
    "ValidationError",
    "ConfigurationError",
    "ResourceNotFoundError",
    "ResourceConflictError",
    "RemoteUnavailableError",
    "RemoteOperationError",
]
