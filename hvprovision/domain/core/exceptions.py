# hvprovision/domain/core/exceptions.py
from typing import Any, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""
    pass


class ValidationError(DomainException):
    """Raised when input validation fails before any remote mutation."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""
    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class ResourceNotFoundError(DomainException):
    """Raised when a remote resource does not exist.

    Expected during decommission, where it is recorded as a successful
    no-op rather than a failure.
    """
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceConflictError(DomainException):
    """Raised when a machine name is already bound to a live resource."""
    def __init__(self, resource_type: str, resource_id: str, host: Optional[str] = None):
        location = f" on {host}" if host else ""
        super().__init__(f"{resource_type} {resource_id} already exists{location}")
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.host = host


class RemoteUnavailableError(DomainException):
    """Raised when a host or service cannot be reached at all."""
    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint} is unreachable: {message}")
        self.endpoint = endpoint
        # Filled in by the orchestrator when raised mid-workflow
        self.step: Optional[Any] = None
        self.machine: Optional[Any] = None
        self.left_in_place: List[str] = []
        self.report: Optional[Any] = None
        self.rollback_report: Optional[Any] = None


class RemoteOperationError(DomainException):
    """Raised when a remote call was delivered but failed (permissions, bad input, service error)."""
    def __init__(self, operation: str, message: str, details: Any = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.details = details
