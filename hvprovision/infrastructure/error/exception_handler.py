"""Translation of domain exceptions into API responses and CLI exit codes."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple, Type

from hvprovision.domain.core.exceptions import (
    ConfigurationError,
    DomainException,
    RemoteOperationError,
    RemoteUnavailableError,
    ResourceConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from hvprovision.domain.machine.exceptions import (
    InvalidMachineStateError,
    PartialFailureError,
    StepFailureError,
)
from hvprovision.infrastructure.logging.logger import get_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_UNREACHABLE = 3


@dataclass
class ErrorResponse:
    code: str
    message: str
    http_status: int
    exit_code: int
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message, "details": self.details},
            "timestamp": self.timestamp,
        }


# Most specific first
_MAPPING: List[Tuple[Type[Exception], str, int, int]] = [
    (ValidationError, "VALIDATION_ERROR", 422, EXIT_INVALID),
    (ResourceConflictError, "NAME_CONFLICT", 409, EXIT_INVALID),
    (ConfigurationError, "CONFIGURATION_ERROR", 500, EXIT_INVALID),
    (RemoteUnavailableError, "REMOTE_UNAVAILABLE", 503, EXIT_UNREACHABLE),
    (PartialFailureError, "PARTIAL_FAILURE", 207, EXIT_FAILURE),
    (StepFailureError, "STEP_FAILED", 502, EXIT_FAILURE),
    (ResourceNotFoundError, "NOT_FOUND", 404, EXIT_FAILURE),
    (RemoteOperationError, "REMOTE_OPERATION_FAILED", 502, EXIT_FAILURE),
    (InvalidMachineStateError, "INVALID_MACHINE_STATE", 500, EXIT_FAILURE),
    (DomainException, "DOMAIN_ERROR", 500, EXIT_FAILURE),
]


class ExceptionHandler:
    """Builds one consistent error description for both outer surfaces."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def handle(self, exc: Exception) -> ErrorResponse:
        for exc_type, code, http_status, exit_code in _MAPPING:
            if isinstance(exc, exc_type):
                response = ErrorResponse(code, str(exc), http_status, exit_code, self._details(exc))
                break
        else:
            self.logger.error("Unhandled error", error_type=type(exc).__name__, error=str(exc), exc_info=exc)
            response = ErrorResponse("INTERNAL_ERROR", "An internal error occurred", 500, EXIT_FAILURE)
        return response

    @staticmethod
    def _details(exc: Exception) -> Dict[str, Any]:
        details: Dict[str, Any] = {}
        if isinstance(exc, ValidationError) and exc.details:
            details["fields"] = exc.details
        if isinstance(exc, ConfigurationError) and exc.missing_fields:
            details["missingFields"] = exc.missing_fields
        if isinstance(exc, ResourceConflictError):
            details.update({"resource": exc.resource_type, "name": exc.resource_id, "host": exc.host})
        if isinstance(exc, (StepFailureError, RemoteUnavailableError)):
            step = getattr(exc, "step", None)
            if step is not None:
                details["step"] = step.value
            if exc.machine is not None:
                details["machine"] = exc.machine.to_dict(long=True)
            details["leftInPlace"] = list(exc.left_in_place)
            if exc.rollback_report is not None:
                details["rollback"] = exc.rollback_report.to_dict()
        if isinstance(exc, RemoteUnavailableError):
            details["endpoint"] = exc.endpoint
            if exc.report is not None:
                details["report"] = exc.report.to_dict()
        if isinstance(exc, PartialFailureError):
            details["report"] = exc.report.to_dict()
        if isinstance(exc, RemoteOperationError):
            details["operation"] = exc.operation
        return details
