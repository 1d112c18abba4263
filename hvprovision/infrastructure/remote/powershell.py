"""Remote PowerShell execution over WinRM."""
import json
import time
from typing import Any, Callable, List, Optional

import requests
import winrm
from winrm.exceptions import (
    InvalidCredentialsError,
    WinRMError,
    WinRMOperationTimeoutError,
    WinRMTransportError,
)

from hvprovision.domain.core.exceptions import (
    RemoteOperationError,
    RemoteUnavailableError,
    ResourceNotFoundError,
)
from hvprovision.infrastructure.logging.logger import get_logger
from hvprovision.infrastructure.resilience import (
    ExponentialBackoffStrategy,
    MaxRetriesExceededError,
    RetryConfig,
)

# Exit code a script uses to report that the object it acts on does not exist
NOT_FOUND_EXIT_CODE = 44

TRANSIENT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    WinRMTransportError,
    WinRMOperationTimeoutError,
)

_SCRIPT_TEMPLATE = """$ErrorActionPreference = 'Stop'
$ProgressPreference = 'SilentlyContinue'
try {{
{body}
}} catch {{
    [Console]::Error.WriteLine($_.Exception.Message)
    if ($_.CategoryInfo.Category -eq 'ObjectNotFound') {{ exit %d }}
    exit 1
}}
""" % NOT_FOUND_EXIT_CODE


def ps_quote(value: Any) -> str:
    """Render a value as a single-quoted PowerShell string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def as_list(payload: Any) -> List[Any]:
    """ConvertTo-Json emits a bare object for one item and nothing for none."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]


class PowerShellRunner:
    """
    Runs PowerShell scripts on one Windows endpoint.

    Transport failures are retried with exponential backoff and then
    reported as RemoteUnavailableError. A script that runs but exits
    non-zero is never retried: exit code 44 or an ObjectNotFound error
    becomes ResourceNotFoundError, anything else RemoteOperationError.
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        password: str,
        transport: str = "ntlm",
        port: int = 5985,
        use_ssl: bool = False,
        server_cert_validation: str = "validate",
        read_timeout: int = 30,
        operation_timeout: int = 20,
        retry_config: Optional[RetryConfig] = None,
        session_factory: Callable[..., Any] = winrm.Session,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.endpoint = endpoint
        self._username = username
        self._password = password
        self._transport = transport
        self._port = port
        self._use_ssl = use_ssl
        self._server_cert_validation = server_cert_validation
        self._read_timeout = read_timeout
        self._operation_timeout = operation_timeout
        self._session_factory = session_factory
        self._retry = ExponentialBackoffStrategy(retry_config, sleep=sleep)
        self._session = None
        self._logger = get_logger(__name__).bind(endpoint=endpoint)

    @property
    def target(self) -> str:
        scheme = "https" if self._use_ssl else "http"
        return f"{scheme}://{self.endpoint}:{self._port}/wsman"

    def _get_session(self):
        if self._session is None:
            self._session = self._session_factory(
                self.target,
                auth=(self._username, self._password),
                transport=self._transport,
                server_cert_validation=self._server_cert_validation,
                read_timeout_sec=self._read_timeout,
                operation_timeout_sec=self._operation_timeout,
            )
        return self._session

    def run(self, script: str, operation: str, parse_json: bool = False) -> Any:
        """
        Execute a script and return its output.

        Args:
            script: PowerShell statements; wrapped so terminating errors set the exit code
            operation: Short label used in logs and error messages
            parse_json: Decode stdout as JSON (``None`` when the script printed nothing)

        Returns:
            Decoded JSON when ``parse_json`` is set, otherwise stripped stdout
        """
        wrapped = _SCRIPT_TEMPLATE.format(body=script)
        self._logger.debug("Running remote script", operation=operation)
        try:
            result = self._retry.execute(
                self._run_once, wrapped, retryable=TRANSIENT_ERRORS, operation_name=operation
            )
        except MaxRetriesExceededError as e:
            self._logger.error("Endpoint unreachable", operation=operation, attempts=e.attempts)
            raise RemoteUnavailableError(self.endpoint, str(e.last_exception)) from e.last_exception
        except InvalidCredentialsError as e:
            raise RemoteOperationError(operation, f"{self.endpoint} rejected the credentials: {e}") from e
        except WinRMError as e:
            raise RemoteOperationError(operation, f"{self.endpoint}: {e}") from e

        stdout = _decode(result.std_out)
        stderr = _decode(result.std_err)
        if result.status_code != 0:
            self._raise_for_exit(operation, result.status_code, stdout, stderr)

        if not parse_json:
            return stdout
        if not stdout:
            return None
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            self._logger.debug("Unparseable script output", operation=operation, stdout=stdout)
            raise RemoteOperationError(operation, f"unexpected output from {self.endpoint}: {e}") from e

    def _run_once(self, script: str):
        return self._get_session().run_ps(script)

    def _raise_for_exit(self, operation: str, exit_code: int, stdout: str, stderr: str) -> None:
        preview = stderr or stdout or "no output"
        if exit_code == NOT_FOUND_EXIT_CODE or "ObjectNotFound" in stderr:
            self._logger.debug("Remote object not found", operation=operation, detail=preview)
            raise ResourceNotFoundError(operation, preview)
        self._logger.warning("Remote script failed", operation=operation, exit_code=exit_code, detail=preview)
        raise RemoteOperationError(operation, f"exit code {exit_code}: {preview}", details={"exit_code": exit_code})


def _decode(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.lstrip("\ufeff").strip()
