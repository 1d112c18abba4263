from unittest.mock import Mock

import pytest
import requests
from winrm import Response
from winrm.exceptions import InvalidCredentialsError

from hvprovision.domain.core.exceptions import (
    RemoteOperationError,
    RemoteUnavailableError,
    ResourceNotFoundError,
)
from hvprovision.infrastructure.remote import NOT_FOUND_EXIT_CODE, PowerShellRunner, as_list, ps_quote
from hvprovision.infrastructure.resilience import RetryConfig


@pytest.fixture
def session():
    session = Mock()
    session.run_ps.return_value = Response((b"", b"", 0))
    return session


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def runner(session, sleeps):
    return PowerShellRunner(
        "hv01",
        "LAB\\svc",
        "secret",
        retry_config=RetryConfig(max_attempts=3, base_delay=1.0),
        session_factory=Mock(return_value=session),
        sleep=sleeps.append,
    )


def test_session_is_created_once_with_connection_settings(session):
    # Arrange
    factory = Mock(return_value=session)
    runner = PowerShellRunner(
        "hv01", "LAB\\svc", "secret", transport="kerberos", port=5986, use_ssl=True,
        server_cert_validation="ignore", session_factory=factory,
    )

    # Act
    runner.run("Get-VMHost", operation="Get-VMHost")
    runner.run("Get-VMHost", operation="Get-VMHost")

    # Assert
    factory.assert_called_once_with(
        "https://hv01:5986/wsman",
        auth=("LAB\\svc", "secret"),
        transport="kerberos",
        server_cert_validation="ignore",
        read_timeout_sec=30,
        operation_timeout_sec=20,
    )


def test_script_is_wrapped_to_stop_on_errors(runner, session):
    # Act
    runner.run("Start-VM -Name 'web01'", operation="Start-VM")

    # Assert
    script = session.run_ps.call_args[0][0]
    assert script.startswith("$ErrorActionPreference = 'Stop'")
    assert "Start-VM -Name 'web01'" in script
    assert f"exit {NOT_FOUND_EXIT_CODE}" in script


def test_stdout_is_decoded_and_stripped(runner, session):
    # Arrange
    session.run_ps.return_value = Response(("\ufeff00155D0A0001\r\n".encode("utf-8"), b"", 0))

    # Act & Assert
    assert runner.run("...", operation="Get-VMNetworkAdapter") == "00155D0A0001"


def test_json_output_is_parsed(runner, session):
    # Arrange
    session.run_ps.return_value = Response((b'{"Name":"web01","Path":"D:\\\\Hyper-V\\\\web01"}', b"", 0))

    # Act
    payload = runner.run("...", operation="Get-VM", parse_json=True)

    # Assert
    assert payload == {"Name": "web01", "Path": "D:\\Hyper-V\\web01"}


def test_empty_json_output_is_none(runner):
    assert runner.run("...", operation="Get-VM", parse_json=True) is None


def test_unparseable_json_is_an_operation_error(runner, session):
    session.run_ps.return_value = Response((b"not json", b"", 0))

    with pytest.raises(RemoteOperationError):
        runner.run("...", operation="Get-VM", parse_json=True)


@pytest.mark.parametrize("exit_code,stderr", [
    (NOT_FOUND_EXIT_CODE, b"VM web01 not found"),
    (1, b"ObjectNotFound: (web01:String) [Get-VM], VirtualizationException"),
])
def test_missing_objects_raise_not_found(runner, session, exit_code, stderr):
    session.run_ps.return_value = Response((b"", stderr, exit_code))

    with pytest.raises(ResourceNotFoundError):
        runner.run("...", operation="Remove-VM")


def test_failed_script_is_not_retried(runner, session, sleeps):
    # Arrange
    session.run_ps.return_value = Response((b"", b"Access is denied", 1))

    # Act
    with pytest.raises(RemoteOperationError) as exc_info:
        runner.run("...", operation="New-VM")

    # Assert
    assert "Access is denied" in str(exc_info.value)
    assert exc_info.value.details == {"exit_code": 1}
    assert session.run_ps.call_count == 1
    assert sleeps == []


def test_transport_errors_are_retried(runner, session, sleeps):
    # Arrange
    session.run_ps.side_effect = [
        requests.exceptions.ConnectionError("refused"),
        Response((b"ok", b"", 0)),
    ]

    # Act
    result = runner.run("...", operation="Get-VMHost")

    # Assert
    assert result == "ok"
    assert sleeps == [1.0]


def test_persistent_transport_errors_make_endpoint_unavailable(runner, session, sleeps):
    # Arrange
    session.run_ps.side_effect = requests.exceptions.ConnectTimeout("timed out")

    # Act
    with pytest.raises(RemoteUnavailableError) as exc_info:
        runner.run("...", operation="Get-VMHost")

    # Assert
    assert exc_info.value.endpoint == "hv01"
    assert session.run_ps.call_count == 3
    assert sleeps == [1.0, 2.0]


def test_rejected_credentials_are_an_operation_error(runner, session):
    session.run_ps.side_effect = InvalidCredentialsError("the specified credentials were rejected by the server")

    with pytest.raises(RemoteOperationError) as exc_info:
        runner.run("...", operation="Get-VMHost")

    assert "rejected the credentials" in str(exc_info.value)
    assert session.run_ps.call_count == 1


def test_ps_quote_escapes_single_quotes():
    assert ps_quote("O'Brien's VM") == "'O''Brien''s VM'"
    assert ps_quote(42) == "'42'"


def test_as_list():
    assert as_list(None) == []
    assert as_list({"a": 1}) == [{"a": 1}]
    assert as_list([1, 2]) == [1, 2]
