from unittest.mock import patch

import pytest
import yaml

from hvprovision.application.provisioning import OrchestratorSettings, ProvisioningOrchestrator
from hvprovision.bootstrap import Application
from hvprovision.config import ConfigurationManager
from hvprovision.domain.machine.machine_spec import MachineSpec
from tests.fakes import CallLog, FakeClock, FakeCompute, FakeDhcp, FakeDns, FakeStorage

FORWARD_ZONE = "lab.example.com"
SCOPE = "10.0.0.0"


@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def compute(call_log):
    return FakeCompute(call_log)


@pytest.fixture
def dhcp(call_log):
    return FakeDhcp(call_log, scopes={SCOPE: ["10.0.0.50", "10.0.0.51"], "10.0.1.0": []})


@pytest.fixture
def dns(call_log):
    return FakeDns(call_log)


@pytest.fixture
def storage(call_log):
    return FakeStorage(call_log)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return OrchestratorSettings(
        forward_zone=FORWARD_ZONE,
        base_path="D:\\Hyper-V",
        discovery_timeout=10.0,
        discovery_poll_interval=2.0,
    )


@pytest.fixture
def make_orchestrator(compute, dhcp, dns, storage, clock):
    def _make(settings, compute_port=None):
        return ProvisioningOrchestrator(
            compute=compute_port or compute,
            address_reservation=dhcp,
            name_service=dns,
            host_storage=storage,
            settings=settings,
            sleep=clock.sleep,
            clock=clock,
        )
    return _make


@pytest.fixture
def orchestrator(make_orchestrator, settings):
    return make_orchestrator(settings)


@pytest.fixture
def spec():
    return MachineSpec(name="web01", host="hv01", scope_address=SCOPE)


@pytest.fixture
def app_config_data():
    return {
        "winrm": {"username": "LAB\\svc-provision", "password": "secret"},
        "hyperv": {"base_path": "D:\\Hyper-V", "switch_name": "LAN"},
        "dhcp": {"server": "dhcp01", "default_scope": SCOPE},
        "dns": {"server": "dns01", "forward_zone": FORWARD_ZONE},
        "retry": {"max_attempts": 2, "base_delay": 0.0, "max_delay": 0.0},
    }


@pytest.fixture
def config_path(tmp_path, app_config_data):
    path = tmp_path / "hvprov.yaml"
    path.write_text(yaml.safe_dump(app_config_data))
    return str(path)


@pytest.fixture
def application(config_path, orchestrator):
    """Application wired to the in-memory fakes instead of WinRM adapters."""
    manager = ConfigurationManager(config_path, environ={})
    with patch("hvprovision.bootstrap.build_orchestrator", return_value=orchestrator):
        yield Application(config_manager=manager)
