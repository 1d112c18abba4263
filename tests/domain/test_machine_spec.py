import pytest

from hvprovision.domain.core.exceptions import ValidationError
from hvprovision.domain.machine.machine_spec import MachineSpec
from hvprovision.domain.machine.value_objects import GIB, MIB


@pytest.fixture
def valid_spec_data():
    return {"name": "web01", "host": "hv01", "scope_address": "10.0.0.0"}


def test_defaults(valid_spec_data):
    # Act
    spec = MachineSpec.from_dict(valid_spec_data)

    # Assert
    assert spec.cpu_count == 1
    assert spec.generation == 2
    assert spec.memory.startup_bytes == 1024 * MIB
    assert spec.memory.dynamic is True
    assert spec.memory.minimum_bytes == 512 * MIB
    assert spec.disk_size_bytes == 40 * GIB


def test_static_memory_ignores_range(valid_spec_data):
    # Arrange
    data = {**valid_spec_data, "dynamic_memory": False, "startup_memory_mb": 8192}

    # Act
    spec = MachineSpec.from_dict(data)

    # Assert
    assert spec.memory.dynamic is False
    assert spec.memory.maximum_bytes is None


def test_dynamic_memory_range_is_checked(valid_spec_data):
    with pytest.raises(ValidationError):
        MachineSpec.from_dict({**valid_spec_data, "startup_memory_mb": 4096, "maximum_memory_mb": 2048})


@pytest.mark.parametrize("field,value", [
    ("name", "-web"),
    ("name", "web_01"),
    ("name", ""),
    ("host", "  "),
    ("scope_address", "10.0.0"),
    ("scope_address", "10.0.0.010"),
    ("cpu_count", 0),
    ("generation", 3),
])
def test_invalid_fields(valid_spec_data, field, value):
    # Act
    with pytest.raises(ValidationError) as exc_info:
        MachineSpec.from_dict({**valid_spec_data, field: value})

    # Assert
    assert field in exc_info.value.details


def test_unknown_fields_are_rejected(valid_spec_data):
    with pytest.raises(ValidationError):
        MachineSpec.from_dict({**valid_spec_data, "vlan": 12})


def test_instance_options(valid_spec_data):
    # Arrange
    spec = MachineSpec.from_dict({
        **valid_spec_data,
        "cpu_count": 4,
        "generation": 1,
        "automatic_start_action": "Start",
        "automatic_start_delay": 30,
        "notes": "web tier",
    })

    # Act
    options = spec.instance_options("D:\\Hyper-V")

    # Assert
    assert options.cpu_count == 4
    assert options.path == "D:\\Hyper-V"
    assert options.secure_boot is False
    assert options.automatic_start_action == "Start"
    assert options.automatic_start_delay == 30
    assert options.notes == "web tier"
