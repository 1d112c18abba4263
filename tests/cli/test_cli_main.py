"""Tests for the hvprov command line."""
import json

import pytest
import yaml

from hvprovision.cli.main import build_spec, main, parse_args
from hvprovision.domain.core.exceptions import RemoteOperationError
from hvprovision.infrastructure.error import EXIT_FAILURE, EXIT_INVALID, EXIT_OK, EXIT_UNREACHABLE


def run(capsys, application, *argv):
    code = main(list(argv), application=application)
    return code, capsys.readouterr().out


class TestParseArgs:
    def test_provision_options(self):
        args = parse_args([
            "provision", "web01", "--host", "hv01", "--cpu", "4", "--memory", "4096",
            "--static-memory", "--iso", "D:\\iso\\setup.iso", "--generation", "1",
        ])

        assert args.command == "provision"
        assert args.cpu_count == 4
        assert args.dynamic_memory is False
        assert args.generation == 1

    def test_dynamic_memory_unset_by_default(self):
        assert parse_args(["provision", "web01", "--host", "hv01"]).dynamic_memory is None

    def test_host_is_required(self):
        with pytest.raises(SystemExit):
            parse_args(["decommission", "web01"])


class TestBuildSpec:
    def test_default_scope_and_unset_options(self):
        # Act
        spec = build_spec(parse_args(["provision", "web01", "--host", "hv01", "--disk-size", "80"]), "10.0.0.0")

        # Assert
        assert spec.scope_address == "10.0.0.0"
        assert spec.disk_size_gb == 80
        assert spec.cpu_count == 1
        assert spec.dynamic_memory is True

    def test_explicit_scope_wins(self):
        args = parse_args(["provision", "web01", "--host", "hv01", "--scope", "10.0.1.0"])

        assert build_spec(args, "10.0.0.0").scope_address == "10.0.1.0"


class TestMain:
    def test_provision_json(self, capsys, application):
        # Act
        code, out = run(capsys, application, "provision", "web01", "--host", "hv01")

        # Assert
        assert code == EXIT_OK
        machine = json.loads(out)
        assert machine["fqdn"] == "web01.lab.example.com"
        assert machine["ipAddress"] == "10.0.0.50"
        assert machine["resources"]["dhcp_reservation"]["clientId"] == "00-15-5D-0A-00-01"

    def test_provision_table(self, capsys, application):
        code, out = run(capsys, application, "--format", "table", "provision", "web01", "--host", "hv01")

        assert code == EXIT_OK
        assert "web01.lab.example.com" in out
        assert "10.0.0.50" in out

    def test_invalid_spec_exit_code(self, capsys, application, call_log):
        code, out = run(capsys, application, "provision", "web_01", "--host", "hv01")

        assert code == EXIT_INVALID
        assert json.loads(out)["error"]["code"] == "VALIDATION_ERROR"
        assert call_log.mutations() == []

    def test_conflict_exit_code(self, capsys, application):
        run(capsys, application, "provision", "web01", "--host", "hv01")

        code, out = run(capsys, application, "provision", "web01", "--host", "hv01")

        assert code == EXIT_INVALID
        assert json.loads(out)["error"]["code"] == "NAME_CONFLICT"

    def test_unreachable_host_exit_code(self, capsys, application, compute):
        compute.unreachable_hosts.add("hv01")

        code, out = run(capsys, application, "decommission", "web01", "--host", "hv01")

        assert code == EXIT_UNREACHABLE
        assert json.loads(out)["error"]["details"]["endpoint"] == "hv01"

    def test_step_failure_lists_leftovers(self, capsys, application):
        code, out = run(capsys, application, "--format", "table", "provision", "web01", "--host", "hv01",
                        "--scope", "10.0.1.0")

        assert code == EXIT_FAILURE
        assert "Left in place: storage, instance, disk" in out

    def test_decommission_yaml(self, capsys, application):
        # Arrange
        run(capsys, application, "provision", "web01", "--host", "hv01")

        # Act
        code, out = run(capsys, application, "--format", "yaml", "decommission", "web01", "--host", "hv01")

        # Assert
        assert code == EXIT_OK
        report = yaml.safe_load(out)
        assert report["succeeded"] is True
        assert report["steps"][0] == {"step": "stop_instance", "outcome": "completed", "detail": ""}

    def test_decommission_of_unknown_machine_succeeds(self, capsys, application):
        code, out = run(capsys, application, "decommission", "ghost", "--host", "hv01")

        assert code == EXIT_OK
        outcomes = [s["outcome"] for s in json.loads(out)["steps"]]
        assert "failed" not in outcomes

    def test_partial_decommission_exit_code(self, capsys, application, storage):
        # Arrange
        run(capsys, application, "provision", "web01", "--host", "hv01")
        storage.failures["remove_directory_recursive"] = RemoteOperationError("Remove-Item", "file in use")

        # Act
        code, out = run(capsys, application, "--format", "table", "decommission", "web01", "--host", "hv01")

        # Assert
        assert code == EXIT_FAILURE
        assert "PARTIAL_FAILURE" in out
        assert "remove_storage" in out

    def test_output_file(self, capsys, application, tmp_path):
        target = tmp_path / "machine.json"

        code, out = run(capsys, application, "--output", str(target), "provision", "web01", "--host", "hv01")

        assert code == EXIT_OK
        assert out == ""
        assert json.loads(target.read_text())["name"] == "web01"
