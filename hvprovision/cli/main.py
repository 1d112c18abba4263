"""Command line entry point: ``hvprov provision|decommission|serve``."""
import argparse
import sys
from typing import Any, Dict, List, Optional

from hvprovision._package import PACKAGE_NAME_SHORT, __version__
from hvprovision.bootstrap import Application
from hvprovision.cli.formatters import format_output
from hvprovision.config import ConfigurationManager
from hvprovision.domain.machine.machine_spec import MachineSpec
from hvprovision.infrastructure.error import EXIT_OK, ExceptionHandler
from hvprovision.infrastructure.logging.logger import get_logger

FORMATS = ["json", "yaml", "table"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME_SHORT,
        description="Provision and decommission Hyper-V machines with DHCP and DNS registration",
    )
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    parser.add_argument("--format", choices=FORMATS, default="json", help="Output format (default: json)")
    parser.add_argument("--output", help="Output file (default: stdout)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    provision = subparsers.add_parser("provision", help="Create a machine and register it")
    provision.add_argument("name", help="Machine name (also the DHCP and DNS name)")
    provision.add_argument("--host", required=True, help="Hyper-V host")
    provision.add_argument("--scope", help="DHCP scope id (default: dhcp.default_scope)")
    provision.add_argument("--cpu", type=int, dest="cpu_count", help="Virtual processors")
    provision.add_argument("--memory", type=int, dest="startup_memory_mb", help="Startup memory in MiB")
    memory_mode = provision.add_mutually_exclusive_group()
    memory_mode.add_argument("--dynamic-memory", dest="dynamic_memory", action="store_true", default=None)
    memory_mode.add_argument("--static-memory", dest="dynamic_memory", action="store_false")
    provision.add_argument("--min-memory", type=int, dest="minimum_memory_mb", help="Dynamic memory floor in MiB")
    provision.add_argument("--max-memory", type=int, dest="maximum_memory_mb", help="Dynamic memory ceiling in MiB")
    provision.add_argument("--disk-size", type=int, dest="disk_size_gb", help="System disk size in GiB")
    provision.add_argument("--switch", dest="switch_name", help="Virtual switch")
    provision.add_argument("--iso", dest="install_media_path", help="Install media attached as first boot device")
    provision.add_argument("--base-path", dest="base_path", help="Host storage root")
    provision.add_argument("--generation", type=int, choices=[1, 2], help="VM generation")
    provision.add_argument("--secure-boot-template", dest="secure_boot_template")
    provision.add_argument("--start-action", dest="automatic_start_action", choices=["Nothing", "StartIfRunning", "Start"])
    provision.add_argument("--start-delay", type=int, dest="automatic_start_delay", help="Seconds")
    provision.add_argument("--stop-action", dest="automatic_stop_action", choices=["TurnOff", "Save", "ShutDown"])
    provision.add_argument("--notes", help="Free text stored on the VM")

    decommission = subparsers.add_parser("decommission", help="Remove a machine and its registrations")
    decommission.add_argument("name", help="Machine name")
    decommission.add_argument("--host", required=True, help="Hyper-V host")
    decommission.add_argument("--base-path", dest="base_path", help="Host storage root")

    serve = subparsers.add_parser("serve", help="Run the REST API server")
    serve.add_argument("--bind", dest="bind_host", help="Listen address (default: server.host)")
    serve.add_argument("--port", type=int, help="Listen port (default: server.port)")

    return parser.parse_args(argv)


SPEC_FIELDS = [
    "cpu_count",
    "startup_memory_mb",
    "dynamic_memory",
    "minimum_memory_mb",
    "maximum_memory_mb",
    "disk_size_gb",
    "switch_name",
    "install_media_path",
    "base_path",
    "generation",
    "secure_boot_template",
    "automatic_start_action",
    "automatic_start_delay",
    "automatic_stop_action",
    "notes",
]


def build_spec(args: argparse.Namespace, default_scope: Optional[str]) -> MachineSpec:
    data: Dict[str, Any] = {"name": args.name, "host": args.host, "scope_address": args.scope or default_scope}
    for name in SPEC_FIELDS:
        value = getattr(args, name, None)
        if value is not None:
            data[name] = value
    return MachineSpec.from_dict(data)


def execute_command(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    app.initialize()
    if args.command == "provision":
        spec = build_spec(args, app.default_scope())
        return app.orchestrator.provision(spec).to_dict(long=args.format != "table")
    if args.command == "decommission":
        return app.orchestrator.decommission(args.name, args.host, args.base_path).to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def serve(args: argparse.Namespace, app: Application) -> None:
    import uvicorn

    from hvprovision.api.server import create_fastapi_app

    fastapi_app = create_fastapi_app(app)
    server_config = app.config.server
    uvicorn.run(
        fastapi_app,
        host=args.bind_host or server_config.host,
        port=args.port or server_config.port,
        log_level=server_config.log_level,
        access_log=server_config.access_log,
    )


def write_output(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        print(text)


def main(argv: Optional[List[str]] = None, application: Optional[Application] = None) -> int:
    """Main CLI entry point; returns the process exit code."""
    args = parse_args(argv)
    logger = get_logger(__name__)

    if application is None:
        overrides = {"logging": {"level": args.log_level}} if args.log_level else None
        application = Application(config_manager=ConfigurationManager(args.config, overrides=overrides))

    try:
        if args.command == "serve":
            serve(args, application)
            return EXIT_OK
        result = execute_command(args, application)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except Exception as e:
        error_response = ExceptionHandler().handle(e)
        logger.error("Command failed", command=args.command, code=error_response.code, error=error_response.message)
        write_output(format_output(error_response.to_dict(), args.format), args.output)
        return error_response.exit_code

    write_output(format_output(result, args.format), args.output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
