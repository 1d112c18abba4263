"""Application bootstrap - wires configuration, logging and adapters."""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from hvprovision._package import PACKAGE_NAME, __version__
from hvprovision.application.provisioning import OrchestratorSettings, ProvisioningOrchestrator
from hvprovision.config import AppConfig, ConfigurationManager
from hvprovision.infrastructure.logging.logger import get_logger, setup_logging
from hvprovision.infrastructure.remote import PowerShellRunner
from hvprovision.providers.dhcp import WindowsDhcpAdapter
from hvprovision.providers.dns import WindowsDnsAdapter
from hvprovision.providers.hyperv import HyperVComputeAdapter, HyperVHostStorageAdapter

RunnerFactory = Callable[[str], PowerShellRunner]


def runner_factory_from_config(config: AppConfig) -> RunnerFactory:
    """One cached runner per endpoint, all sharing the WinRM and retry settings."""
    runners: Dict[str, PowerShellRunner] = {}

    def factory(endpoint: str) -> PowerShellRunner:
        if endpoint not in runners:
            winrm_config = config.winrm
            runners[endpoint] = PowerShellRunner(
                endpoint,
                winrm_config.username,
                winrm_config.password,
                transport=winrm_config.transport,
                port=winrm_config.effective_port,
                use_ssl=winrm_config.use_ssl,
                server_cert_validation=winrm_config.server_cert_validation,
                read_timeout=winrm_config.read_timeout,
                operation_timeout=winrm_config.operation_timeout,
                retry_config=config.retry,
            )
        return runners[endpoint]

    return factory


def orchestrator_settings(config: AppConfig) -> OrchestratorSettings:
    return OrchestratorSettings(
        forward_zone=config.dns.forward_zone,
        reverse_zone=config.dns.reverse_zone,
        base_path=config.hyperv.base_path,
        switch_name=config.hyperv.switch_name,
        install_media_path=config.hyperv.install_media_path,
        discovery_timeout=config.provisioning.discovery_timeout,
        discovery_poll_interval=config.provisioning.discovery_poll_interval,
        rollback_on_failure=config.provisioning.rollback_on_failure,
    )


def build_orchestrator(
    config: AppConfig, runner_factory: Optional[RunnerFactory] = None
) -> ProvisioningOrchestrator:
    """Create the orchestrator with Hyper-V, DHCP and DNS adapters for ``config``."""
    factory = runner_factory or runner_factory_from_config(config)
    return ProvisioningOrchestrator(
        compute=HyperVComputeAdapter(factory),
        address_reservation=WindowsDhcpAdapter(factory(config.dhcp.server)),
        name_service=WindowsDnsAdapter(factory(config.dns.server)),
        host_storage=HyperVHostStorageAdapter(factory),
        settings=orchestrator_settings(config),
    )


class Application:
    """Application context shared by the CLI and the REST API."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        config_manager: Optional[ConfigurationManager] = None,
        runner_factory: Optional[RunnerFactory] = None,
    ) -> None:
        self.config_path = config_path
        self._config_manager = config_manager
        self._runner_factory = runner_factory
        self._orchestrator: Optional[ProvisioningOrchestrator] = None
        self._initialized = False
        self.logger = get_logger(__name__)

    @property
    def config_manager(self) -> ConfigurationManager:
        if self._config_manager is None:
            self._config_manager = ConfigurationManager(self.config_path)
        return self._config_manager

    @property
    def config(self) -> AppConfig:
        return self.config_manager.get_typed(AppConfig)

    def initialize(self) -> None:
        """
        Load configuration, configure logging and build the orchestrator.

        Raises:
            ConfigurationError: If the configuration is missing or invalid
        """
        if self._initialized:
            return
        config = self.config
        setup_logging(config.logging)
        self._orchestrator = build_orchestrator(config, self._runner_factory)
        self._initialized = True
        self.logger.info(
            "Application initialized",
            version=__version__,
            dhcp_server=config.dhcp.server,
            dns_server=config.dns.server,
            forward_zone=config.dns.forward_zone,
        )

    @property
    def orchestrator(self) -> ProvisioningOrchestrator:
        if not self._initialized:
            raise RuntimeError("Application not initialized")
        return self._orchestrator

    def default_scope(self) -> Optional[str]:
        return self.config.dhcp.default_scope

    def health_check(self) -> Dict[str, Any]:
        """Report local readiness; no remote endpoint is contacted."""
        if not self._initialized:
            return {"status": "error", "message": "Application not initialized"}
        return {
            "status": "healthy",
            "service": PACKAGE_NAME,
            "version": __version__,
            "dhcp_server": self.config.dhcp.server,
            "dns_server": self.config.dns.server,
        }
