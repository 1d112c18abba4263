"""Main application configuration schema."""
from typing import Any, Dict

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from hvprovision.domain.core.exceptions import ConfigurationError
from hvprovision.infrastructure.resilience.config import RetryConfig

from .logging_schema import LoggingConfig
from .provisioning_schema import ProvisioningConfig
from .remote_schema import DhcpConfig, DnsConfig, HyperVConfig, WinRMConfig
from .server_schema import ServerConfig


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0", description="Configuration version")
    winrm: WinRMConfig
    hyperv: HyperVConfig = Field(default_factory=HyperVConfig)
    dhcp: DhcpConfig
    dns: DnsConfig
    provisioning: ProvisioningConfig = Field(default_factory=ProvisioningConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """
        Validate raw configuration data.

        Raises:
            ConfigurationError: Listing every missing field alongside the first error
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors()
            missing = [".".join(str(p) for p in err["loc"]) for err in errors if err["type"] == "missing"]
            first = errors[0]
            location = ".".join(str(p) for p in first["loc"]) or "configuration"
            raise ConfigurationError(f"Invalid configuration at {location}: {first['msg']}", missing) from e
