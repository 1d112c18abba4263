"""Connection schemas for the Hyper-V host, DHCP and DNS endpoints."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WinRMConfig(BaseModel):
    """WinRM settings shared by every remote endpoint."""
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., description="Account used for every WinRM session")
    password: str = Field(..., repr=False, description="Password for ``username``")
    transport: Literal["ntlm", "kerberos", "credssp", "basic", "ssl", "plaintext"] = "ntlm"
    use_ssl: bool = Field(False, description="Connect over HTTPS")
    port: Optional[int] = Field(None, ge=1, le=65535, description="Defaults to 5985, or 5986 with TLS")
    server_cert_validation: Literal["validate", "ignore"] = "validate"
    read_timeout: int = Field(30, ge=1, description="HTTP read timeout in seconds")
    operation_timeout: int = Field(20, ge=1, description="WS-Management operation timeout in seconds")

    @model_validator(mode="after")
    def validate_timeouts(self) -> "WinRMConfig":
        if self.read_timeout <= self.operation_timeout:
            raise ValueError("read_timeout must be greater than operation_timeout")
        return self

    @property
    def effective_port(self) -> int:
        if self.port:
            return self.port
        return 5986 if self.use_ssl else 5985


class HyperVConfig(BaseModel):
    """Host-side defaults for new machines."""
    model_config = ConfigDict(extra="forbid")

    base_path: str = Field(r"C:\ProgramData\Microsoft\Windows\Hyper-V", description="Root of per-machine directories")
    switch_name: str = Field("Default Switch", description="Virtual switch new machines connect to")
    install_media_path: Optional[str] = Field(None, description="ISO attached when a request names none")


class DhcpConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="DHCP server reached over WinRM")
    default_scope: Optional[str] = Field(None, description="Scope used when a request names none")


class DnsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="DNS server reached over WinRM")
    forward_zone: str = Field(..., description="Zone holding the machines' A records")
    reverse_zone: Optional[str] = Field(None, description="Reverse zone; derived from the address when unset")
