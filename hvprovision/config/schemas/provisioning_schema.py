"""Workflow tuning schema."""
from pydantic import BaseModel, Field


class ProvisioningConfig(BaseModel):
    discovery_timeout: float = Field(120.0, gt=0, description="Seconds to wait for a hardware address")
    discovery_poll_interval: float = Field(2.0, gt=0, description="Seconds between hardware address polls")
    rollback_on_failure: bool = Field(False, description="Decommission a partially provisioned machine")
