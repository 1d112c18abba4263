"""API models for machine operations."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIBaseModel(BaseModel):
    """Base model for all API models."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class ProvisionRequest(APIBaseModel):
    """Provisioning request body; every field is accepted in camelCase or snake_case.

    Only shapes are checked here. Value rules live on ``MachineSpec`` so the
    CLI and the API reject the same inputs the same way.
    """

    model_config = ConfigDict(alias_generator=to_camel)

    name: str
    host: str
    scope_address: Optional[str] = None
    cpu_count: Optional[int] = None
    startup_memory_mb: Optional[int] = None
    dynamic_memory: Optional[bool] = None
    minimum_memory_mb: Optional[int] = None
    maximum_memory_mb: Optional[int] = None
    disk_size_gb: Optional[int] = None
    switch_name: Optional[str] = None
    install_media_path: Optional[str] = None
    base_path: Optional[str] = None
    generation: Optional[int] = None
    secure_boot_template: Optional[str] = None
    automatic_start_action: Optional[str] = None
    automatic_start_delay: Optional[int] = None
    automatic_stop_action: Optional[str] = None
    notes: Optional[str] = None

    def to_spec_data(self, default_scope: Optional[str] = None) -> Dict[str, Any]:
        """Field values for ``MachineSpec.from_dict``, leaving unset fields to its defaults."""
        data = self.model_dump(exclude_none=True)
        if "scope_address" not in data and default_scope:
            data["scope_address"] = default_scope
        return data


class MachineResponse(APIBaseModel):
    name: str
    host: str
    fqdn: str
    hardware_address: Optional[str] = Field(None, alias="hardwareAddress")
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    scope_id: Optional[str] = Field(None, alias="scopeId")
    storage_path: Optional[str] = Field(None, alias="storagePath")
    complete: bool
    resources: Dict[str, Any]
    created_at: str = Field(..., alias="createdAt")
    lifecycle_events: List[Dict[str, Any]] = Field(default_factory=list, alias="lifecycleEvents")


class StepResultModel(APIBaseModel):
    step: str
    outcome: str
    detail: str = ""


class DecommissionResponse(APIBaseModel):
    name: str
    host: str
    succeeded: bool
    steps: List[StepResultModel]
