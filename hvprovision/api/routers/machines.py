"""Machine provisioning API routes."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from hvprovision.api.dependencies import get_application, get_orchestrator
from hvprovision.api.models import DecommissionResponse, MachineResponse, ProvisionRequest
from hvprovision.application.provisioning import ProvisioningOrchestrator
from hvprovision.bootstrap import Application
from hvprovision.domain.machine.machine_spec import MachineSpec

router = APIRouter(prefix="/machines", tags=["Machines"])


@router.post(
    "",
    status_code=201,
    response_model=MachineResponse,
    response_model_by_alias=True,
    summary="Provision Machine",
    description="Create a VM, reserve its address and register it in DNS",
)
def provision_machine(
    body: ProvisionRequest = Body(
        ..., examples=[{"name": "web01", "host": "hv01", "scopeAddress": "10.0.0.0", "cpuCount": 2}]
    ),
    application: Application = Depends(get_application),
    orchestrator: ProvisioningOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Provision one machine.

    - **name**: Machine name, also used for DHCP and DNS
    - **host**: Hyper-V host
    - **scopeAddress**: DHCP scope; the configured default when omitted
    """
    spec = MachineSpec.from_dict(body.to_spec_data(application.default_scope()))
    return orchestrator.provision(spec).to_dict(long=True)


@router.delete(
    "/{name}",
    response_model=DecommissionResponse,
    summary="Decommission Machine",
    description="Remove a VM together with its DHCP and DNS registrations",
)
def decommission_machine(
    name: str,
    host: str = Query(..., description="Hyper-V host owning the machine"),
    base_path: Optional[str] = Query(None, alias="basePath", description="Host storage root"),
    orchestrator: ProvisioningOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Decommission a machine; missing resources are not an error."""
    return orchestrator.decommission(name, host, base_path).to_dict()
