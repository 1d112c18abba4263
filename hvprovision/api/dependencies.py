"""FastAPI dependencies backed by the application stored on ``app.state``."""
from fastapi import Depends, Request

from hvprovision.application.provisioning import ProvisioningOrchestrator
from hvprovision.bootstrap import Application


def get_application(request: Request) -> Application:
    return request.app.state.application


def get_orchestrator(application: Application = Depends(get_application)) -> ProvisioningOrchestrator:
    return application.orchestrator
