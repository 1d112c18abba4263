"""Provisioning workflows."""

from .orchestrator import OrchestratorSettings, ProvisioningOrchestrator
from .report import DecommissionReport, StepResult

__all__ = [
    "ProvisioningOrchestrator",
    "OrchestratorSettings",
    "DecommissionReport",
    "StepResult",
]
