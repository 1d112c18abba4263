"""API models."""

from .machines import DecommissionResponse, MachineResponse, ProvisionRequest, StepResultModel

__all__ = ["ProvisionRequest", "MachineResponse", "DecommissionResponse", "StepResultModel"]
