"""Hyper-V provider."""

from .compute_adapter import HyperVComputeAdapter
from .storage_adapter import HyperVHostStorageAdapter

__all__ = ["HyperVComputeAdapter", "HyperVHostStorageAdapter"]
