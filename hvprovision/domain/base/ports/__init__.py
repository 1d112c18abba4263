"""Domain ports - interfaces the orchestrator depends on."""

from .address_reservation_port import AddressReservationPort
from .compute_port import ComputePort
from .host_storage_port import HostStoragePort
from .name_service_port import NameServicePort

__all__: list[str] = [
    "ComputePort",
    "AddressReservationPort",
    "NameServicePort",
    "HostStoragePort",
]
