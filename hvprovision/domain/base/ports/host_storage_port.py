"""Domain port for host-side machine storage."""

from abc import ABC, abstractmethod


class HostStoragePort(ABC):
    """Directory management on the virtualization host."""

    @abstractmethod
    def create_directory(self, host: str, path: str) -> None:
        """Create ``path`` (and parents); succeeds if it already exists."""

    @abstractmethod
    def remove_directory_recursive(self, host: str, path: str) -> None:
        """Remove ``path`` and everything below it."""
