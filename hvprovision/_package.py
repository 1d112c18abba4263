"""Package metadata and naming constants."""

from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "hyperv-provisioner"
PACKAGE_NAME_SHORT = "hvprov"
PACKAGE_NAME_PYTHON = "hvprovision"
DESCRIPTION = "Hyper-V machine provisioning with DHCP and DNS registration"

try:
    __version__ = version(PACKAGE_NAME)
except PackageNotFoundError:
    __version__ = "0.0.0+local"
VERSION = __version__  # Alias for compatibility

# Prefix for environment variable configuration overrides
ENV_PREFIX = "HVPROV_"
