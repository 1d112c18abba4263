"""Hyper-V Provisioner - Root Package.

This package provisions and decommissions Hyper-V virtual machines together
with the network resources that make them reachable: a DHCP reservation with
an allow-list filter entry and a pair of DNS forward/reverse records.

Key Components:
    - api: REST surface for provisioning requests
    - application: the provisioning orchestrator (create and destroy workflows)
    - domain: machine model, collaborator ports and error taxonomy
    - infrastructure: remote PowerShell execution, retry and logging
    - providers: Hyper-V, Windows DHCP and Windows DNS adapters

Architecture:
    The orchestrator only talks to the ports declared in ``domain.base.ports``;
    concrete adapters are wired in by ``bootstrap`` from configuration, which
    keeps the workflows testable against in-memory doubles.
"""

from ._package import PACKAGE_NAME, __version__

__package_name__ = PACKAGE_NAME

"""
Usage:
    >>> hvprov provision web01 --host hv1 --scope 10.0.0.0
    >>> hvprov decommission web01 --host hv1
"""
