"""
Contract Deployment
===================

Deploys the Keeper and Founders contract families in dependency order:

- artifacts: what to deploy and where constructor arguments come from
- resolver: dependency ordering of artifacts
- orchestrator: sequential deployment and address threading
- reporter: address listing, gas summary and deployment files
"""

from .artifacts import AddressOf, ArtifactDescriptor, EnvValue, Literal
from .errors import (
    ChainError,
    ConfigurationError,
    CycleError,
    DeployerError,
    DeploymentError,
    UnknownReferenceError,
)
from .orchestrator import Orchestrator, deploy
from .records import AddressTable, DeploymentRecord, DeploymentStatus
from .reporter import format_report, report
from .resolver import resolve

__version__ = "1.0.0"

__all__ = [
    'AddressOf', 'ArtifactDescriptor', 'EnvValue', 'Literal',
    'ChainError', 'ConfigurationError', 'CycleError', 'DeployerError', 'DeploymentError',
    'UnknownReferenceError',
    'Orchestrator', 'deploy',
    'AddressTable', 'DeploymentRecord', 'DeploymentStatus',
    'format_report', 'report', 'resolve',
]
