"""
Deployment error taxonomy.

Static errors (configuration, cycles, unknown references) are raised before
any transaction is sent. Chain errors happen mid-run and stop the remaining
deployments.
"""

from typing import Dict, List, Optional


class DeployerError(Exception):
    """Base class for every error raised by the deployment sequencer"""


class ConfigurationError(DeployerError):
    """A required environment or literal value is missing or malformed"""

    def __init__(self, message: str, variable: Optional[str] = None, artifact: Optional[str] = None):
        super().__init__(message)
        self.variable = variable
        self.artifact = artifact


class CycleError(DeployerError):
    """The address references between artifacts form a cycle"""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        path = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Dependency cycle between artifacts: {path}")


class UnknownReferenceError(DeployerError):
    """An artifact references the address of an artifact that is not part of the run"""

    def __init__(self, artifact: str, reference: str):
        self.artifact = artifact
        self.reference = reference
        super().__init__(f"Artifact '{artifact}' references unknown artifact '{reference}'")


class ChainError(DeployerError):
    """The backend reported a failed submission or confirmation"""

    def __init__(self, message: str, artifact: Optional[str] = None):
        super().__init__(message)
        self.artifact = artifact


class DeploymentError(DeployerError):
    """
    A run stopped because one artifact failed to deploy.

    Carries the addresses confirmed before the failure so they can still be
    reported and saved.
    """

    def __init__(self, artifact: str, cause: Exception, table=None, records=()):
        self.artifact = artifact
        self.cause = cause
        self.table = table
        self.records = tuple(records)
        super().__init__(f"Deployment of '{artifact}' failed: {cause}")

    @property
    def confirmed(self) -> Dict[str, str]:
        return dict(self.table.items()) if self.table is not None else {}
