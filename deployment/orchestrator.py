"""
Deployment orchestrator.

Walks a resolved deployment order, submits each artifact through the backend,
waits for confirmation and threads confirmed addresses into the constructor
arguments of later artifacts. Artifacts are deployed strictly one at a time.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .artifacts import AddressOf, ArtifactDescriptor, EnvValue, Literal
from .backend import DeploymentBackend
from .config import require
from .errors import ChainError, DeploymentError
from .records import AddressTable, DeploymentRecord
from .resolver import resolve

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Runs one deployment.

    Args:
        env: Flat mapping of environment variable names to values
        known_addresses: Addresses of artifacts already deployed by an earlier
            run; those artifacts are not submitted again
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None,
                 known_addresses: Optional[Mapping[str, str]] = None):
        self.env = dict(env or {})
        self.known_addresses = dict(known_addresses or {})
        self.table = AddressTable()
        self._records: List[DeploymentRecord] = []

    @property
    def records(self) -> Tuple[DeploymentRecord, ...]:
        return tuple(self._records)

    def read_environment(self, order: Sequence[ArtifactDescriptor]) -> Dict[str, Optional[str]]:
        """
        Read every environment-sourced argument once, before anything is deployed.

        Raises:
            ConfigurationError: A required variable is missing
        """
        values: Dict[str, Optional[str]] = {}
        for descriptor in order:
            for arg in descriptor.env_variables:
                if arg.required:
                    values[arg.variable] = require(self.env, arg.variable, artifact=descriptor.name)
                elif arg.variable not in values:
                    values[arg.variable] = self.env.get(arg.variable) or None
        return values

    def resolve_args(self, descriptor: ArtifactDescriptor, env_values: Mapping[str, Optional[str]]) -> List[Any]:
        args: List[Any] = []
        for arg in descriptor.constructor_args:
            if isinstance(arg, Literal):
                args.append(arg.value)
            elif isinstance(arg, EnvValue):
                args.append(env_values[arg.variable])
            elif isinstance(arg, AddressOf):
                if arg.artifact not in self.table:
                    # The resolver orders dependencies first, so this is a bug, not bad input
                    raise RuntimeError(
                        f"Address of '{arg.artifact}' needed by '{descriptor.name}' has not been recorded"
                    )
                args.append(self.table[arg.artifact])
        return args

    def run(self, order: Sequence[ArtifactDescriptor], backend: DeploymentBackend,
            env_values: Optional[Mapping[str, Optional[str]]] = None) -> AddressTable:
        """
        Deploy descriptors in the given order.

        Args:
            order: Descriptors, dependencies first
            backend: Deployment backend
            env_values: Values already returned by read_environment for this order

        Returns:
            Address table of every confirmed artifact

        Raises:
            ConfigurationError: An environment value or compiled artifact is missing (nothing is submitted)
            DeploymentError: An artifact failed; later artifacts were not attempted
        """
        if env_values is None:
            env_values = self.read_environment(order)
        backend.prepare([d.contract_name for d in order if d.name not in self.known_addresses])
        logger.info(f"Deploying {len(order)} artifact(s): {', '.join(d.name for d in order)}")

        for descriptor in order:
            args = self.resolve_args(descriptor, env_values)

            if descriptor.name in self.known_addresses:
                self._reuse(descriptor, args)
                continue

            record = DeploymentRecord(name=descriptor.name, constructor_args=args)
            logger.info(f"Deploying {descriptor.display_name} with arguments {args}")

            self._records.append(record)
            try:
                handle = backend.submit(descriptor.contract_name, args)
                record.tx_hash = backend.describe_handle(handle)
                address = backend.confirm(handle)
            except Exception as e:
                cause = e if isinstance(e, ChainError) else ChainError(str(e), artifact=descriptor.name)
                record.fail(cause)
                logger.error(f"Deployment of {descriptor.name} failed: {cause}")
                raise DeploymentError(descriptor.name, cause, self.table, self._records) from e

            record.confirm(address, gas_used=backend.last_gas_used)
            self.table.add(descriptor.name, address)
            logger.info(f"{descriptor.display_name} deployed at {address}")

        return self.table

    def _reuse(self, descriptor: ArtifactDescriptor, args: List[Any]):
        address = self.known_addresses[descriptor.name]
        record = DeploymentRecord(name=descriptor.name, constructor_args=args, reused=True)
        record.confirm(address)
        self._records.append(record)
        self.table.add(descriptor.name, address)
        logger.info(f"Reusing {descriptor.display_name} already deployed at {address}")


def deploy(descriptors: Sequence[ArtifactDescriptor], backend: DeploymentBackend,
           env: Optional[Mapping[str, str]] = None,
           known_addresses: Optional[Mapping[str, str]] = None) -> AddressTable:
    """Resolve and deploy a set of descriptors in one call."""
    orchestrator = Orchestrator(env, known_addresses)
    return orchestrator.run(resolve(descriptors), backend)
