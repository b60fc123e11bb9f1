"""
Deployment records and the address table built during a run.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple


class DeploymentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class DeploymentRecord:
    """Outcome of a single artifact deployment"""
    name: str
    constructor_args: List[Any] = field(default_factory=list)
    status: DeploymentStatus = DeploymentStatus.PENDING
    address: Optional[str] = None
    error: Optional[Exception] = None
    tx_hash: Optional[str] = None
    gas_used: Optional[int] = None
    reused: bool = False

    def _settle(self):
        if self.status is not DeploymentStatus.PENDING:
            raise RuntimeError(f"Deployment record for '{self.name}' is already {self.status.value}")

    def confirm(self, address: str, gas_used: Optional[int] = None):
        self._settle()
        self.status = DeploymentStatus.CONFIRMED
        self.address = address
        self.gas_used = gas_used

    def fail(self, error: Exception):
        self._settle()
        self.status = DeploymentStatus.FAILED
        self.error = error

    @property
    def is_confirmed(self) -> bool:
        return self.status is DeploymentStatus.CONFIRMED


class AddressTable:
    """Append-only mapping of artifact name to deployed address, in deployment order"""

    def __init__(self):
        self._addresses: "OrderedDict[str, str]" = OrderedDict()

    def add(self, name: str, address: str):
        if name in self._addresses:
            raise ValueError(f"Address for '{name}' is already recorded")
        self._addresses[name] = address

    def get(self, name: str) -> Optional[str]:
        return self._addresses.get(name)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._addresses.items())

    def as_dict(self):
        return dict(self._addresses)

    def __getitem__(self, name: str) -> str:
        return self._addresses[name]

    def __contains__(self, name: object) -> bool:
        return name in self._addresses

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self):
        return f"AddressTable({dict(self._addresses)!r})"
