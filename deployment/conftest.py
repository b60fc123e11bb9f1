from typing import Any, List, Optional, Sequence, Set, Tuple

import pytest

from deployment.backend import DeploymentBackend
from deployment.errors import ChainError


class FakeBackend(DeploymentBackend):
    """In-memory backend handing out sequential addresses"""

    def __init__(self, fail_on_submit: Optional[Set[str]] = None, fail_on_confirm: Optional[Set[str]] = None):
        self.fail_on_submit = fail_on_submit or set()
        self.fail_on_confirm = fail_on_confirm or set()
        self.submitted: List[Tuple[str, List[Any]]] = []
        self.confirmed: List[str] = []
        self.last_gas_used = None

    def submit(self, artifact_name: str, constructor_args: Sequence[Any]) -> Any:
        if artifact_name in self.fail_on_submit:
            raise ChainError(f"insufficient funds for {artifact_name}", artifact=artifact_name)
        self.submitted.append((artifact_name, list(constructor_args)))
        return len(self.submitted)

    def confirm(self, handle: Any) -> str:
        artifact_name = self.submitted[handle - 1][0]
        if artifact_name in self.fail_on_confirm:
            raise ChainError(f"execution reverted: {artifact_name}", artifact=artifact_name)
        self.confirmed.append(artifact_name)
        self.last_gas_used = 100000 * handle
        return "0x" + f"{handle:040x}"

    @property
    def submitted_names(self) -> List[str]:
        return [name for name, _ in self.submitted]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_backend():
    return FakeBackend
