"""
Artifact descriptors: static definitions of the contracts a run deploys.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from .errors import ConfigurationError


@dataclass(frozen=True)
class Literal:
    """A constructor argument passed through as-is"""
    value: Any


@dataclass(frozen=True)
class EnvValue:
    """A constructor argument read from the environment before deployment begins"""
    variable: str
    required: bool = True


@dataclass(frozen=True)
class AddressOf:
    """A constructor argument taking the deployed address of another artifact"""
    artifact: str


ArgSpec = Union[Literal, EnvValue, AddressOf]


@dataclass(frozen=True)
class ArtifactDescriptor:
    """
    One deployable contract.

    Args:
        name: Unique name of the artifact within a run
        constructor_args: Ordered constructor arguments
        contract: Compiled contract name, defaults to ``name``
        label: Human readable description used in logs
    """
    name: str
    constructor_args: Tuple[ArgSpec, ...] = field(default_factory=tuple)
    contract: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError(f"Artifact name must be a non-empty string, got {self.name!r}")
        # Accept lists for convenience but store an immutable tuple
        object.__setattr__(self, 'constructor_args', tuple(self.constructor_args))
        for arg in self.constructor_args:
            if not isinstance(arg, (Literal, EnvValue, AddressOf)):
                raise ConfigurationError(
                    f"Artifact '{self.name}' has an unsupported constructor argument: {arg!r}",
                    artifact=self.name,
                )

    @property
    def contract_name(self) -> str:
        return self.contract or self.name

    @property
    def display_name(self) -> str:
        return self.label or self.name

    @property
    def dependencies(self) -> List[str]:
        """Names of artifacts whose addresses this one needs, in argument order"""
        seen: List[str] = []
        for arg in self.constructor_args:
            if isinstance(arg, AddressOf) and arg.artifact not in seen:
                seen.append(arg.artifact)
        return seen

    @property
    def env_variables(self) -> List[EnvValue]:
        return [arg for arg in self.constructor_args if isinstance(arg, EnvValue)]
