"""
Dependency resolution for artifact descriptors.

Orders descriptors so that every artifact is deployed after the artifacts
whose addresses it takes as constructor arguments.
"""

import heapq
import logging
from typing import Dict, Iterable, List

from .artifacts import ArtifactDescriptor
from .errors import ConfigurationError, CycleError, UnknownReferenceError

logger = logging.getLogger(__name__)


def _index_descriptors(descriptors: List[ArtifactDescriptor]) -> Dict[str, int]:
    positions: Dict[str, int] = {}
    for position, descriptor in enumerate(descriptors):
        if descriptor.name in positions:
            raise ConfigurationError(
                f"Artifact name '{descriptor.name}' is used more than once",
                artifact=descriptor.name,
            )
        positions[descriptor.name] = position
    return positions


def _find_cycle(remaining: List[ArtifactDescriptor], by_name: Dict[str, ArtifactDescriptor]) -> List[str]:
    """Walks unresolved dependencies from the first remaining artifact until a name repeats."""
    pending = {descriptor.name for descriptor in remaining}
    path: List[str] = []
    current = remaining[0].name
    while current not in path:
        path.append(current)
        # Every unresolved artifact has at least one unresolved dependency
        current = next(dep for dep in by_name[current].dependencies if dep in pending)
    return path[path.index(current):]


def resolve(descriptors: Iterable[ArtifactDescriptor]) -> List[ArtifactDescriptor]:
    """
    Order descriptors for deployment (Kahn's algorithm).

    Artifacts with no ordering constraint between them keep their input order,
    so the same input always yields the same sequence.

    Args:
        descriptors: Artifact descriptors of one run

    Returns:
        Descriptors with dependencies before dependents

    Raises:
        ConfigurationError: Two descriptors share a name
        UnknownReferenceError: An address reference names an artifact not in the run
        CycleError: The address references form a cycle
    """
    descriptors = list(descriptors)
    positions = _index_descriptors(descriptors)
    by_name = {descriptor.name: descriptor for descriptor in descriptors}

    dependents: Dict[str, List[str]] = {name: [] for name in positions}
    unresolved: Dict[str, int] = {}
    for descriptor in descriptors:
        for dep in descriptor.dependencies:
            if dep not in positions:
                raise UnknownReferenceError(descriptor.name, dep)
            dependents[dep].append(descriptor.name)
        unresolved[descriptor.name] = len(descriptor.dependencies)

    ready = [positions[name] for name, count in unresolved.items() if count == 0]
    heapq.heapify(ready)

    order: List[ArtifactDescriptor] = []
    while ready:
        descriptor = descriptors[heapq.heappop(ready)]
        order.append(descriptor)
        for dependent in dependents[descriptor.name]:
            unresolved[dependent] -= 1
            if unresolved[dependent] == 0:
                heapq.heappush(ready, positions[dependent])

    if len(order) != len(descriptors):
        placed = {descriptor.name for descriptor in order}
        remaining = [descriptor for descriptor in descriptors if descriptor.name not in placed]
        raise CycleError(_find_cycle(remaining, by_name))

    logger.debug(f"Resolved deployment order: {[descriptor.name for descriptor in order]}")
    return order
