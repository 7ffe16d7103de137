"""Ports for the per-cluster object store and for choosing a cluster."""

from abc import abstractmethod
from collections.abc import Mapping
from typing import Protocol, TypeVar, runtime_checkable

from mighooks.domain.hook.model.plan import PlanResources
from mighooks.domain.hook.model.value import ClusterTarget
from mighooks.domain.shared.model.value import Resource
from mighooks.domain.shared.port import Port

R = TypeVar("R", bound=Resource)


@runtime_checkable
class ClusterClient(Port, Protocol):
    """Declarative object store of a single cluster."""

    @abstractmethod
    async def get(self, kind: type[R], name: str, namespace: str) -> R:
        """
        Read one object by name.

        Raises:
            NotFoundError: If the object does not exist.
            StorageUnavailableError: If the read fails for any other reason.
        """
        ...

    @abstractmethod
    async def list(self, kind: type[R], labels: Mapping[str, str]) -> list[R]:
        """List objects of ``kind`` in all namespaces carrying every given label."""
        ...

    @abstractmethod
    async def create(self, obj: R) -> R:
        """
        Create an object and return it as stored, with its assigned name.

        Raises:
            ConflictError: If the object already exists.
            StorageUnavailableError: If the write fails for any other reason.
        """
        ...


@runtime_checkable
class ClusterResolver(Port, Protocol):
    """Hands out the client for a plan's source or destination cluster."""

    @abstractmethod
    async def resolve(self, target: ClusterTarget, resources: PlanResources) -> ClusterClient:
        """
        Raises:
            ConfigurationError: If the plan names a cluster with no connection.
        """
        ...
