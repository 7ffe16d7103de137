"""Port for finding the config map and job already created for a (plan, phase)."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from mighooks.domain.hook.model.value import CorrelationLabels
from mighooks.domain.hook.model.workload import ConfigMap, Job
from mighooks.domain.hook.port.cluster import ClusterClient
from mighooks.domain.shared.port import Port


@runtime_checkable
class PhaseResourceLookup(Port, Protocol):
    @abstractmethod
    async def find_phase_config_map(
        self, client: ClusterClient, labels: CorrelationLabels
    ) -> ConfigMap | None: ...

    @abstractmethod
    async def find_phase_job(self, client: ClusterClient, labels: CorrelationLabels) -> Job | None: ...
