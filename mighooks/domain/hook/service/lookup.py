import logging
from typing import TypeVar

from mighooks.domain.hook.model.value import CorrelationLabels
from mighooks.domain.hook.model.workload import ConfigMap, Job
from mighooks.domain.hook.port.cluster import ClusterClient
from mighooks.domain.hook.port.lookup import PhaseResourceLookup
from mighooks.domain.shared.model.value import Resource

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


class LabelPhaseLookup(PhaseResourceLookup):
    """Finds phase objects by listing with the correlation label selector."""

    async def find_phase_config_map(
        self, client: ClusterClient, labels: CorrelationLabels
    ) -> ConfigMap | None:
        return await self._first(client, ConfigMap, labels)

    async def find_phase_job(self, client: ClusterClient, labels: CorrelationLabels) -> Job | None:
        return await self._first(client, Job, labels)

    async def _first(
        self, client: ClusterClient, kind: type[R], labels: CorrelationLabels
    ) -> R | None:
        items = await client.list(kind, labels.as_dict())
        if not items:
            return None
        if len(items) > 1:
            logger.warning(
                "Found %d %s objects for phase %s, using the first",
                len(items),
                kind.__name__,
                labels.phase,
            )
        return items[0]
