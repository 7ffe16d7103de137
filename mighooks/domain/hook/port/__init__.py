from mighooks.domain.hook.port.cluster import ClusterClient, ClusterResolver
from mighooks.domain.hook.port.lookup import PhaseResourceLookup

__all__ = [
    "ClusterClient",
    "ClusterResolver",
    "PhaseResourceLookup",
]
