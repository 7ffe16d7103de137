from typing import Iterable

from dishka import provide

from mighooks.config import Config
from mighooks.domain.hook.port.cluster import ClusterClient, ClusterResolver
from mighooks.infrastructure.kubernetes.resolver import KubeconfigClusterResolver
from mighooks.util.di.base import Provider
from mighooks.util.di.scope import Scope


class KubernetesProvider(Provider):
    @provide(scope=Scope.APP)
    def get_resolver(self, config: Config) -> Iterable[KubeconfigClusterResolver]:
        resolver = KubeconfigClusterResolver(config.kubernetes)
        yield resolver
        resolver.close()

    @provide(scope=Scope.APP)
    def get_cluster_resolver(self, resolver: KubeconfigClusterResolver) -> ClusterResolver:
        return resolver

    @provide(scope=Scope.APP)
    def get_control_client(self, resolver: KubeconfigClusterResolver) -> ClusterClient:
        return resolver.control_client()
