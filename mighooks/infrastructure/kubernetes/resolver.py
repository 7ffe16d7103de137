"""Resolves plan clusters to Kubernetes connections configured for the operator."""

from collections.abc import Callable

import logfire
from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.config.config_exception import ConfigException

from mighooks.config import ClusterConfig, KubernetesConfig
from mighooks.domain.hook.model.plan import PlanResources
from mighooks.domain.hook.model.value import ClusterTarget
from mighooks.domain.hook.port.cluster import ClusterResolver
from mighooks.domain.shared.error import ConfigurationError
from mighooks.infrastructure.kubernetes.client import KubernetesClusterClient


def new_api_client(cluster: ClusterConfig) -> client.ApiClient:
    """Build an API client from the pod service account or a kubeconfig context."""
    if cluster.in_cluster:
        configuration = client.Configuration()
        k8s_config.load_incluster_config(client_configuration=configuration)
        return client.ApiClient(configuration=configuration)
    return k8s_config.new_client_from_config(
        config_file=cluster.config_file, context=cluster.context
    )


class KubeconfigClusterResolver(ClusterResolver):
    """Keeps one client per configured cluster, created on first use."""

    def __init__(
        self,
        config: KubernetesConfig,
        api_client_factory: Callable[[ClusterConfig], client.ApiClient] = new_api_client,
    ):
        self._clusters = {cluster.name: cluster for cluster in config.clusters}
        self._host_cluster = config.host_cluster
        self._api_client_factory = api_client_factory
        self._clients: dict[str, KubernetesClusterClient] = {}

    async def resolve(self, target: ClusterTarget, resources: PlanResources) -> KubernetesClusterClient:
        if target is ClusterTarget.SOURCE:
            return self.client_for(resources.source_cluster)
        return self.client_for(resources.destination_cluster)

    def control_client(self) -> KubernetesClusterClient:
        """Client of the cluster holding plans and hook definitions."""
        return self.client_for(self._host_cluster)

    def client_for(self, name: str) -> KubernetesClusterClient:
        if name in self._clients:
            return self._clients[name]

        cluster = self._clusters.get(name)
        if cluster is None:
            raise ConfigurationError(f"No connection configured for cluster {name!r}")

        logfire.info("Connecting to cluster", cluster=name, context=cluster.context)
        try:
            api_client = self._api_client_factory(cluster)
        except ConfigException as e:
            raise ConfigurationError(f"Cannot load credentials for cluster {name!r}: {e}") from e

        cluster_client = KubernetesClusterClient(api_client, name=name)
        self._clients[name] = cluster_client
        return cluster_client

    def close(self) -> None:
        for cluster_client in self._clients.values():
            cluster_client.close()
        self._clients.clear()
