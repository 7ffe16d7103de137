from mighooks.infrastructure.kubernetes.client import KubernetesClusterClient
from mighooks.infrastructure.kubernetes.di import KubernetesProvider
from mighooks.infrastructure.kubernetes.resolver import KubeconfigClusterResolver

__all__ = [
    "KubeconfigClusterResolver",
    "KubernetesClusterClient",
    "KubernetesProvider",
]
