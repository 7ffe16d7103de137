"""Object store adapter backed by the Kubernetes API."""

import asyncio
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any, TypeVar

import logfire
import urllib3
from kubernetes import client
from kubernetes.client.rest import ApiException

from mighooks.domain.hook.model.hook import HookDefinition
from mighooks.domain.hook.model.workload import ConfigMap, Job
from mighooks.domain.hook.port.cluster import ClusterClient
from mighooks.domain.shared.error import ConflictError, NotFoundError, StorageUnavailableError
from mighooks.domain.shared.model.value import Resource
from mighooks.infrastructure.kubernetes.mapper import from_manifest, to_manifest

HOOK_GROUP = "migration.openshift.io"
HOOK_VERSION = "v1alpha1"
HOOK_PLURAL = "mighooks"

R = TypeVar("R", bound=Resource)


class KubernetesClusterClient(ClusterClient):
    """ClusterClient for one cluster, using the official kubernetes client.

    Reads MigHook definitions, and lists and creates hook Jobs and ConfigMaps.
    The client is synchronous; every call runs in a worker thread.
    """

    def __init__(self, api_client: client.ApiClient, name: str = ""):
        self.name = name
        self._api_client = api_client
        self._core = client.CoreV1Api(api_client)
        self._batch = client.BatchV1Api(api_client)
        self._custom = client.CustomObjectsApi(api_client)

    async def get(self, kind: type[R], name: str, namespace: str) -> R:
        if kind is not HookDefinition:
            raise TypeError(f"Unsupported resource kind: {kind.__name__}")
        call = partial(
            self._custom.get_namespaced_custom_object,
            HOOK_GROUP,
            HOOK_VERSION,
            namespace,
            HOOK_PLURAL,
            name,
        )

        body = await self._call(call, f"get {kind.__name__} {namespace}/{name}")
        return from_manifest(kind, self._serialize(body))

    async def create(self, obj: R) -> R:
        namespace = obj.metadata.namespace  # type: ignore[attr-defined]
        body = to_manifest(obj)
        match obj:
            case Job():
                call = partial(self._batch.create_namespaced_job, namespace, body)
            case ConfigMap():
                call = partial(self._core.create_namespaced_config_map, namespace, body)
            case _:
                raise TypeError(f"Unsupported resource kind: {type(obj).__name__}")

        created = await self._call(call, f"create {type(obj).__name__} in {namespace}")
        return from_manifest(type(obj), self._serialize(created))

    async def list(self, kind: type[R], labels: Mapping[str, str]) -> list[R]:
        selector = ",".join(f"{key}={value}" for key, value in labels.items())
        if kind is Job:
            call = partial(self._batch.list_job_for_all_namespaces, label_selector=selector)
        elif kind is ConfigMap:
            call = partial(self._core.list_config_map_for_all_namespaces, label_selector=selector)
        else:
            raise TypeError(f"Unsupported resource kind: {kind.__name__}")

        body = self._serialize(await self._call(call, f"list {kind.__name__} {selector}"))
        return [from_manifest(kind, item) for item in body.get("items") or []]

    def close(self) -> None:
        self._api_client.close()

    def _serialize(self, obj: Any) -> dict[str, Any]:
        return self._api_client.sanitize_for_serialization(obj)

    async def _call(self, call: Callable[[], Any], operation: str) -> Any:
        try:
            return await asyncio.to_thread(call)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"{operation}: not found") from e
            if e.status == 409:
                raise ConflictError(f"{operation}: already exists") from e
            logfire.error(
                "Kubernetes API error",
                cluster=self.name,
                operation=operation,
                status=e.status,
                reason=e.reason,
            )
            raise StorageUnavailableError(f"{operation} failed: {e.status} {e.reason}") from e
        except urllib3.exceptions.HTTPError as e:
            logfire.error("Kubernetes API unreachable", cluster=self.name, error=str(e))
            raise StorageUnavailableError(f"{operation} failed: {e}") from e
