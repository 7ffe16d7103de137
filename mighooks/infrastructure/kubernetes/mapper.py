"""Conversion between domain resources and Kubernetes API bodies."""

import base64
from typing import Any, TypeVar

from mighooks.domain.hook.model.workload import ConfigMap
from mighooks.domain.shared.model.value import Resource

R = TypeVar("R", bound=Resource)


def to_manifest(obj: Resource) -> dict[str, Any]:
    """Render a resource as a camelCase request body. Status is never sent."""
    data = obj.model_dump(by_alias=True, exclude_none=True)
    data.pop("status", None)
    if isinstance(obj, ConfigMap):
        data["binaryData"] = {
            key: base64.b64encode(value).decode("ascii") for key, value in obj.binary_data.items()
        }
    return data


def from_manifest(kind: type[R], body: dict[str, Any]) -> R:
    """Parse a serialized API object. Fields the domain does not model are dropped."""
    if kind is ConfigMap and body.get("binaryData"):
        body = {
            **body,
            "binaryData": {key: base64.b64decode(value) for key, value in body["binaryData"].items()},
        }
    return kind.model_validate(body)
