"""Execution-platform objects the hook engine creates: jobs and config maps."""

from pydantic import Field

from mighooks.domain.shared.model.value import Resource


class ObjectMeta(Resource):
    name: str | None = None
    generate_name: str | None = None
    namespace: str | None = None
    uid: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)


class ObjectReference(Resource):
    name: str
    namespace: str | None = None


class VolumeMount(Resource):
    name: str
    mount_path: str


class ConfigMapVolumeSource(Resource):
    name: str


class Volume(Resource):
    name: str
    config_map: ConfigMapVolumeSource | None = None


class Container(Resource):
    name: str
    image: str
    command: list[str] | None = None
    volume_mounts: list[VolumeMount] = Field(default_factory=list)


class PodSpec(Resource):
    containers: list[Container]
    restart_policy: str = "OnFailure"
    service_account_name: str | None = None
    active_deadline_seconds: int | None = None
    volumes: list[Volume] = Field(default_factory=list)


class PodTemplateSpec(Resource):
    spec: PodSpec


class JobSpec(Resource):
    template: PodTemplateSpec


class JobStatus(Resource):
    """Observed job counters. Counters the API omits read as zero."""

    active: int = 0
    failed: int = 0
    succeeded: int = 0


class Job(Resource):
    api_version: str = "batch/v1"
    kind: str = "Job"
    metadata: ObjectMeta
    spec: JobSpec
    status: JobStatus = Field(default_factory=JobStatus)


class ConfigMap(Resource):
    api_version: str = "v1"
    kind: str = "ConfigMap"
    metadata: ObjectMeta
    binary_data: dict[str, bytes] = Field(default_factory=dict)
