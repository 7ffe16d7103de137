"""Pure builders for hook jobs and playbook config maps. No store I/O."""

from typing import assert_never

from mighooks.config import HookConfig
from mighooks.domain.hook.model.hook import HookDefinition
from mighooks.domain.hook.model.plan import PlanHook
from mighooks.domain.hook.model.value import (
    CorrelationLabels,
    CustomHook,
    HookVariant,
    PlaybookHook,
)
from mighooks.domain.hook.model.workload import (
    ConfigMap,
    ConfigMapVolumeSource,
    Container,
    Job,
    JobSpec,
    ObjectMeta,
    PodSpec,
    PodTemplateSpec,
    Volume,
    VolumeMount,
)
from mighooks.domain.shared.error import TemplateError

PLAYBOOK_KEY = "playbook.yml"
PLAYBOOK_VOLUME = "playbook"


def _object_meta(
    binding: PlanHook, plan_name: str, phase: str, labels: CorrelationLabels
) -> ObjectMeta:
    return ObjectMeta(
        namespace=binding.execution_namespace,
        generate_name=f"{plan_name}-{phase}-".lower(),
        labels=labels.as_dict(),
    )


def base_job_template(
    binding: PlanHook,
    hook: HookDefinition,
    plan_name: str,
    phase: str,
    labels: CorrelationLabels,
    settings: HookConfig,
) -> Job:
    """Job running the hook image as-is."""
    deadline = hook.spec.active_deadline_seconds or settings.default_active_deadline_seconds
    return Job(
        metadata=_object_meta(binding, plan_name, phase, labels),
        spec=JobSpec(
            template=PodTemplateSpec(
                spec=PodSpec(
                    containers=[
                        Container(name=f"{plan_name}-{phase}".lower(), image=hook.spec.image),
                    ],
                    restart_policy="OnFailure",
                    service_account_name=binding.service_account,
                    active_deadline_seconds=deadline,
                )
            )
        ),
    )


def playbook_job_template(
    binding: PlanHook,
    hook: HookDefinition,
    plan_name: str,
    phase: str,
    labels: CorrelationLabels,
    settings: HookConfig,
    config_map_name: str,
) -> Job:
    """Base job that runs ansible-runner against the playbook config map."""
    job = base_job_template(binding, hook, plan_name, phase, labels, settings)
    pod = job.spec.template.spec
    container = pod.containers[0].model_copy(
        update={
            "command": settings.runner_command,
            "volume_mounts": [
                VolumeMount(name=PLAYBOOK_VOLUME, mount_path=settings.playbook_mount_path)
            ],
        }
    )
    pod = pod.model_copy(
        update={
            "containers": [container],
            "volumes": [
                Volume(
                    name=PLAYBOOK_VOLUME,
                    config_map=ConfigMapVolumeSource(name=config_map_name),
                )
            ],
        }
    )
    return job.model_copy(update={"spec": JobSpec(template=PodTemplateSpec(spec=pod))})


def config_map_template(
    binding: PlanHook,
    plan_name: str,
    phase: str,
    labels: CorrelationLabels,
    variant: PlaybookHook,
) -> ConfigMap:
    """Config map carrying the decoded playbook under ``playbook.yml``."""
    return ConfigMap(
        metadata=_object_meta(binding, plan_name, phase, labels),
        binary_data={PLAYBOOK_KEY: variant.playbook},
    )


def job_template(
    variant: HookVariant,
    binding: PlanHook,
    hook: HookDefinition,
    plan_name: str,
    phase: str,
    labels: CorrelationLabels,
    settings: HookConfig,
    config_map_name: str | None = None,
) -> Job:
    match variant:
        case CustomHook():
            return base_job_template(binding, hook, plan_name, phase, labels, settings)
        case PlaybookHook():
            if config_map_name is None:
                raise TemplateError("Playbook hook job needs the name of its config map")
            return playbook_job_template(
                binding, hook, plan_name, phase, labels, settings, config_map_name
            )
        case _:
            assert_never(variant)
