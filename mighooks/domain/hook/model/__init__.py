from mighooks.domain.hook.model.hook import HookDefinition, HookSpec, decode_playbook
from mighooks.domain.hook.model.plan import MigrationPlan, PlanHook, PlanResources, PlanSpec
from mighooks.domain.hook.model.value import (
    ClusterTarget,
    CorrelationLabels,
    CustomHook,
    HookPhase,
    HookVariant,
    PlaybookHook,
)
from mighooks.domain.hook.model.workload import ConfigMap, Job, JobStatus, ObjectMeta, ObjectReference

__all__ = [
    "ClusterTarget",
    "ConfigMap",
    "CorrelationLabels",
    "CustomHook",
    "HookDefinition",
    "HookPhase",
    "HookSpec",
    "HookVariant",
    "Job",
    "JobStatus",
    "MigrationPlan",
    "ObjectMeta",
    "ObjectReference",
    "PlanHook",
    "PlanResources",
    "PlanSpec",
    "PlaybookHook",
    "decode_playbook",
]
