"""Value types for hook execution: phases, targets, correlation labels, variants."""

from dataclasses import dataclass
from enum import StrEnum

from mighooks.domain.shared.model.value import ValueObject

PART_OF_LABEL = "app.kubernetes.io/part-of"
APPLICATION = "openshift-migration"
HOOK_LABEL = "mighook"
PLAN_LABEL = "migplan"
PHASE_LABEL = "phase"


class HookPhase(StrEnum):
    PRE_BACKUP = "PreBackup"
    POST_BACKUP = "PostBackup"
    PRE_RESTORE = "PreRestore"
    POST_RESTORE = "PostRestore"

    @property
    def reconcile_phase(self) -> str:
        """Name of the pipeline phase in which this hook runs."""
        return f"{self.value}Hooks"


class ClusterTarget(StrEnum):
    SOURCE = "source"
    DESTINATION = "destination"


class CorrelationLabels(ValueObject):
    """Deterministic labels identifying the objects created for one (plan, phase).

    Built once per invocation. ``as_dict`` returns a new dict on every call so
    config map and job never share a mutable label map.
    """

    hook_uid: str
    plan_uid: str
    phase: str

    def as_dict(self) -> dict[str, str]:
        return {
            PART_OF_LABEL: APPLICATION,
            HOOK_LABEL: self.hook_uid,
            PLAN_LABEL: self.plan_uid,
            PHASE_LABEL: self.phase,
        }

    @property
    def selector(self) -> str:
        """Kubernetes label selector string matching these labels."""
        return ",".join(f"{key}={value}" for key, value in self.as_dict().items())


@dataclass(frozen=True)
class CustomHook:
    """Run the hook image with its own entrypoint."""

    image: str


@dataclass(frozen=True)
class PlaybookHook:
    """Run an Ansible playbook mounted from a config map."""

    image: str
    playbook: bytes


HookVariant = CustomHook | PlaybookHook
