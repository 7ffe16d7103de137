"""Hook definition: what to run for a phase, and against which cluster."""

import base64
import binascii

from mighooks.domain.hook.model.plan import MigrationPlan
from mighooks.domain.hook.model.value import (
    CorrelationLabels,
    CustomHook,
    HookVariant,
    PlaybookHook,
)
from mighooks.domain.hook.model.workload import ObjectMeta
from mighooks.domain.shared.error import ConfigurationError
from mighooks.domain.shared.model.value import Resource


def decode_playbook(text: str) -> bytes:
    """Decode base64 playbook text, rejecting characters outside the alphabet.

    Line breaks are skipped so output wrapped by `base64` or `base64.encodebytes` decodes.
    """
    unwrapped = text.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(unwrapped, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"Hook playbook is not valid base64: {e}") from e


class HookSpec(Resource):
    target_cluster: str
    custom: bool = False
    image: str
    playbook: str | None = None
    active_deadline_seconds: int | None = None


class HookDefinition(Resource):
    """A MigHook resource."""

    api_version: str = "migration.openshift.io/v1alpha1"
    kind: str = "MigHook"
    metadata: ObjectMeta
    spec: HookSpec

    def variant(self) -> HookVariant:
        """Choose how this hook runs. Decodes the playbook for playbook hooks."""
        if self.spec.custom:
            return CustomHook(image=self.spec.image)
        return PlaybookHook(
            image=self.spec.image,
            playbook=decode_playbook(self.spec.playbook or ""),
        )

    def correlation_labels(self, plan: MigrationPlan, phase: str) -> CorrelationLabels:
        return CorrelationLabels(
            hook_uid=self.metadata.uid or self.metadata.name or "",
            plan_uid=plan.metadata.uid or plan.metadata.name or "",
            phase=phase,
        )
