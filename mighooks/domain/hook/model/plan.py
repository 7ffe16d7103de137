"""Migration plan and the hook bindings it carries."""

from dataclasses import dataclass

from pydantic import Field

from mighooks.domain.hook.model.workload import ObjectMeta, ObjectReference
from mighooks.domain.shared.model.value import Resource


class PlanHook(Resource):
    """Binds a hook definition to one phase of a plan."""

    phase: str
    execution_namespace: str
    service_account: str
    reference: ObjectReference | None = None


class PlanSpec(Resource):
    hooks: list[PlanHook] = Field(default_factory=list)
    src_mig_cluster_ref: ObjectReference | None = None
    dest_mig_cluster_ref: ObjectReference | None = None


class MigrationPlan(Resource):
    """A MigPlan resource, reduced to the fields hook execution consumes."""

    api_version: str = "migration.openshift.io/v1alpha1"
    kind: str = "MigPlan"
    metadata: ObjectMeta
    spec: PlanSpec = Field(default_factory=PlanSpec)

    @property
    def name(self) -> str:
        return self.metadata.name or ""

    def hook_for_phase(self, phase: str) -> PlanHook | None:
        """Binding whose phase runs in the given pipeline phase; the last one wins."""
        selected = None
        for hook in self.spec.hooks:
            if f"{hook.phase}Hooks" == phase:
                selected = hook
        return selected


@dataclass(frozen=True)
class PlanResources:
    """A plan together with the names of the clusters it migrates between."""

    plan: MigrationPlan
    source_cluster: str
    destination_cluster: str

    @classmethod
    def from_plan(cls, plan: MigrationPlan) -> "PlanResources":
        src = plan.spec.src_mig_cluster_ref
        dest = plan.spec.dest_mig_cluster_ref
        return cls(
            plan=plan,
            source_cluster=src.name if src else "",
            destination_cluster=dest.name if dest else "",
        )
