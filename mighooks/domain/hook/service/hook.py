"""Hook service: runs the hook bound to a migration phase, one reconcile tick at a time."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import logfire

from mighooks.config import HookConfig
from mighooks.domain.hook.model.hook import HookDefinition
from mighooks.domain.hook.model.plan import PlanHook, PlanResources
from mighooks.domain.hook.model.value import (
    ClusterTarget,
    CorrelationLabels,
    CustomHook,
    PlaybookHook,
)
from mighooks.domain.hook.model.workload import ConfigMap, Job, ObjectReference
from mighooks.domain.hook.port.cluster import ClusterClient, ClusterResolver
from mighooks.domain.hook.port.lookup import PhaseResourceLookup
from mighooks.domain.hook.service.template import config_map_template, job_template
from mighooks.domain.shared.error import (
    ConfigurationError,
    ConflictError,
    HookJobFailedError,
    MigHooksError,
    ResourceCreateError,
    ResourceLookupError,
)
from mighooks.domain.shared.service import Service

logger = logging.getLogger(__name__)

R = TypeVar("R", ConfigMap, Job)


class HookService(Service):
    """Submits, then polls, the hook job of a (plan, phase).

    ``run_phase_hooks`` never waits: it is called on every reconcile until it
    returns True or raises.
    """

    control_client: ClusterClient
    clusters: ClusterResolver
    lookup: PhaseResourceLookup
    settings: HookConfig

    async def run_phase_hooks(self, phase: str, resources: PlanResources) -> bool:
        """Advance the hook bound to ``phase`` by one step.

        Args:
            phase: Pipeline phase name, e.g. ``PreBackupHooks``.
            resources: The plan being migrated and its clusters.

        Returns:
            True when no hook is bound or the hook job succeeded; False while
            the job is being submitted or still running.

        Raises:
            ConfigurationError: Unknown target cluster or malformed playbook.
            ResourceLookupError: Reading the hook, config map or job failed.
            ResourceCreateError: Creating the config map or job failed.
            HookJobFailedError: The job reached the failed-attempt threshold.
        """
        plan = resources.plan
        binding = plan.hook_for_phase(phase)
        if binding is None or binding.reference is None:
            return True

        with logfire.span("RunPhaseHooks", plan=plan.name, phase=phase):
            hook = await self._get_hook(binding.reference, phase)
            client = await self._target_client(hook, resources)
            variant = hook.variant()
            labels = hook.correlation_labels(plan, phase)

            match variant:
                case CustomHook():
                    job = job_template(
                        variant, binding, hook, plan.name, phase, labels, self.settings
                    )
                case PlaybookHook():
                    config_map = await self._ensure_config_map(
                        client, binding, plan.name, phase, labels, variant
                    )
                    if config_map is None:
                        return False
                    job = job_template(
                        variant,
                        binding,
                        hook,
                        plan.name,
                        phase,
                        labels,
                        self.settings,
                        config_map_name=config_map.metadata.name,
                    )

            return await self._poll_job(client, job, labels)

    async def _get_hook(self, ref: ObjectReference, phase: str) -> HookDefinition:
        resource = f"MigHook {ref.namespace}/{ref.name}"
        try:
            return await self.control_client.get(HookDefinition, ref.name, ref.namespace or "")
        except MigHooksError as e:
            logger.error("Failed to read %s for phase %s: %s", resource, phase, e)
            raise ResourceLookupError(
                f"Failed to read {resource} for phase {phase}: {e}",
                phase=phase,
                resource=resource,
            ) from e

    async def _target_client(
        self, hook: HookDefinition, resources: PlanResources
    ) -> ClusterClient:
        match hook.spec.target_cluster:
            case ClusterTarget.DESTINATION:
                return await self.clusters.resolve(ClusterTarget.DESTINATION, resources)
            case ClusterTarget.SOURCE:
                return await self.clusters.resolve(ClusterTarget.SOURCE, resources)
            case other:
                logger.error("Hook %s has invalid targetCluster %r", hook.metadata.name, other)
                raise ConfigurationError(
                    f"targetCluster must be 'source' or 'destination'. {other} unknown"
                )

    async def _ensure_config_map(
        self,
        client: ClusterClient,
        binding: PlanHook,
        plan_name: str,
        phase: str,
        labels: CorrelationLabels,
        variant: PlaybookHook,
    ) -> ConfigMap | None:
        """Return the phase config map, creating it on first use.

        None means another writer created it and the store does not show it yet.
        """
        config_map = config_map_template(binding, plan_name, phase, labels, variant)
        existing = await self._find(self.lookup.find_phase_config_map, client, labels, "ConfigMap")
        if existing is not None:
            return existing

        try:
            created = await client.create(config_map)
        except ConflictError:
            logger.info("Playbook config map for phase %s already exists, re-reading", phase)
            return await self._find(self.lookup.find_phase_config_map, client, labels, "ConfigMap")
        except MigHooksError as e:
            raise self._create_error("ConfigMap", phase, binding.execution_namespace, e) from e

        logger.info(
            "Created playbook config map %s/%s for phase %s",
            created.metadata.namespace,
            created.metadata.name,
            phase,
        )
        return created

    async def _poll_job(self, client: ClusterClient, job: Job, labels: CorrelationLabels) -> bool:
        phase = labels.phase
        running = await self._find(self.lookup.find_phase_job, client, labels, "Job")

        if running is None:
            try:
                created = await client.create(job)
            except ConflictError:
                logger.info("Hook job for phase %s already exists", phase)
                return False
            except MigHooksError as e:
                raise self._create_error("Job", phase, job.metadata.namespace or "", e) from e
            logger.info(
                "Created hook job %s/%s for phase %s",
                created.metadata.namespace,
                created.metadata.name,
                phase,
            )
            return False

        name = running.metadata.name or ""
        status = running.status
        if status.failed >= self.settings.failure_threshold:
            logger.error("Hook job %s failed %d times in phase %s", name, status.failed, phase)
            raise HookJobFailedError(name, status.failed, phase)
        if status.succeeded == 1:
            logger.info("Hook job %s succeeded in phase %s", name, phase)
            return True
        return False

    async def _find(
        self,
        finder: Callable[[ClusterClient, CorrelationLabels], Awaitable[R | None]],
        client: ClusterClient,
        labels: CorrelationLabels,
        kind: str,
    ) -> R | None:
        try:
            return await finder(client, labels)
        except MigHooksError as e:
            resource = f"{kind} {labels.selector}"
            logger.error("Failed to look up %s for phase %s: %s", resource, labels.phase, e)
            raise ResourceLookupError(
                f"Failed to look up {resource} for phase {labels.phase}: {e}",
                phase=labels.phase,
                resource=resource,
            ) from e

    @staticmethod
    def _create_error(kind: str, phase: str, namespace: str, e: Exception) -> ResourceCreateError:
        resource = f"{kind} in {namespace}"
        logger.error("Failed to create %s for phase %s: %s", resource, phase, e)
        return ResourceCreateError(
            f"Failed to create {resource} for phase {phase}: {e}",
            phase=phase,
            resource=resource,
        )
