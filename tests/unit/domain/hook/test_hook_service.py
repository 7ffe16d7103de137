"""Unit tests for HookService: submission, polling and failure classification."""

import base64

import pytest

from mighooks.domain.hook.model import (
    ClusterTarget,
    ConfigMap,
    HookDefinition,
    HookSpec,
    Job,
    JobStatus,
    MigrationPlan,
    ObjectMeta,
    ObjectReference,
    PlanHook,
    PlanResources,
    PlanSpec,
)
from mighooks.domain.shared.error import (
    ConfigurationError,
    ConflictError,
    HookJobFailedError,
    ResourceCreateError,
    ResourceLookupError,
    StorageUnavailableError,
)

PHASE = "PreBackupHooks"
PLAYBOOK = "- hosts: localhost\n  tasks:\n    - debug: msg=hello\n"


def _make_hook(
    target_cluster: str = "destination",
    custom: bool = False,
    image: str = "quay.io/konveyor/hook-runner:latest",
    playbook: str | None = None,
) -> HookDefinition:
    if playbook is None and not custom:
        playbook = base64.b64encode(PLAYBOOK.encode()).decode()
    return HookDefinition(
        metadata=ObjectMeta(name="my-hook", namespace="openshift-migration", uid="hook-uid-1"),
        spec=HookSpec(target_cluster=target_cluster, custom=custom, image=image, playbook=playbook),
    )


def _make_binding(phase: str = "PreBackup", with_reference: bool = True) -> PlanHook:
    return PlanHook(
        phase=phase,
        execution_namespace="hooks",
        service_account="hook-runner",
        reference=(
            ObjectReference(name="my-hook", namespace="openshift-migration")
            if with_reference
            else None
        ),
    )


def _make_resources(*bindings: PlanHook) -> PlanResources:
    return PlanResources.from_plan(
        MigrationPlan(
            metadata=ObjectMeta(name="MyPlan", namespace="openshift-migration", uid="plan-uid-1"),
            spec=PlanSpec(
                hooks=list(bindings),
                src_mig_cluster_ref=ObjectReference(name="src"),
                dest_mig_cluster_ref=ObjectReference(name="host"),
            ),
        )
    )


def _set_job_status(target_client, **counters) -> Job:
    job = next(obj for obj in target_client.objects if isinstance(obj, Job))
    return target_client.replace(job.model_copy(update={"status": JobStatus(**counters)}))


class TestUnconfiguredPhase:
    @pytest.mark.asyncio
    async def test_no_binding_is_done_without_store_access(
        self, service, control_client, target_client, resolver
    ):
        done = await service.run_phase_hooks(PHASE, _make_resources())

        assert done is True
        assert control_client.gets == []
        assert target_client.lists == []
        resolver.resolve.assert_not_called()

    @pytest.mark.asyncio
    async def test_binding_for_other_phase_is_ignored(self, service, control_client):
        done = await service.run_phase_hooks(PHASE, _make_resources(_make_binding("PostRestore")))

        assert done is True
        assert control_client.gets == []

    @pytest.mark.asyncio
    async def test_binding_without_reference_is_done(self, service, control_client):
        resources = _make_resources(_make_binding(with_reference=False))

        assert await service.run_phase_hooks(PHASE, resources) is True
        assert control_client.gets == []


class TestHookLookup:
    @pytest.mark.asyncio
    async def test_missing_hook_raises_lookup_error(self, service, target_client):
        with pytest.raises(ResourceLookupError, match="my-hook") as exc_info:
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert exc_info.value.phase == PHASE
        assert target_client.creates == []

    @pytest.mark.asyncio
    async def test_unknown_target_cluster_is_configuration_error(
        self, service, control_client, target_client, resolver
    ):
        control_client.add(_make_hook(target_cluster="elsewhere"))

        with pytest.raises(ConfigurationError, match="elsewhere unknown"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        resolver.resolve.assert_not_called()
        assert target_client.creates == []

    @pytest.mark.asyncio
    async def test_source_target_resolves_source_cluster(self, service, control_client, resolver):
        control_client.add(_make_hook(target_cluster="source", custom=True))
        resources = _make_resources(_make_binding())

        await service.run_phase_hooks(PHASE, resources)

        resolver.resolve.assert_awaited_once_with(ClusterTarget.SOURCE, resources)

    @pytest.mark.asyncio
    async def test_destination_target_resolves_destination_cluster(
        self, service, control_client, resolver
    ):
        control_client.add(_make_hook(target_cluster="destination", custom=True))
        resources = _make_resources(_make_binding())

        await service.run_phase_hooks(PHASE, resources)

        resolver.resolve.assert_awaited_once_with(ClusterTarget.DESTINATION, resources)

    @pytest.mark.asyncio
    async def test_resolver_error_propagates(self, service, control_client, resolver):
        control_client.add(_make_hook())
        resolver.resolve.side_effect = ConfigurationError("No connection configured for 'host'")

        with pytest.raises(ConfigurationError, match="No connection"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))


class TestPlaybookHookLifecycle:
    @pytest.mark.asyncio
    async def test_first_call_creates_config_map_then_job(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook())

        done = await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert done is False
        assert [type(obj) for obj in target_client.creates] == [ConfigMap, Job]
        config_map = target_client.objects[0]
        assert config_map.binary_data == {"playbook.yml": PLAYBOOK.encode()}
        job = target_client.objects[1]
        volume = job.spec.template.spec.volumes[0]
        assert volume.config_map.name == config_map.metadata.name

    @pytest.mark.asyncio
    async def test_line_wrapped_playbook_creates_config_map_then_job(
        self, service, control_client, target_client
    ):
        playbook = PLAYBOOK.encode() * 5
        control_client.add(_make_hook(playbook=base64.encodebytes(playbook).decode()))

        done = await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert done is False
        assert [type(obj) for obj in target_client.creates] == [ConfigMap, Job]
        assert target_client.objects[0].binary_data == {"playbook.yml": playbook}

    @pytest.mark.asyncio
    async def test_running_job_makes_no_new_creates(self, service, control_client, target_client):
        control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        await service.run_phase_hooks(PHASE, resources)
        _set_job_status(target_client, active=1, failed=0, succeeded=0)

        done = await service.run_phase_hooks(PHASE, resources)

        assert done is False
        assert len(target_client.creates) == 2

    @pytest.mark.asyncio
    async def test_job_below_failure_threshold_keeps_polling(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        await service.run_phase_hooks(PHASE, resources)
        _set_job_status(target_client, failed=4)

        assert await service.run_phase_hooks(PHASE, resources) is False

    @pytest.mark.asyncio
    async def test_failed_job_is_terminal(self, service, control_client, target_client):
        control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        await service.run_phase_hooks(PHASE, resources)
        job = _set_job_status(target_client, failed=5)

        with pytest.raises(HookJobFailedError) as exc_info:
            await service.run_phase_hooks(PHASE, resources)

        assert exc_info.value.job_name == job.metadata.name
        assert job.metadata.name in str(exc_info.value)
        assert len(target_client.creates) == 2

    @pytest.mark.asyncio
    async def test_succeeded_job_is_done(self, service, control_client, target_client):
        control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        await service.run_phase_hooks(PHASE, resources)
        _set_job_status(target_client, succeeded=1)

        assert await service.run_phase_hooks(PHASE, resources) is True
        assert len(target_client.creates) == 2

    @pytest.mark.asyncio
    async def test_malformed_playbook_fails_before_config_map_lookup(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook(playbook="not base64!!"))

        with pytest.raises(ConfigurationError, match="base64"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert target_client.lists == []
        assert target_client.creates == []

    @pytest.mark.asyncio
    async def test_existing_config_map_is_reused(self, service, control_client, target_client):
        hook = control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        labels = hook.correlation_labels(resources.plan, PHASE)
        existing = target_client.add(
            ConfigMap(
                metadata=ObjectMeta(name="myplan-prebackuphooks-abcde", labels=labels.as_dict()),
                binary_data={"playbook.yml": b"old"},
            )
        )

        await service.run_phase_hooks(PHASE, resources)

        assert [type(obj) for obj in target_client.creates] == [Job]
        job = target_client.creates[0]
        assert job.spec.template.spec.volumes[0].config_map.name == existing.metadata.name

    @pytest.mark.asyncio
    async def test_objects_are_labelled_for_plan_and_phase(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook())

        await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        config_map, job = target_client.objects
        expected = {
            "app.kubernetes.io/part-of": "openshift-migration",
            "mighook": "hook-uid-1",
            "migplan": "plan-uid-1",
            "phase": PHASE,
        }
        assert config_map.metadata.labels == expected
        assert job.metadata.labels == expected
        assert config_map.metadata.labels is not job.metadata.labels


class TestCustomHookLifecycle:
    @pytest.mark.asyncio
    async def test_custom_hook_creates_only_a_job(self, service, control_client, target_client):
        control_client.add(_make_hook(custom=True, image="busybox"))

        done = await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert done is False
        assert [type(obj) for obj in target_client.creates] == [Job]
        container = target_client.creates[0].spec.template.spec.containers[0]
        assert container.image == "busybox"
        assert container.command is None
        assert [kind for kind, _ in target_client.lists] == [Job]

    @pytest.mark.asyncio
    async def test_custom_hook_ignores_malformed_playbook(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook(custom=True, playbook="not base64!!"))

        assert await service.run_phase_hooks(PHASE, _make_resources(_make_binding())) is False
        assert len(target_client.creates) == 1


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_config_map_lookup_failure(self, service, control_client, target_client):
        control_client.add(_make_hook())
        target_client.list_errors[ConfigMap] = StorageUnavailableError("connection refused")

        with pytest.raises(ResourceLookupError, match="connection refused"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert target_client.creates == []

    @pytest.mark.asyncio
    async def test_job_lookup_failure(self, service, control_client, target_client):
        control_client.add(_make_hook(custom=True))
        target_client.list_errors[Job] = StorageUnavailableError("timeout")

        with pytest.raises(ResourceLookupError) as exc_info:
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert exc_info.value.phase == PHASE
        assert target_client.creates == []

    @pytest.mark.asyncio
    async def test_config_map_create_failure(self, service, control_client, target_client):
        control_client.add(_make_hook())
        target_client.create_errors[ConfigMap] = StorageUnavailableError("forbidden")

        with pytest.raises(ResourceCreateError, match="ConfigMap"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert [type(obj) for obj in target_client.creates] == [ConfigMap]

    @pytest.mark.asyncio
    async def test_job_create_failure(self, service, control_client, target_client):
        control_client.add(_make_hook(custom=True))
        target_client.create_errors[Job] = StorageUnavailableError("quota exceeded")

        with pytest.raises(ResourceCreateError, match="quota exceeded"):
            await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))


class TestConcurrentWriters:
    @pytest.mark.asyncio
    async def test_job_already_exists_is_not_an_error(self, service, control_client, target_client):
        control_client.add(_make_hook(custom=True))
        target_client.create_errors[Job] = ConflictError("already exists")

        assert await service.run_phase_hooks(PHASE, _make_resources(_make_binding())) is False

    @pytest.mark.asyncio
    async def test_config_map_race_uses_the_other_writers_config_map(
        self, service, control_client, target_client
    ):
        hook = control_client.add(_make_hook())
        resources = _make_resources(_make_binding())
        labels = hook.correlation_labels(resources.plan, PHASE)
        target_client.racing_writers[ConfigMap] = ConfigMap(
            metadata=ObjectMeta(name="myplan-prebackuphooks-zzzzz", labels=labels.as_dict()),
            binary_data={"playbook.yml": PLAYBOOK.encode()},
        )

        done = await service.run_phase_hooks(PHASE, resources)

        assert done is False
        job = target_client.creates[-1]
        assert job.spec.template.spec.volumes[0].config_map.name == "myplan-prebackuphooks-zzzzz"

    @pytest.mark.asyncio
    async def test_config_map_race_not_yet_visible_retries_later(
        self, service, control_client, target_client
    ):
        control_client.add(_make_hook())
        target_client.create_errors[ConfigMap] = ConflictError("already exists")

        done = await service.run_phase_hooks(PHASE, _make_resources(_make_binding()))

        assert done is False
        assert [type(obj) for obj in target_client.creates] == [ConfigMap]


class TestBindingSelection:
    @pytest.mark.asyncio
    async def test_last_binding_for_phase_wins(self, service, control_client, target_client):
        control_client.add(_make_hook(custom=True))
        first = _make_binding()
        second = first.model_copy(update={"execution_namespace": "other-hooks"})

        await service.run_phase_hooks(PHASE, _make_resources(first, second))

        assert target_client.creates[0].metadata.namespace == "other-hooks"
