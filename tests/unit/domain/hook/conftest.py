"""Fixtures for hook engine tests: an in-memory object store per cluster."""

import uuid
from unittest.mock import AsyncMock

import pytest

from mighooks.config import HookConfig
from mighooks.domain.hook.service import HookService, LabelPhaseLookup
from mighooks.domain.shared.error import ConflictError, NotFoundError


class FakeClusterClient:
    """Records every call; ``list`` matches on label subsets like a label selector."""

    def __init__(self):
        self.objects = []
        self.gets = []
        self.lists = []
        self.creates = []
        self.list_errors = {}
        self.create_errors = {}
        self.racing_writers = {}
        self._created = 0

    def add(self, obj):
        self.objects.append(obj)
        return obj

    def replace(self, obj):
        self.objects = [
            obj if type(o) is type(obj) and o.metadata.name == obj.metadata.name else o
            for o in self.objects
        ]
        return obj

    async def get(self, kind, name, namespace):
        self.gets.append((kind, name, namespace))
        for obj in self.objects:
            if (
                isinstance(obj, kind)
                and obj.metadata.name == name
                and obj.metadata.namespace == namespace
            ):
                return obj
        raise NotFoundError(f"{kind.__name__} {namespace}/{name} not found")

    async def create(self, obj):
        self.creates.append(obj)
        kind = type(obj)
        if kind in self.create_errors:
            raise self.create_errors[kind]
        if kind in self.racing_writers:
            self.add(self.racing_writers.pop(kind))
            raise ConflictError(f"{kind.__name__} already exists")
        self._created += 1
        meta = obj.metadata
        stored = obj.model_copy(
            update={
                "metadata": meta.model_copy(
                    update={
                        "name": meta.name or f"{meta.generate_name}{self._created:05d}",
                        "uid": str(uuid.uuid4()),
                    }
                )
            }
        )
        return self.add(stored)

    async def list(self, kind, labels):
        self.lists.append((kind, dict(labels)))
        if kind in self.list_errors:
            raise self.list_errors[kind]
        return [
            obj
            for obj in self.objects
            if isinstance(obj, kind) and labels.items() <= obj.metadata.labels.items()
        ]


@pytest.fixture
def control_client() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def target_client() -> FakeClusterClient:
    return FakeClusterClient()


@pytest.fixture
def resolver(target_client: FakeClusterClient) -> AsyncMock:
    resolver = AsyncMock()
    resolver.resolve.return_value = target_client
    return resolver


@pytest.fixture
def service(control_client: FakeClusterClient, resolver: AsyncMock) -> HookService:
    return HookService(
        control_client=control_client,
        clusters=resolver,
        lookup=LabelPhaseLookup(),
        settings=HookConfig(),
    )
