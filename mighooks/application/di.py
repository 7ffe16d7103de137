from dishka import AsyncContainer, make_async_container

from mighooks.config import Config
from mighooks.domain.hook.util.di import HookProvider
from mighooks.infrastructure.kubernetes import KubernetesProvider
from mighooks.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        HookProvider(),
        KubernetesProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
