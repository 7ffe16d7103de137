from dishka import from_context, provide

from mighooks.config import Config, HookConfig
from mighooks.domain.hook.port.lookup import PhaseResourceLookup
from mighooks.domain.hook.service import HookService, LabelPhaseLookup
from mighooks.util.di.base import Provider
from mighooks.util.di.scope import Scope


class HookProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)
    lookup = provide(LabelPhaseLookup, provides=PhaseResourceLookup, scope=Scope.APP)
    service = provide(HookService, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_hook_config(self, config: Config) -> HookConfig:
        return config.hooks
