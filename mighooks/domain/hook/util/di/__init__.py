from mighooks.domain.hook.util.di.provider import HookProvider

__all__ = ["HookProvider"]
