from mighooks.domain.hook.service.hook import HookService
from mighooks.domain.hook.service.lookup import LabelPhaseLookup

__all__ = [
    "HookService",
    "LabelPhaseLookup",
]
