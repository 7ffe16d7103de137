from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform()
class _ServiceMeta(type):
    """Turns every subclass of ``Service`` into a dataclass.

    The generated ``__init__`` lists the service's ports and settings as
    parameters, which is what dishka reads when it builds the service in the
    reconcile scope.
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        service_cls = super().__new__(mcs, name, bases, namespace)
        if not any(isinstance(base, mcs) for base in bases):
            return service_cls
        return dataclass(service_cls)


class Service(metaclass=_ServiceMeta):
    """Base of the hook engine services, such as ``HookService``.

    Declare dependencies as annotated class attributes; no ``__init__`` needed.
    """
