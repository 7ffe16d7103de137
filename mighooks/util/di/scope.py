"""Custom Dishka scopes for mighooks."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """mighooks dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Operator lifetime (cluster connections, configuration)
    - UOW: One reconcile of one migration
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
