"""Error hierarchy for mighooks.

Error layers:
- MigHooksError: Base class for all mighooks errors
- DomainError: Bad hook configuration, missing resources, terminal hook failures
- InfrastructureError: Object store read/write failures

Every error raised out of ``HookService.run_phase_hooks`` is terminal for the
current reconcile tick; "not done yet" is never an error.
"""


class MigHooksError(Exception):
    """Base class for all mighooks errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(MigHooksError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ConflictError(DomainError):
    """Resource already exists."""


class ConfigurationError(DomainError):
    """Hook or cluster misconfiguration detected.

    Raised for an unknown target cluster, a malformed playbook or a cluster
    name with no configured connection.
    """


class TemplateError(DomainError):
    """A hook job or config map cannot be built from the given inputs."""


class HookJobFailedError(DomainError):
    """Hook job reached the failed-attempt threshold."""

    def __init__(self, job_name: str, failed: int, phase: str) -> None:
        super().__init__(
            f"Hook job {job_name} failed ({failed} failed attempts) in phase {phase}",
            code="HOOK_JOB_FAILED",
        )
        self.job_name = job_name
        self.failed = failed
        self.phase = phase


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(MigHooksError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Cluster API server is unavailable or rejected the request."""


class ResourceLookupError(InfrastructureError):
    """Reading a hook, config map or job from the object store failed."""

    def __init__(self, message: str, phase: str, resource: str) -> None:
        super().__init__(message, code="LOOKUP_FAILED")
        self.phase = phase
        self.resource = resource


class ResourceCreateError(InfrastructureError):
    """Submitting a config map or job to the object store failed."""

    def __init__(self, message: str, phase: str, resource: str) -> None:
        super().__init__(message, code="CREATE_FAILED")
        self.phase = phase
        self.resource = resource
