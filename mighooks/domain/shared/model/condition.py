"""Status conditions: a typed, insertion-ordered set with merge-on-write.

Intended to be embedded in resource status. At most one condition exists per
type; re-setting an identical condition keeps its transition time.
"""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field


class ConditionStatus:
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _transition_time(previous: datetime | None) -> datetime:
    """Current time, nudged past ``previous`` when the clock has not moved."""
    now = _utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class Condition(BaseModel):
    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None

    def equal(self, other: "Condition") -> bool:
        """Compare everything except the transition time."""
        return (
            self.type == other.type
            and self.status == other.status
            and self.reason == other.reason
            and self.message == other.message
        )

    def update(self, other: "Condition") -> None:
        """Update this condition with another's fields."""
        if self.equal(other):
            return
        self.type = other.type
        self.status = other.status
        self.reason = other.reason
        self.message = other.message
        self.last_transition_time = _transition_time(self.last_transition_time)


class Conditions(BaseModel):
    """Managed collection of conditions."""

    conditions: list[Condition] | None = Field(default=None)

    def find_condition(self, cnd_type: str) -> tuple[int, Condition | None]:
        if self.conditions is None:
            return 0, None
        for index, condition in enumerate(self.conditions):
            if condition.type == cnd_type:
                return index, condition
        return 0, None

    def set_condition(self, condition: Condition) -> None:
        """Add the condition, or merge it into the stored one of the same type."""
        if self.conditions is None:
            self.conditions = []
        _, found = self.find_condition(condition.type)
        if found is None:
            self.conditions.append(
                condition.model_copy(update={"last_transition_time": _utcnow()})
            )
        else:
            found.update(condition)

    def delete_condition(self, *cnd_types: str) -> None:
        if self.conditions is None:
            return
        for name in cnd_types:
            index, condition = self.find_condition(name)
            if condition is not None:
                del self.conditions[index]

    def has_condition(self, *cnd_types: str) -> bool:
        """True when any of the given types is present."""
        return any(self.find_condition(name)[1] is not None for name in cnd_types)
