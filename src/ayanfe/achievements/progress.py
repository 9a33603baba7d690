"""Per-(user, achievement) progress state machine.

States move forward only: not_started -> in_progress -> completed.
``completed`` is terminal; advancing a completed state is a no-op, so
re-delivered events never change ``completed_at`` or lower the counters.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

# Numeric measurement: a running total reported by the caller.
TOTAL_TYPES = frozenset({"message_count", "login_streak"})
# String measurement: a value that counts once however often it is seen.
DISTINCT_TYPES = frozenset({"unique_commands", "api_usage", "emoji_reactions"})
COUNTING_TYPES = TOTAL_TYPES | DISTINCT_TYPES
TIME_OF_DAY = "time_of_day"
SUPPORTED_TYPES = COUNTING_TYPES | {TIME_OF_DAY}

# conditions key restricting which values count, per distinct type
_ALLOWED_VALUES_KEY = {
    "unique_commands": "commandTypes",
    "api_usage": "categories",
}


class ProgressStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class AchievementRule:
    """The parts of an achievement definition that drive evaluation."""

    type: str
    required_count: int
    conditions: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressState:
    current_count: int = 0
    progress: int = 0
    completed: bool = False
    completed_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> ProgressStatus:
        if self.completed:
            return ProgressStatus.COMPLETED
        if self.current_count > 0:
            return ProgressStatus.IN_PROGRESS
        return ProgressStatus.NOT_STARTED


@dataclass(frozen=True)
class Transition:
    state: ProgressState
    changed: bool
    just_completed: bool


def percent(count: int, required: int) -> int:
    """min(100, floor(count / required * 100)), computed in integers."""
    required = max(required, 1)
    return min(100, (count * 100) // required)


def in_hour_window(hour: int, start_hour: int, end_hour: int) -> bool:
    """Half-open [start_hour, end_hour). Windows may wrap past midnight."""
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def _unchanged(state: ProgressState) -> Transition:
    return Transition(state, changed=False, just_completed=False)


def _complete_if_reached(
    state: ProgressState,
    count: int,
    required: int,
    metadata: dict[str, Any],
    occurred_at: datetime,
) -> Transition:
    count = max(state.current_count, count)
    new_progress = max(state.progress, percent(count, required))
    reached = count >= max(required, 1)
    new_state = replace(
        state,
        current_count=count,
        progress=100 if reached else new_progress,
        completed=reached,
        completed_at=occurred_at if reached else None,
        metadata=metadata,
    )
    changed = new_state != state
    return Transition(new_state, changed=changed, just_completed=reached)


def _advance_total(
    state: ProgressState, rule: AchievementRule, measurement: Any, occurred_at: datetime
) -> Transition:
    try:
        total = int(measurement)
    except (TypeError, ValueError):
        return _unchanged(state)
    return _complete_if_reached(state, total, rule.required_count, dict(state.metadata), occurred_at)


def _advance_distinct(
    state: ProgressState, rule: AchievementRule, measurement: Any, occurred_at: datetime
) -> Transition:
    if measurement is None or measurement == "":
        return _unchanged(state)
    value = str(measurement)

    allowed_key = _ALLOWED_VALUES_KEY.get(rule.type)
    allowed = rule.conditions.get(allowed_key) if allowed_key else None
    if allowed and value not in allowed:
        return _unchanged(state)

    seen = list(state.metadata.get("seen", []))
    if value in seen:
        return _unchanged(state)
    seen.append(value)

    metadata = {**state.metadata, "seen": seen}
    return _complete_if_reached(state, len(seen), rule.required_count, metadata, occurred_at)


def _advance_time_of_day(
    state: ProgressState, rule: AchievementRule, measurement: Any, occurred_at: datetime
) -> Transition:
    try:
        hour = int(measurement)
        start_hour = int(rule.conditions["startHour"])
        end_hour = int(rule.conditions["endHour"])
    except (KeyError, TypeError, ValueError):
        return _unchanged(state)

    if not in_hour_window(hour, start_hour, end_hour):
        return _unchanged(state)

    metadata = {**state.metadata, "hour": hour}
    new_state = replace(
        state,
        current_count=1,
        progress=100,
        completed=True,
        completed_at=occurred_at,
        metadata=metadata,
    )
    return Transition(new_state, changed=True, just_completed=True)


def advance(
    state: ProgressState,
    rule: AchievementRule,
    measurement: Any,
    occurred_at: datetime,
) -> Transition:
    """Apply one measurement to ``state``.

    Returns the new state; ``just_completed`` is True only on the single
    transition into ``completed``.
    """
    if state.completed:
        return _unchanged(state)

    if rule.type in TOTAL_TYPES:
        return _advance_total(state, rule, measurement, occurred_at)
    if rule.type in DISTINCT_TYPES:
        return _advance_distinct(state, rule, measurement, occurred_at)
    if rule.type == TIME_OF_DAY:
        return _advance_time_of_day(state, rule, measurement, occurred_at)
    return _unchanged(state)
