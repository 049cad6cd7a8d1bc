from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum, auto
from typing import Callable, Union

from PySide6.QtCore import QObject, Signal

try:
    from core.logger import get_logger
    from core.time_engine import (
        DEFAULT_INTERVAL_MINUTES,
        UNBOUNDED,
        ClockConvention,
        TimeRange,
        format_time,
        generate_suggestions,
        is_valid_and_in_range,
        is_well_formed,
        mask_time_input,
        parse_partial_time,
        parse_time_text,
        same_minute,
        truncate_to_minute,
    )
except ModuleNotFoundError:
    from .logger import get_logger
    from .time_engine import (
        DEFAULT_INTERVAL_MINUTES,
        UNBOUNDED,
        ClockConvention,
        TimeRange,
        format_time,
        generate_suggestions,
        is_valid_and_in_range,
        is_well_formed,
        mask_time_input,
        parse_partial_time,
        parse_time_text,
        same_minute,
        truncate_to_minute,
    )


_log = get_logger("session")


class SessionState(Enum):
    """Derived input session states."""

    EMPTY = auto()
    TYPING = auto()
    COMMITTED = auto()


class ValidityClass(Enum):
    NEUTRAL = ""
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class PickerOptions:
    convention: ClockConvention = ClockConvention.TWELVE_HOUR
    time_range: TimeRange = UNBOUNDED
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES
    max_span_hours: float | None = None


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Draft text, last committed value and drop-down flag of one input."""

    draft: str = ""
    committed: datetime | None = None
    drop_down_open: bool = False


# --- events ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawInput:
    text: str


@dataclass(frozen=True, slots=True)
class FocusAffordance:
    pass


@dataclass(frozen=True, slots=True)
class Blur:
    pass


@dataclass(frozen=True, slots=True)
class ClickOutside:
    pass


@dataclass(frozen=True, slots=True)
class PickSuggestion:
    candidate: datetime


@dataclass(frozen=True, slots=True)
class ExternalValue:
    """Host wrote a new committed value (or changed the convention)."""

    value: datetime | None


SessionEvent = Union[RawInput, FocusAffordance, Blur, ClickOutside, PickSuggestion, ExternalValue]


@dataclass(frozen=True, slots=True)
class SessionStep:
    """Reducer output: next snapshot plus an optional commit for the host."""

    snapshot: SessionSnapshot
    commit: bool = False
    value: datetime | None = None


def synced_text(value: datetime | None, convention: ClockConvention) -> str:
    return format_time(value, convention).upper()


def _commit_if_changed(snapshot: SessionSnapshot, value: datetime | None) -> SessionStep:
    if same_minute(snapshot.committed, value):
        return SessionStep(snapshot)
    return SessionStep(snapshot, commit=True, value=value)


def _validate_and_commit(snapshot: SessionSnapshot, options: PickerOptions, today: date | None) -> SessionStep:
    closed = replace(snapshot, drop_down_open=False)
    if not closed.draft:
        return _commit_if_changed(closed, None)
    if not is_valid_and_in_range(closed.draft, options.convention, options.time_range, today):
        reverted = replace(closed, draft=synced_text(closed.committed, options.convention))
        return SessionStep(reverted)
    return _commit_if_changed(closed, parse_time_text(closed.draft, options.convention, today))


def reduce_session(
    snapshot: SessionSnapshot,
    event: SessionEvent,
    options: PickerOptions,
    today: date | None = None,
) -> SessionStep:
    """
    Apply one input event to a snapshot.

    The committed slot is never written here; a commit is returned to the
    caller, and the host echoes it back through ``ExternalValue``.
    """
    match event:
        case RawInput(text=text):
            masked = mask_time_input(text, options.convention)
            if masked is None:
                return SessionStep(snapshot)
            return SessionStep(replace(snapshot, draft=masked, drop_down_open=True))

        case FocusAffordance():
            return SessionStep(replace(snapshot, drop_down_open=True))

        case PickSuggestion(candidate=candidate):
            picked = truncate_to_minute(candidate)
            closed = replace(
                snapshot,
                draft=synced_text(picked, options.convention),
                drop_down_open=False,
            )
            return _commit_if_changed(closed, picked)

        case Blur() | ClickOutside():
            return _validate_and_commit(snapshot, options, today)

        case ExternalValue(value=value):
            return SessionStep(
                replace(snapshot, draft=synced_text(value, options.convention), committed=value)
            )

    raise TypeError(f"Unsupported session event: {event!r}")


def derive_state(snapshot: SessionSnapshot, convention: ClockConvention) -> SessionState:
    if not snapshot.draft:
        return SessionState.EMPTY
    if snapshot.committed is not None and snapshot.draft == synced_text(snapshot.committed, convention):
        return SessionState.COMMITTED
    return SessionState.TYPING


def classify_validity(text: str, options: PickerOptions, today: date | None = None) -> ValidityClass:
    if is_valid_and_in_range(text, options.convention, options.time_range, today):
        return ValidityClass.VALID
    if is_well_formed(text, options.convention):
        return ValidityClass.INVALID
    return ValidityClass.NEUTRAL


class TimeInputController(QObject):
    """
    Input session for one time field.

    Owns the draft text and drop-down flag, recomputes suggestions on every
    change and reports commits through ``on_change`` / ``value_committed``.
    """

    value_committed = Signal(object)
    display_text_changed = Signal(str)
    drop_down_visibility_changed = Signal(bool)
    suggestions_changed = Signal(object)
    state_changed = Signal(object, object)

    def __init__(
        self,
        *,
        convention: ClockConvention = ClockConvention.TWELVE_HOUR,
        time_range: TimeRange | None = None,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        max_span_hours: float | None = None,
        value: datetime | None = None,
        on_change: Callable[[datetime | None], None] | None = None,
        clock: Callable[[], datetime] = datetime.now,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._options = PickerOptions(
            convention=convention,
            time_range=time_range or UNBOUNDED,
            interval_minutes=interval_minutes,
            max_span_hours=max_span_hours,
        )
        self._on_change = on_change
        self._clock = clock
        self._snapshot = SessionSnapshot(
            draft=synced_text(value, convention),
            committed=value,
        )
        self._suggestions = self._compute_suggestions()

    # --- observables ---

    @property
    def options(self) -> PickerOptions:
        return self._options

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def display_text(self) -> str:
        return self._snapshot.draft

    @property
    def value(self) -> datetime | None:
        return self._snapshot.committed

    @property
    def suggestions(self) -> list[datetime]:
        return list(self._suggestions)

    @property
    def is_drop_down_visible(self) -> bool:
        return self._snapshot.drop_down_open and bool(self._suggestions)

    @property
    def validity_class(self) -> ValidityClass:
        return classify_validity(self._snapshot.draft, self._options, self._today())

    @property
    def state(self) -> SessionState:
        return derive_state(self._snapshot, self._options.convention)

    @property
    def placeholder_text(self) -> str:
        return synced_text(self._clock(), self._options.convention)

    # --- entry points ---

    def on_raw_input(self, text: str) -> None:
        self._dispatch(RawInput(text))

    def on_focus_affordance(self) -> None:
        self._dispatch(FocusAffordance())

    def on_blur(self) -> None:
        self._dispatch(Blur())

    def on_click_outside(self) -> None:
        self._dispatch(ClickOutside())

    def on_pick_suggestion(self, candidate: datetime) -> None:
        self._dispatch(PickSuggestion(candidate))

    # --- host writes ---

    def set_value(self, value: datetime | None) -> None:
        self._dispatch(ExternalValue(value))

    def set_convention(self, convention: ClockConvention) -> None:
        if convention is self._options.convention:
            return
        self._options = replace(self._options, convention=convention)
        self._dispatch(ExternalValue(self._snapshot.committed), force_refresh=True)

    def set_time_range(self, time_range: TimeRange | None) -> None:
        self._options = replace(self._options, time_range=time_range or UNBOUNDED)
        self._refresh_suggestions()

    def set_interval_minutes(self, interval_minutes: int) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._options = replace(self._options, interval_minutes=interval_minutes)
        self._refresh_suggestions()

    def set_max_span_hours(self, max_span_hours: float | None) -> None:
        self._options = replace(self._options, max_span_hours=max_span_hours)
        self._refresh_suggestions()

    # --- internals ---

    def _today(self) -> date:
        return self._clock().date()

    def _compute_suggestions(self) -> list[datetime]:
        now = self._clock()
        anchor = parse_partial_time(self._snapshot.draft, self._options.convention, now.date()) or now
        return generate_suggestions(
            anchor,
            self._options.time_range,
            self._options.interval_minutes,
            self._options.max_span_hours,
        )

    def _refresh_suggestions(self) -> None:
        was_visible = self.is_drop_down_visible
        self._suggestions = self._compute_suggestions()
        self.suggestions_changed.emit(self.suggestions)
        if was_visible != self.is_drop_down_visible:
            self.drop_down_visibility_changed.emit(self.is_drop_down_visible)

    def _dispatch(self, event: SessionEvent, *, force_refresh: bool = False) -> None:
        before = self._snapshot
        old_state = self.state
        was_visible = self.is_drop_down_visible

        step = reduce_session(before, event, self._options, self._today())
        self._snapshot = step.snapshot

        if isinstance(event, (Blur, ClickOutside)) and not step.commit and step.snapshot.draft != before.draft:
            _log.debug("[Revert] draft=%r restored=%r", before.draft, step.snapshot.draft)

        if force_refresh or step.snapshot.draft != before.draft:
            self._suggestions = self._compute_suggestions()
            self.suggestions_changed.emit(self.suggestions)
            self.display_text_changed.emit(step.snapshot.draft)

        if was_visible != self.is_drop_down_visible:
            self.drop_down_visibility_changed.emit(self.is_drop_down_visible)

        new_state = self.state
        if new_state is not old_state:
            self.state_changed.emit(old_state, new_state)

        if step.commit:
            _log.debug("[Commit] value=%s", step.value)
            if self._on_change is not None:
                self._on_change(step.value)
            self.value_committed.emit(step.value)
