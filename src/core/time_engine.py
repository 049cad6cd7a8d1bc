from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum


class ClockConvention(Enum):
    """Display/parse grammar of the picker."""

    TWELVE_HOUR = "12h"
    TWENTY_FOUR_HOUR = "24h"

    @property
    def hour_ceiling(self) -> int:
        return 12 if self is ClockConvention.TWELVE_HOUR else 23

    @classmethod
    def from_value(cls, value: str | ClockConvention | None) -> ClockConvention:
        if isinstance(value, ClockConvention):
            return value
        text = str(value or "").strip().lower()
        if text in {"24h", "24", "twenty-four-hour"}:
            return cls.TWENTY_FOUR_HOUR
        return cls.TWELVE_HOUR


MINUTE_CEILING = 59
DEFAULT_INTERVAL_MINUTES = 30

_DIGITS_RE = re.compile(r"[0-9]*")
_TWELVE_HOUR_RE = re.compile(r"(0?[1-9]|1[0-2]):([0-5][0-9]) ([AP])M")
_TWENTY_FOUR_HOUR_RE = re.compile(r"([01]?[0-9]|2[0-3]):([0-5][0-9])")
_PARTIAL_RE = re.compile(r"([0-9]{1,2})(?::([0-9]{1,2}))?(?: ?([AP])M?)?")


def _wall_clock(value: datetime | time | None) -> time | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.time()
    return value.replace(second=0, microsecond=0, tzinfo=None)


@dataclass(frozen=True, slots=True)
class TimeRange:
    """
    Optional allowed window inside a single day.

    Bounds keep only their wall-clock part; they are re-anchored to whatever
    day a comparison happens on. ``min_time <= max_time`` is left to the caller.
    """

    min_time: time | None = None
    max_time: time | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_time", _wall_clock(self.min_time))
        object.__setattr__(self, "max_time", _wall_clock(self.max_time))

    @classmethod
    def between(cls, min_time: datetime | time | None, max_time: datetime | time | None) -> TimeRange:
        return cls(_wall_clock(min_time), _wall_clock(max_time))

    def lower_on(self, day: date) -> datetime | None:
        return None if self.min_time is None else anchor_to_day(self.min_time, day)

    def upper_on(self, day: date) -> datetime | None:
        return None if self.max_time is None else anchor_to_day(self.max_time, day)


UNBOUNDED = TimeRange()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def anchor_to_day(value: datetime | time, day: date) -> datetime:
    wall = value.time() if isinstance(value, datetime) else value
    return datetime.combine(day, wall.replace(tzinfo=None))


def truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def same_minute(left: datetime | None, right: datetime | None) -> bool:
    if left is None or right is None:
        return left is None and right is None
    return truncate_to_minute(left) == truncate_to_minute(right)


# --- masking -----------------------------------------------------------------


def _clamp_chunk(chunk: str, ceiling: int, zero_value: str) -> str:
    if len(chunk) != 2:
        return chunk
    number = int(chunk)
    if number == 0:
        return zero_value
    if number > ceiling:
        return f"{ceiling:02d}"
    return chunk


def _pad_leading_digit(run: str, ceiling: int) -> str:
    # A lone first digit that cannot start a valid two-digit value is a complete value.
    if run and run[0].isascii() and run[0].isdigit() and int(run[0]) > ceiling // 10:
        return "0" + run
    return run


def _meridiem(chunk: str) -> str:
    if not chunk or chunk[0] not in {"A", "P"}:
        return ""
    if chunk[1:2] != "M":
        return chunk[0]
    return chunk


def mask_time_input(raw: str, convention: ClockConvention = ClockConvention.TWELVE_HOUR) -> str | None:
    """
    Progressively mask raw keystrokes into a clock string.

    Returns ``None`` when the hour or minute part holds a non-digit, in which
    case the caller keeps its previous text.

    Examples (12h): ``"945a" -> "09:45 A"``, ``"945am" -> "09:45 AM"``.
    Examples (24h): ``"2500" -> "23:00"``.
    """
    flat = (raw or "").upper().strip().replace(":", "").replace(" ", "")
    if not flat:
        return ""

    ceiling = convention.hour_ceiling
    flat = _pad_leading_digit(flat, ceiling)
    hour_chunk, rest = flat[:2], flat[2:]
    rest = _pad_leading_digit(rest, MINUTE_CEILING)
    minute_chunk, meridiem_chunk = rest[:2], rest[2:4]

    if not _DIGITS_RE.fullmatch(hour_chunk + minute_chunk):
        return None

    zero_hour = "01" if convention is ClockConvention.TWELVE_HOUR else "00"
    hour = _clamp_chunk(hour_chunk, ceiling, zero_hour)
    minute = _clamp_chunk(minute_chunk, MINUTE_CEILING, "00")
    meridiem = _meridiem(meridiem_chunk) if convention is ClockConvention.TWELVE_HOUR else ""

    masked = hour
    if minute:
        masked += f":{minute}"
    if meridiem:
        masked += f" {meridiem}"
    return masked


# --- validation / parsing ----------------------------------------------------


def _grammar(convention: ClockConvention) -> re.Pattern[str]:
    if convention is ClockConvention.TWELVE_HOUR:
        return _TWELVE_HOUR_RE
    return _TWENTY_FOUR_HOUR_RE


def is_well_formed(text: str, convention: ClockConvention = ClockConvention.TWELVE_HOUR) -> bool:
    if not text:
        return False
    return _grammar(convention).fullmatch(text) is not None


def _to_24h(hour: int, meridiem: str | None) -> int:
    if meridiem == "A":
        return 0 if hour == 12 else hour
    if meridiem == "P":
        return hour if hour == 12 else hour + 12
    return hour


def parse_time_text(
    text: str,
    convention: ClockConvention = ClockConvention.TWELVE_HOUR,
    today: date | None = None,
) -> datetime | None:
    """Parse a well-formed clock string onto ``today`` (seconds zeroed)."""
    match = _grammar(convention).fullmatch(text or "")
    if match is None:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    if convention is ClockConvention.TWELVE_HOUR:
        hour = _to_24h(hour, match.group(3))
    day = today or date.today()
    return datetime.combine(day, time(hour, minute))


def parse_partial_time(
    text: str,
    convention: ClockConvention = ClockConvention.TWELVE_HOUR,
    today: date | None = None,
) -> datetime | None:
    """
    Lenient parse of an in-progress draft such as ``"09"``, ``"09:4"`` or ``"09:45 P"``.

    Missing minutes read as 0; a 12h draft without a meridiem reads the hour
    as typed. Returns ``None`` when nothing usable is present.
    """
    match = _PARTIAL_RE.fullmatch((text or "").strip(" ").upper())
    if match is None:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = match.group(3)
    if convention is ClockConvention.TWELVE_HOUR:
        if meridiem is not None and not 1 <= hour <= 12:
            return None
        hour = _to_24h(hour, meridiem)
    if not (0 <= hour <= 23 and 0 <= minute <= MINUTE_CEILING):
        return None
    day = today or date.today()
    return datetime.combine(day, time(hour, minute))


def is_within_range(value: datetime, time_range: TimeRange | None) -> bool:
    if time_range is None:
        return True
    candidate = truncate_to_minute(value)
    lower = time_range.lower_on(value.date())
    upper = time_range.upper_on(value.date())
    if lower is not None and candidate < lower:
        return False
    if upper is not None and candidate > upper:
        return False
    return True


def is_valid_and_in_range(
    text: str,
    convention: ClockConvention = ClockConvention.TWELVE_HOUR,
    time_range: TimeRange | None = None,
    today: date | None = None,
) -> bool:
    value = parse_time_text(text, convention, today)
    if value is None:
        return False
    return is_within_range(value, time_range)


def format_time(value: datetime | time | None, convention: ClockConvention = ClockConvention.TWELVE_HOUR) -> str:
    """Canonical uppercase display text, independent of the process locale."""
    if value is None:
        return ""
    if convention is ClockConvention.TWENTY_FOUR_HOUR:
        return f"{value.hour:02d}:{value.minute:02d}"
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour:02d}:{value.minute:02d} {meridiem}"


# --- suggestions -------------------------------------------------------------


def round_up_to_interval(anchor: datetime, interval_minutes: int = DEFAULT_INTERVAL_MINUTES) -> datetime:
    """
    Round ``anchor`` up to the next interval boundary counted from midnight.

    A minute already on a boundary is kept. With the default 30 minutes this
    gives ``:00`` kept, ``:01``-``:30`` to ``:30``, later minutes to the next hour.
    Seconds are ignored and the result may land on the following day.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    base = start_of_day(anchor.date())
    minute_of_day = anchor.hour * 60 + anchor.minute
    remainder = minute_of_day % interval_minutes
    if remainder:
        minute_of_day += interval_minutes - remainder
    return base + timedelta(minutes=minute_of_day)


def generate_suggestions(
    anchor: datetime,
    time_range: TimeRange | None = None,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
    max_span_hours: float | None = None,
) -> list[datetime]:
    """
    Enumerate selectable times on the anchor's day, ascending and inclusive.

    An inverted range (min after max) produces an empty list.
    """
    day = anchor.date()
    time_range = time_range or UNBOUNDED

    lower = max(
        start_of_day(day),
        time_range.lower_on(day) or start_of_day(day),
        round_up_to_interval(anchor, interval_minutes),
    )
    upper_candidates = [end_of_day(day), time_range.upper_on(day) or end_of_day(day)]
    if max_span_hours is not None:
        upper_candidates.append(lower + timedelta(hours=max_span_hours))
    upper = min(upper_candidates)

    step = timedelta(minutes=interval_minutes)
    suggestions: list[datetime] = []
    current = lower.replace(second=0, microsecond=0)
    while current <= upper:
        suggestions.append(current)
        current += step
    return suggestions
