from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Any

from .taxonomy import HoursFilter

logger = logging.getLogger(__name__)

DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
SHORT_DAY_KEYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

MINUTES_PER_DAY = 24 * 60
CLOSES_BY_LIMIT_MINUTE = 22 * 60
_ROUND_THE_CLOCK_MARKERS = ("24/7", "24 hours", "24h", "круглосуточно")


@dataclass(frozen=True)
class HoursSummary:
    is_24_hours: bool
    latest_close_minute: int | None
    malformed: bool = False


def _parse_hhmm(value: str) -> time:
    hour, minute = value.strip().split(":")
    if int(hour) == 24 and int(minute) == 0:
        return time(23, 59)
    return time(int(hour), int(minute))


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _day_windows(raw: Any) -> list[tuple[time, time]] | None:
    """Windows for one day; ``None`` means the day is open round the clock."""
    if raw is None:
        return []
    if isinstance(raw, str):
        text = raw.strip().lower()
        if not text or text == "closed":
            return []
        if any(marker in text for marker in _ROUND_THE_CLOCK_MARKERS):
            return None
        windows = []
        for chunk in text.split(","):
            start_raw, end_raw = chunk.split("-")
            windows.append((_parse_hhmm(start_raw), _parse_hhmm(end_raw)))
        return windows
    if isinstance(raw, list):
        return [(_parse_hhmm(start_raw), _parse_hhmm(end_raw)) for start_raw, end_raw in raw]
    raise ValueError(f"Unsupported operating hours entry: {raw!r}")


def _is_full_day(start: time, end: time) -> bool:
    return start == end or (_minutes(start) == 0 and _minutes(end) >= MINUTES_PER_DAY - 1)


def _close_minute(start: time, end: time) -> int:
    start_m = _minutes(start)
    end_m = _minutes(end)
    if end_m <= start_m:
        return end_m + MINUTES_PER_DAY
    return end_m


def summarize_operating_hours(hours: dict[str, Any] | None) -> HoursSummary:
    """Derive the 24-hour flag and the latest weekly closing minute from a schedule.

    Closing times past midnight are reported above 1440 so that "18:00-02:00"
    sorts after "10:00-23:00". A schedule that cannot be parsed is logged and
    summarized as unknown, with ``malformed`` set.
    """
    if not hours:
        return HoursSummary(is_24_hours=False, latest_close_minute=None)

    try:
        return _summarize(hours)
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unparseable operating hours %r: %s", hours, exc)
        return HoursSummary(is_24_hours=False, latest_close_minute=None, malformed=True)


def _summarize(hours: dict[str, Any]) -> HoursSummary:
    normalized = {str(key).strip().lower(): value for key, value in hours.items()}
    full_days = 0
    latest_close: int | None = None

    for long_key, short_key in zip(DAY_KEYS, SHORT_DAY_KEYS):
        raw = normalized.get(long_key, normalized.get(short_key))
        windows = _day_windows(raw)
        if windows is None:
            full_days += 1
            continue
        if any(_is_full_day(start, end) for start, end in windows):
            full_days += 1
            continue
        for start, end in windows:
            close = _close_minute(start, end)
            latest_close = close if latest_close is None else max(latest_close, close)

    if full_days == len(DAY_KEYS):
        return HoursSummary(is_24_hours=True, latest_close_minute=MINUTES_PER_DAY)
    if full_days and latest_close is None:
        latest_close = MINUTES_PER_DAY
    return HoursSummary(is_24_hours=False, latest_close_minute=latest_close)


def matches_hours(option: HoursFilter, is_24_hours: bool, latest_close_minute: int | None) -> bool:
    if option is HoursFilter.OPEN_24_HOURS:
        return is_24_hours
    if option is HoursFilter.OPEN_OVERNIGHT:
        return is_24_hours or (latest_close_minute is not None and latest_close_minute > MINUTES_PER_DAY)
    if option is HoursFilter.CLOSES_BY_22:
        return (
            not is_24_hours
            and latest_close_minute is not None
            and latest_close_minute <= CLOSES_BY_LIMIT_MINUTE
        )
    raise ValueError(f"Unsupported hours filter: {option!r}")
