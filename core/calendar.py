"""
core.calendar
Workday calendar: 5 working days per 7-day cycle, weekends skipped.

Day 1..5 is week 1, 8..12 week 2, 15..19 week 3, ...
The in-game clock maps one real day (default 240 s) onto 09:00-18:00.
"""

from __future__ import annotations

WORKDAY_START_HOUR = 9
WORKDAY_HOURS = 9

WEEKDAY_NAMES = ("", "周一", "周二", "周三", "周四", "周五")


def day_in_cycle(day: int) -> int:
    return ((int(day) - 1) % 7) + 1


def is_workday(day: int) -> bool:
    return int(day) >= 1 and day_in_cycle(day) <= 5


def is_week_end_day(day: int) -> bool:
    """Friday of a work week: day 5, 12, 19, ..."""
    day = int(day)
    return day == 5 or (day > 5 and (day - 5) % 7 == 0)


def next_workday(day: int) -> int:
    """Friday jumps over the weekend (5 -> 8, 12 -> 15)."""
    return int(day) + 3 if is_week_end_day(day) else int(day) + 1


def week_number(day: int) -> int:
    day = int(day)
    if day <= 5:
        return 1
    return (day - 1) // 7 + 1


def weekday_name(day: int) -> str:
    idx = day_in_cycle(day)
    if idx > 5:
        idx = 1
    return WEEKDAY_NAMES[idx]


def elapsed_seconds(seconds_left: int, day_length: int) -> int:
    return int(day_length) - int(seconds_left)


def in_game_hour(elapsed: float, day_length: int) -> float:
    """Fractional hour on the 09:00-18:00 scale for `elapsed` real seconds."""
    return WORKDAY_START_HOUR + (float(elapsed) / float(day_length)) * WORKDAY_HOURS


def format_workday_clock(seconds_left: int, day_length: int) -> str:
    elapsed = elapsed_seconds(seconds_left, day_length)
    per_second = WORKDAY_HOURS * 3600 / float(day_length)
    ingame = WORKDAY_START_HOUR * 3600 + int(elapsed * per_second)
    h = ingame // 3600
    m = (ingame % 3600) // 60
    return f"{h:02d}:{m:02d}"
