from core.calendar import (
    format_workday_clock,
    in_game_hour,
    is_week_end_day,
    is_workday,
    next_workday,
    week_number,
    weekday_name,
)


def test_next_workday_skips_weekends():
    assert next_workday(1) == 2
    assert next_workday(4) == 5
    assert next_workday(5) == 8
    assert next_workday(8) == 9
    assert next_workday(12) == 15
    assert next_workday(19) == 22


def test_week_end_days():
    assert [d for d in range(1, 27) if is_week_end_day(d)] == [5, 12, 19, 26]


def test_workdays():
    assert is_workday(1)
    assert is_workday(12)
    assert not is_workday(6)
    assert not is_workday(14)
    assert not is_workday(0)


def test_week_number():
    assert [week_number(d) for d in (1, 5, 8, 12, 15, 19, 22)] == [1, 1, 2, 2, 3, 3, 4]


def test_weekday_names():
    assert weekday_name(1) == "周一"
    assert weekday_name(5) == "周五"
    assert weekday_name(8) == "周一"
    assert weekday_name(12) == "周五"


def test_clock_maps_day_onto_office_hours():
    assert format_workday_clock(240, 240) == "09:00"
    assert format_workday_clock(120, 240) == "13:30"
    assert format_workday_clock(0, 240) == "18:00"


def test_in_game_hour():
    assert in_game_hour(0, 240) == 9.0
    assert in_game_hour(180, 240) == 15.75
    assert in_game_hour(240, 240) == 18.0
