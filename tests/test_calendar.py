from datetime import datetime

import pytest

from bazi_mbti.astro_calendar import (
    CalendarResolutionError,
    apply_lmt,
    day_index,
    day_pillar,
    hour_pillar,
    lmt_correction,
    month_pillar,
    resolve,
    sun_longitude_to_month_branch_index,
    utc_offset_for,
    year_pillar,
)


def test_lmt_correction_beijing():
    assert lmt_correction(116.4) == pytest.approx(-14.4)


def test_apply_lmt_without_longitude_keeps_clock_time():
    clock = datetime(2000, 6, 1, 12, 0)
    assert apply_lmt(clock, None) == clock


@pytest.mark.parametrize(
    "lon, branch_index",
    [(315.0, 2), (344.9, 2), (345.0, 3), (0.0, 3), (285.0, 1), (284.9, 0), (255.0, 0)],
)
def test_sun_longitude_month_boundaries(lon, branch_index):
    assert sun_longitude_to_month_branch_index(lon) == branch_index


def test_year_pillar_cycle_start():
    assert year_pillar(1984).ganzhi == "甲子"
    assert year_pillar(2024).ganzhi == "甲辰"


def test_five_tigers_month_stem():
    assert month_pillar(0, 2).ganzhi == "丙寅"
    assert month_pillar(9, 1).ganzhi == "乙丑"


@pytest.mark.parametrize(
    "date, expected",
    [
        (datetime(1949, 10, 1), 0),
        (datetime(2000, 1, 1), 54),
    ],
)
def test_day_index_reference_dates(date, expected):
    assert day_index(date) == expected


def test_day_pillar_reference_date():
    assert day_pillar(datetime(2000, 1, 1)).ganzhi == "戊午"


def test_late_rat_hour_uses_next_day_stem():
    # 2000-01-02 is a Ji day, so its Zi hour is Jia Zi
    assert hour_pillar(datetime(2000, 1, 1, 23, 30)).ganzhi == "甲子"
    assert hour_pillar(datetime(2000, 1, 1, 0, 30)).ganzhi == "壬子"


def test_resolve_with_solar_time():
    pillars = resolve(1990, 1, 1, 12, 0, longitude=116.4)
    assert [p.ganzhi for p in pillars] == ["己巳", "丙子", "丙寅", "甲午"]
    assert [p.position for p in pillars] == ["year", "month", "day", "hour"]


def test_li_chun_switches_year_and_month():
    before = resolve(2024, 2, 4, 10, 0)
    after = resolve(2024, 2, 4, 20, 0)
    assert before[0].ganzhi == "癸卯"
    assert before[1].ganzhi == "乙丑"
    assert after[0].ganzhi == "甲辰"
    assert after[1].ganzhi == "丙寅"


def test_nonexistent_date_raises():
    with pytest.raises(CalendarResolutionError):
        resolve(2023, 2, 30, 12, 0)


def test_utc_offset_for_china_summer_time():
    clock_offset, standard_offset, dst = utc_offset_for("Asia/Shanghai", datetime(1988, 7, 1, 13, 30))
    assert (clock_offset, standard_offset, dst) == (9.0, 8.0, True)


def test_dst_hour_is_stripped_before_hour_pillar():
    # 13:30 on a summer-time clock is 12:30 standard time
    fixed = resolve(1988, 7, 1, 13, 30)
    zoned = resolve(1988, 7, 1, 13, 30, timezone="Asia/Shanghai")
    assert fixed[3].branch.chinese == "未"
    assert zoned[3].branch.chinese == "午"
    assert zoned[2].ganzhi == fixed[2].ganzhi


def test_unknown_timezone_raises():
    with pytest.raises(CalendarResolutionError):
        resolve(2000, 1, 1, 12, 0, timezone="Mars/Olympus_Mons")


@pytest.mark.parametrize("year,month,day,hour,utc_offset", [
    (1, 1, 1, 0, 8.0),
    (9999, 12, 31, 20, -8.0),
    # the late Rat hour reads the stem of a day past 9999-12-31
    (9999, 12, 31, 23, 8.0),
])
def test_moments_at_datetime_limits_raise_calendar_error(year, month, day, hour, utc_offset):
    with pytest.raises(CalendarResolutionError):
        resolve(year, month, day, hour, 0, utc_offset=utc_offset)
