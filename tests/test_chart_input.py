import pytest
from pydantic import ValidationError

from bazi_mbti.astro_calendar import CalendarResolutionError
from bazi_mbti.bazi import Chart
from bazi_mbti.chart_input import ChartInput, DateInput, DirectInput, build_chart


def test_direct_mode_accepts_pinyin():
    request = ChartInput.from_pillars(["Jia", "Yi", "Bing", "Ding"], ["Zi", "Chou", "Yin", "Mao"])
    assert request.mode == "direct"
    assert request.direct.gans == ["甲", "乙", "丙", "丁"]
    assert request.direct.zhis == ["子", "丑", "寅", "卯"]


def test_three_stems_rejected():
    with pytest.raises(ValidationError):
        ChartInput.from_pillars(["甲", "乙", "丙"], ["子", "丑", "寅", "卯"])


def test_unknown_branch_rejected():
    with pytest.raises(ValidationError):
        DirectInput(gans=["甲", "乙", "丙", "丁"], zhis=["子", "丑", "寅", "X"])


def test_exactly_one_mode_required():
    with pytest.raises(ValidationError):
        ChartInput()
    with pytest.raises(ValidationError):
        ChartInput(
            date=DateInput(year=2000, month=1, day=1, hour=12),
            direct=DirectInput(gans=list("甲乙丙丁"), zhis=list("子丑寅卯")),
        )


def test_out_of_range_fields_rejected():
    with pytest.raises(ValidationError):
        DateInput(year=2000, month=13, day=1, hour=12)
    with pytest.raises(ValidationError):
        DateInput(year=2000, month=1, day=1, hour=12, longitude=200.0)
    with pytest.raises(ValidationError):
        DateInput(year=2000, month=1, day=1, hour=12, utc_offset=1e9)


def test_date_mode_builds_four_pillars():
    chart = build_chart(ChartInput.from_date(1990, 1, 1, 12, 0, longitude=116.4))
    assert [p.ganzhi for p in chart.pillars] == ["己巳", "丙子", "丙寅", "甲午"]


def test_impossible_date_raises_calendar_error():
    request = ChartInput.from_date(2023, 2, 30, 12)
    with pytest.raises(CalendarResolutionError):
        build_chart(request)


def test_chart_passes_through(make_chart):
    chart = make_chart("甲乙丙丁", "子丑寅卯")
    assert isinstance(chart, Chart)
    assert build_chart(chart) is chart


def test_limit_date_reports_calendar_error():
    request = ChartInput.from_date(9999, 12, 31, 20, utc_offset=-8.0)
    with pytest.raises(CalendarResolutionError):
        build_chart(request)
