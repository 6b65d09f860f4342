import pytest

from bazi_mbti.bazi import BRANCH_BY_CHINESE, STEM_BY_CHINESE
from bazi_mbti.classical import (
    ShenShaContext,
    build_annotations,
    life_cycle,
    nayin,
    self_seat,
    shen_sha,
    void_pair,
)


def _pair(ganzhi):
    return STEM_BY_CHINESE[ganzhi[0]], BRANCH_BY_CHINESE[ganzhi[1]]


@pytest.mark.parametrize(
    "ganzhi, void",
    [("甲子", ("戌", "亥")), ("甲戌", ("申", "酉")), ("癸亥", ("子", "丑"))],
)
def test_void_pair(ganzhi, void):
    assert void_pair(*_pair(ganzhi)) == void


@pytest.mark.parametrize(
    "ganzhi, name",
    [("甲子", "海中金"), ("乙丑", "海中金"), ("丙寅", "炉中火"), ("癸亥", "大海水")],
)
def test_nayin(ganzhi, name):
    assert nayin(*_pair(ganzhi)) == name


def test_mixed_polarity_pair_has_no_nayin():
    assert nayin(*_pair("甲丑")) is None
    assert void_pair(*_pair("甲丑")) is None


@pytest.mark.parametrize(
    "stem, branch, stage",
    [
        ("甲", "亥", "长生"),
        ("甲", "午", "死"),
        ("乙", "午", "长生"),
        ("乙", "亥", "死"),
        ("丙", "巳", "临官"),
        ("庚", "申", "临官"),
        ("辛", "酉", "临官"),
        ("癸", "卯", "长生"),
    ],
)
def test_life_cycle(stem, branch, stage):
    assert life_cycle(STEM_BY_CHINESE[stem], BRANCH_BY_CHINESE[branch]) == stage


def test_self_seat():
    assert self_seat(BRANCH_BY_CHINESE["寅"]) == "长生"
    assert self_seat(BRANCH_BY_CHINESE["戌"]) == "墓"


def _context(position, **overrides):
    values = dict(position=position, stem="庚", branch="辰", day_stem="庚",
                  month_branch="子", year_branch="子", day_branch="辰", year_stem="甲")
    values.update(overrides)
    return ShenShaContext(**values)


def test_day_only_stars_fire_on_day_pillar():
    assert [h.name for h in shen_sha(_context("day"))] == ["魁罡格", "国印贵人", "华盖"]


def test_day_only_stars_skip_other_pillars():
    assert [h.name for h in shen_sha(_context("year"))] == ["国印贵人", "华盖"]


def test_audit_reason_names_base_branch():
    hits = {h.name: h.reason for h in shen_sha(_context("day"))}
    assert hits["华盖"] == "子支查华盖"
    assert hits["魁罡格"] == "限日柱"


def test_noble_reported_once():
    ctx = _context("hour", stem="乙", branch="丑", day_stem="甲", month_branch="寅",
                   year_branch="寅", day_branch="午", year_stem="戊")
    hits = [h for h in shen_sha(ctx) if h.name == "天乙贵人"]
    assert len(hits) == 1
    assert hits[0].reason == "日干甲查天乙贵人"


def test_annotations_record(make_chart):
    record = build_annotations(make_chart("甲乙丙丁", "子丑寅卯"))
    assert record.nayin == {"year": "海中金", "month": "海中金", "day": "炉中火", "hour": "炉中火"}
    assert record.ten_gods["stems"] == {"year": "偏印", "month": "正印", "day": "比肩", "hour": "劫财"}
    assert [h["stem"] for h in record.hidden["month"]] == ["己", "癸", "辛"]
    assert sum(h["proportion"] for h in record.hidden["month"]) == pytest.approx(1.0)
    assert set(record.void.values()) == {("戌", "亥")}
    assert record.life_cycle["year"] == {"branch": "子", "stage": "胎"}
    assert record.life_cycle["day"] == {"branch": "寅", "stage": "长生"}
    assert record.self_seat["hour"] == {"branch": "卯", "stage": "帝旺"}

    as_dict = record.to_dict()
    assert as_dict["day_master"] == {"stem": "丙", "element": "火", "ten_god": "比肩"}
    assert as_dict["void"]["day"] == ["戌", "亥"]
    assert set(as_dict["shen_sha_audit"]) == {"year", "month", "day", "hour"}


def test_repeated_branches_keep_their_own_entries(make_chart):
    record = build_annotations(make_chart("甲丙戊庚", "午午午午"))
    assert set(record.life_cycle) == {"year", "month", "day", "hour"}
    assert {entry["branch"] for entry in record.life_cycle.values()} == {"午"}
    assert record.life_cycle["day"]["stage"] == "帝旺"


def test_si_hidden_stems_in_classical_order(make_chart):
    record = build_annotations(make_chart("甲己丙丁", "子巳寅卯"))
    assert [h["stem"] for h in record.hidden["month"]] == ["丙", "庚", "戊"]
    assert [h["proportion"] for h in record.hidden["month"]] == [0.7, 0.1, 0.2]
