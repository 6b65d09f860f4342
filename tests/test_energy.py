import pytest

from bazi_mbti.bazi import Element
from bazi_mbti.energy import (
    compute_energy,
    flow_rule,
    peer_share,
    profile,
    safe_percent,
    season_multipliers,
)
from bazi_mbti.interactions import detect_bureau, resolve_interactions
from bazi_mbti.params import FlowRule


def _energy(chart):
    bureau = detect_bureau(chart)
    return compute_energy(chart, bureau, resolve_interactions(chart, bureau))


def test_safe_percent_zero_total():
    assert safe_percent(5.0, 0.0) == 0.0
    assert safe_percent(1.0, 4.0) == 25.0


def test_season_ring_for_wood():
    ring = season_multipliers(Element.WOOD)
    assert ring == {
        Element.WOOD: 1.5,
        Element.FIRE: 1.2,
        Element.EARTH: 0.7,
        Element.METAL: 0.8,
        Element.WATER: 0.9,
    }


def test_month_pillar_uses_its_own_flow_rules():
    assert flow_rule(Element.WOOD, Element.WATER, False) == ("branch_produces_stem", FlowRule(1.2, 0.9))
    assert flow_rule(Element.WOOD, Element.WATER, True) == ("branch_produces_stem", FlowRule(1.2, 1.0))
    assert flow_rule(Element.WOOD, Element.METAL, True)[0] == "branch_controls_stem"


def test_single_element_chart(make_chart):
    table = _energy(make_chart("甲甲甲甲", "寅寅寅寅"))
    assert table.scores["甲"] == pytest.approx(1410.75)
    # hidden only, so discounted
    assert table.scores["丙"] == pytest.approx(118.08)
    assert table.scores["戊"] == pytest.approx(34.44)
    assert table.scores["癸"] == 0.0
    assert table.total == pytest.approx(1563.27)
    assert table.temperature == pytest.approx(2306.19)
    assert list(table.scores) == list("甲乙丙丁戊己庚辛壬癸")


def test_rootless_stem_is_dampened(make_chart):
    table = _energy(make_chart("庚甲甲甲", "寅寅寅寅"))
    rootless = [r for r in table.records if r.kind == "rootless"]
    assert [r.positions for r in rootless] == [(0,)]


def test_bureau_branches_split_into_bureau_stems(make_chart):
    table = _energy(make_chart("甲乙戊丁", "寅卯辰寅"))
    for fragments in table.branch_scores:
        assert set(fragments) == {"甲", "乙"}
        assert fragments["甲"] == pytest.approx(fragments["乙"])
    rootless = {r.positions[0] for r in table.records if r.kind == "rootless"}
    assert rootless == {2, 3}


def test_energy_table_not_shared_between_calls(make_chart):
    chart = make_chart("甲乙丙丁", "子丑寅卯")
    first = _energy(chart)
    second = _energy(chart)
    assert first.scores == second.scores
    assert first.scores is not second.scores


def test_profile_shares(make_chart):
    chart = make_chart("甲甲甲甲", "寅寅寅寅")
    table = _energy(chart)
    summary = profile(table, chart)
    assert sum(summary.element_share.values()) == pytest.approx(100.0)
    assert sum(summary.stem_share.values()) == pytest.approx(100.0)
    assert summary.climate_level == "燥"
    assert summary.max_element_energy == pytest.approx(1410.75)
    assert peer_share(table, chart.day_master) == pytest.approx(1410.75 / 1563.27 * 100)
