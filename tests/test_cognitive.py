import pytest

from bazi_mbti.bazi import HEAVENLY_STEMS, TenGod
from bazi_mbti.cognitive import (
    LATENT,
    MBTI_STACKS,
    MIXED,
    StemBreakdown,
    _attributed_stem,
    label_for,
    map_cognitive_functions,
    ten_god_weights,
)
from bazi_mbti.energy import EnergyTable, compute_energy, peer_share
from bazi_mbti.interactions import detect_bureau, resolve_interactions
from bazi_mbti.params import DEFAULT_PARAMS, FUNCTIONS
from bazi_mbti.pattern import classify_pattern


def _profile(chart):
    bureau = detect_bureau(chart)
    interactions = resolve_interactions(chart, bureau)
    table = compute_energy(chart, bureau, interactions)
    return map_cognitive_functions(
        chart, table, bureau, interactions, classify_pattern(chart, bureau),
        peer_share(table, chart.day_master),
    )


def _functions(**values):
    base = {f: 1.0 for f in FUNCTIONS}
    base.update(values)
    return base


def test_every_function_leads_two_stacks():
    leads = [stack[0] for stack in MBTI_STACKS.values()]
    assert sorted(leads) == sorted(FUNCTIONS * 2)


def test_label_picks_auxiliary_by_energy():
    assert label_for(_functions(Ni=30.0, Te=20.0, Fe=10.0)) == "INTJ"
    assert label_for(_functions(Ni=30.0, Te=10.0, Fe=20.0)) == "INFJ"
    assert label_for(_functions(Se=30.0, Fi=20.0, Ti=10.0)) == "ESFP"


def test_weak_chart_defence_weights():
    cp = DEFAULT_PARAMS.cognitive
    weights = ten_god_weights(TenGod.SEVEN_KILLINGS, 10.0)
    base = cp.ten_god_weights[TenGod.SEVEN_KILLINGS]
    assert weights["Fi"] == pytest.approx(cp.weak_defense_weights["Fi"] + base["Fi"] * cp.weak_defense_mult)
    assert weights["Te"] == pytest.approx(base["Te"] * cp.weak_defense_mult)


def test_strong_chart_attack_weights():
    cp = DEFAULT_PARAMS.cognitive
    weights = ten_god_weights(TenGod.ROB_WEALTH, 98.0)
    base = cp.ten_god_weights[TenGod.ROB_WEALTH]
    assert weights["Te"] == pytest.approx(base["Te"] * cp.strong_attack_mult)


def test_mid_range_uses_plain_weights():
    cp = DEFAULT_PARAMS.cognitive
    assert ten_god_weights(TenGod.SEVEN_KILLINGS, 50.0) == cp.ten_god_weights[TenGod.SEVEN_KILLINGS]


def test_profile_normalised(make_chart):
    profile = _profile(make_chart("甲乙丙丁", "子丑寅卯"))
    assert sum(profile.functions.values()) == pytest.approx(100.0)
    assert profile.label in MBTI_STACKS
    assert MBTI_STACKS[profile.label][0] == profile.dominant
    assert sum(b.pct for b in profile.stems) == pytest.approx(100.0)
    assert sum(profile.ten_god_distribution.values()) == pytest.approx(100.0)


def test_attributed_stems_are_present_or_mixed(make_chart):
    profile = _profile(make_chart("甲甲甲甲", "寅寅寅寅"))
    present = {b.stem for b in profile.stems}
    assert profile.dominant_stem in present | {MIXED}
    assert profile.auxiliary_stem in present | {MIXED}


def test_bureau_stems_relabelled_and_latent(make_chart):
    profile = _profile(make_chart("甲乙戊丁", "寅卯辰寅"))
    by_stem = {b.stem: b for b in profile.stems}
    assert by_stem["乙"].ten_god == TenGod.SEVEN_KILLINGS
    assert by_stem["乙"].mode == LATENT
    assert by_stem["甲"].mode == LATENT
    assert by_stem["戊"].ten_god == TenGod.COMPANION


def test_full_clash_lifts_ne(make_chart):
    clashing = _profile(make_chart("甲乙丙丁", "子午子午"))
    assert clashing.functions["Ne"] > 0
    assert sum(clashing.functions.values()) == pytest.approx(100.0)


def test_attributed_stem_prefers_energy_then_cycle_order():
    scores = {s.chinese: 0.0 for s in HEAVENLY_STEMS}
    scores.update({"甲": 10.0, "乙": 30.0, "丙": 30.0})
    table = EnergyTable(scores=scores, total=70.0, temperature=0.0,
                        stem_scores=(), branch_scores=(), records=())
    breakdown = [StemBreakdown(stem, 0.0, TenGod.COMPANION, "显化", "Ne", 0.0)
                 for stem in ("丙", "甲", "乙")]
    assert _attributed_stem("Ne", breakdown, table) == "乙"
    assert _attributed_stem("Ti", breakdown, table) == MIXED
