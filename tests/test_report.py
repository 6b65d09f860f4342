import pytest

from bazi_mbti import ChartInput, EngineParams, analyze_chart, classical_annotations
from bazi_mbti.cognitive import MBTI_STACKS


def test_direct_mode_report():
    result = analyze_chart(ChartInput.from_pillars(list("甲乙丙丁"), list("子丑寅卯"))).to_dict()
    assert result["mbti_label"] in MBTI_STACKS
    assert sum(result["function_distribution"].values()) == pytest.approx(100.0)
    assert set(result["per_stem_breakdown"]) == set("甲乙丙丁戊己庚辛壬癸")
    assert sum(s["pct"] for s in result["per_stem_breakdown"].values()) == pytest.approx(100.0)
    assert result["season"] == "月令丑"
    assert result["params_version"] == "2025.1"


def test_date_mode_report():
    analysis = analyze_chart(ChartInput.from_date(1990, 1, 1, 12, 0, longitude=116.4))
    result = analysis.to_dict()
    assert result["mbti_label"] in MBTI_STACKS
    assert sum(result["function_distribution"].values()) == pytest.approx(100.0)
    assert result["pillars"]["day"] == {"stem": "丙", "branch": "寅"}


def test_same_chart_same_report():
    request = ChartInput.from_pillars(list("庚辛壬癸"), list("申酉戌亥"))
    assert analyze_chart(request).to_dict() == analyze_chart(request).to_dict()


def test_date_and_direct_modes_agree():
    dated = analyze_chart(ChartInput.from_date(1990, 1, 1, 12, 0, longitude=116.4))
    direct = analyze_chart(ChartInput.from_pillars(
        [s.chinese for s in dated.chart.stems],
        [b.chinese for b in dated.chart.branches],
    ))
    assert direct.classification.pattern == dated.classification.pattern
    assert direct.classification.strength.tier == dated.classification.strength.tier
    assert direct.cognitive.label == dated.cognitive.label


def test_extreme_dominant_report():
    result = analyze_chart(ChartInput.from_pillars(list("甲甲甲甲"), list("寅寅寅寅"))).to_dict()
    assert result["pattern"] == "建禄格"
    assert result["strength_tier"] == "专旺"
    assert result["is_strong"] is True
    assert result["useful_god"] == "丙"
    assert result["climate_god"] == "无"
    assert result["per_stem_breakdown"]["癸"]["pct"] == 0.0


def test_full_clash_compensation_reported():
    result = analyze_chart(ChartInput.from_pillars(list("甲乙丙丁"), list("子午子午"))).to_dict()
    assert result["compensation"]["ne"] == 130
    kinds = {r["kind"] for r in result["interaction_trace"]}
    assert {"clash", "full_clash", "flow"} <= kinds


def test_custom_params_version():
    params = EngineParams(version="experimental")
    analysis = analyze_chart(ChartInput.from_pillars(list("甲乙丙丁"), list("子丑寅卯")), params)
    assert analysis.to_dict()["params_version"] == "experimental"


def test_classical_annotations_from_request():
    record = classical_annotations(ChartInput.from_pillars(list("甲乙丙丁"), list("子丑寅卯")))
    assert record.to_dict()["nayin"]["year"] == "海中金"
