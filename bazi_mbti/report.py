"""
Report assembly.

Runs the full pipeline for one request and packages the results:

    chart analysis       analyze_chart(request)        -> ChartAnalysis
    classical annotations classical_annotations(request) -> ClassicalAnnotations

Both accept a ChartInput (date or direct mode) or an already built Chart.
"""

import logging
from dataclasses import dataclass
from typing import Union

from bazi_mbti.bazi import HEAVENLY_STEMS, Chart, ten_god
from bazi_mbti.chart_input import ChartInput, build_chart
from bazi_mbti.classical import ClassicalAnnotations, build_annotations
from bazi_mbti.cognitive import LATENT, CognitiveProfile, map_cognitive_functions
from bazi_mbti.energy import EnergyProfile, EnergyTable, compute_energy, profile
from bazi_mbti.interactions import Bureau, InteractionResult, detect_bureau, resolve_interactions
from bazi_mbti.params import DEFAULT_PARAMS, EngineParams
from bazi_mbti.pattern import Classification, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartAnalysis:
    chart: Chart
    bureau: Bureau
    interactions: InteractionResult
    energy: EnergyTable
    energy_profile: EnergyProfile
    classification: Classification
    cognitive: CognitiveProfile
    params_version: str

    def per_stem_breakdown(self) -> dict:
        """All ten stems; stems with no energy report zero."""
        dm = self.chart.day_master
        present = {b.stem: b.to_dict() for b in self.cognitive.stems}
        result = {}
        for stem in HEAVENLY_STEMS:
            result[stem.chinese] = present.get(stem.chinese) or {
                "pct": 0.0,
                "ten_god": ten_god(dm, stem).value,
                "mode": LATENT,
                "function": None,
                "contribution": 0.0,
            }
        return result

    def to_dict(self):
        c = self.classification
        decision = c.useful_god.to_dict()
        return {
            "pillars": self.chart.to_dict(),
            "mbti_label": self.cognitive.label,
            "dominant_function": self.cognitive.dominant,
            "auxiliary_function": self.cognitive.auxiliary,
            "inferior_function": self.cognitive.inferior,
            "dominant_stem": self.cognitive.dominant_stem,
            "auxiliary_stem": self.cognitive.auxiliary_stem,
            "pattern": c.pattern.name,
            "strength_tier": c.strength.tier.value,
            "is_strong": c.strength.is_strong,
            "peer_share_percent": c.strength.peer_share,
            "climate_god": decision["climate_god"],
            "useful_god": decision["useful_god"],
            "useful_god_decision": decision,
            "ten_god_distribution": self.cognitive.ten_god_distribution,
            "function_distribution": self.cognitive.functions,
            "per_stem_breakdown": self.per_stem_breakdown(),
            "season": self.bureau.source,
            "energy_profile": self.energy_profile.to_dict(),
            "interaction_trace": [r.to_dict() for r in
                                  self.interactions.records + self.energy.records],
            "compensation": {
                "ne": self.interactions.ne_compensation,
                "ni": self.interactions.ni_compensation,
            },
            "params_version": self.params_version,
        }


def analyze_chart(request: Union[ChartInput, Chart],
                  params: EngineParams = DEFAULT_PARAMS) -> ChartAnalysis:
    """
    Full inference for one chart.

    Args:
        request: ChartInput in date or direct mode, or a built Chart
        params: tuning parameters

    Returns:
        ChartAnalysis

    Raises:
        CalendarResolutionError: a date-mode request cannot be resolved
    """
    chart = build_chart(request)
    bureau = detect_bureau(chart)
    interactions = resolve_interactions(chart, bureau, params)
    table = compute_energy(chart, bureau, interactions, params)
    classification = classify(chart, bureau, table, params)
    cognitive = map_cognitive_functions(
        chart, table, bureau, interactions, classification.pattern,
        classification.strength.peer_share, params,
    )
    logger.info("analysed %s: %s, %s, %s",
                " ".join(p.ganzhi for p in chart.pillars),
                classification.pattern.name, classification.strength.tier.value,
                cognitive.label)
    return ChartAnalysis(
        chart=chart,
        bureau=bureau,
        interactions=interactions,
        energy=table,
        energy_profile=profile(table, chart, params),
        classification=classification,
        cognitive=cognitive,
        params_version=params.version,
    )


def classical_annotations(request: Union[ChartInput, Chart]) -> ClassicalAnnotations:
    """Classical annotation record for one chart."""
    return build_annotations(build_chart(request))
