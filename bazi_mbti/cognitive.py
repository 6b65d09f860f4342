"""
Cognitive-function projection.

Projects the baseline stem energies onto the eight cognitive functions
(Te, Ti, Fe, Fi, Se, Si, Ne, Ni) through two weighted streams:

- physical: each stem's share times its own function weights
- social: the same share routed through the stem's Ten God weights,
  boosted when that Ten God is the one the pattern is named after

Clash and combination compensation is added to Ne and Ni, the buckets are
normalised to 100 and the dominant bucket picks one of sixteen function
stacks.
"""

import logging
from dataclasses import dataclass

from bazi_mbti.bazi import HEAVENLY_STEMS, STEM_BY_CHINESE, Chart, TenGod, ten_god
from bazi_mbti.energy import EnergyTable, safe_percent
from bazi_mbti.interactions import Bureau, InteractionResult
from bazi_mbti.params import DEFAULT_PARAMS, FUNCTIONS, EngineParams
from bazi_mbti.pattern import Pattern

logger = logging.getLogger(__name__)

MIXED = "混合"
MANIFEST = "显化"
LATENT = "潜藏"

MBTI_STACKS = {
    "INTJ": ("Ni", "Te", "Fi", "Se"),
    "INFJ": ("Ni", "Fe", "Ti", "Se"),
    "ENTJ": ("Te", "Ni", "Se", "Fi"),
    "ENFJ": ("Fe", "Ni", "Se", "Ti"),
    "ISTJ": ("Si", "Te", "Fi", "Ne"),
    "ISFJ": ("Si", "Fe", "Ti", "Ne"),
    "ESTJ": ("Te", "Si", "Ne", "Fi"),
    "ESFJ": ("Fe", "Si", "Ne", "Ti"),
    "INTP": ("Ti", "Ne", "Si", "Fe"),
    "ISTP": ("Ti", "Se", "Ni", "Fe"),
    "ENTP": ("Ne", "Ti", "Fe", "Si"),
    "ESTP": ("Se", "Ti", "Fe", "Si"),
    "INFP": ("Fi", "Ne", "Si", "Te"),
    "ISFP": ("Fi", "Se", "Ni", "Te"),
    "ENFP": ("Ne", "Fi", "Te", "Si"),
    "ESFP": ("Se", "Fi", "Te", "Si"),
}

# Ten God relabelling for stems absorbed by a bureau
BUREAU_RELABEL = {
    TenGod.DIRECT_OFFICER: TenGod.SEVEN_KILLINGS,
    TenGod.SEVEN_KILLINGS: TenGod.SEVEN_KILLINGS,
    TenGod.DIRECT_RESOURCE: TenGod.INDIRECT_RESOURCE,
    TenGod.INDIRECT_RESOURCE: TenGod.INDIRECT_RESOURCE,
    TenGod.EATING_GOD: TenGod.HURTING_OFFICER,
    TenGod.HURTING_OFFICER: TenGod.HURTING_OFFICER,
}

WEAK_DEFENSE_GODS = (TenGod.SEVEN_KILLINGS, TenGod.HURTING_OFFICER)
STRONG_ATTACK_GODS = (TenGod.INDIRECT_RESOURCE, TenGod.ROB_WEALTH)


@dataclass(frozen=True)
class StemBreakdown:
    stem: str
    pct: float            # share of the mapper's weighted energy
    ten_god: TenGod
    mode: str             # 显化 / 潜藏
    function: str         # strongest function in the stem's own weights
    contribution: float

    def to_dict(self):
        return {
            "pct": self.pct,
            "ten_god": self.ten_god.value,
            "mode": self.mode,
            "function": self.function,
            "contribution": self.contribution,
        }


@dataclass(frozen=True)
class CognitiveProfile:
    functions: dict       # function -> percent, sums to 100 or all zero
    label: str
    dominant: str
    auxiliary: str
    inferior: str
    dominant_stem: str
    auxiliary_stem: str
    stems: tuple          # StemBreakdown per stem with positive energy
    ten_god_distribution: dict

    def to_dict(self):
        return {
            "label": self.label,
            "dominant": self.dominant,
            "auxiliary": self.auxiliary,
            "inferior": self.inferior,
            "dominant_stem": self.dominant_stem,
            "auxiliary_stem": self.auxiliary_stem,
            "functions": self.functions,
            "ten_god_distribution": self.ten_god_distribution,
            "stems": {b.stem: b.to_dict() for b in self.stems},
        }


def display_modes(table: EnergyTable, params: EngineParams = DEFAULT_PARAMS) -> dict:
    """Manifest/latent mode per stem from its baseline share."""
    cp = params.cognitive
    dominant = max(HEAVENLY_STEMS, key=lambda s: (table.scores[s.chinese], -s.index)).chinese
    modes = {}
    for s, value in table.scores.items():
        pct = safe_percent(value, table.total)
        if s == dominant:
            modes[s] = MANIFEST
        elif pct < cp.latent_below:
            modes[s] = LATENT
        else:
            modes[s] = MANIFEST if pct >= cp.manifest_from else LATENT
    return modes


def ten_god_weights(god: TenGod, peer_share: float,
                    params: EngineParams = DEFAULT_PARAMS) -> dict:
    """Function weights for a Ten God, with the weak/strong substitutions."""
    cp = params.cognitive
    base = cp.ten_god_weights[god]
    if peer_share < cp.weak_defense_threshold and god in WEAK_DEFENSE_GODS:
        weights = dict(cp.weak_defense_weights)
        for f, w in base.items():
            weights[f] = weights.get(f, 0.0) + w * cp.weak_defense_mult
        return weights
    if peer_share > cp.strong_attack_threshold and god in STRONG_ATTACK_GODS:
        weights = dict(cp.strong_attack_weights)
        for f, w in base.items():
            weights[f] = weights.get(f, 0.0) + w * cp.strong_attack_mult
        return weights
    return dict(base)


def label_for(functions: dict) -> str:
    dominant = max(FUNCTIONS, key=lambda f: (functions[f], -FUNCTIONS.index(f)))
    candidates = [name for name, stack in MBTI_STACKS.items() if stack[0] == dominant]
    candidates.sort(key=lambda name: -functions[MBTI_STACKS[name][1]])
    return candidates[0]


def _attributed_stem(function: str, breakdown: list, table: EnergyTable) -> str:
    matches = [b for b in breakdown if b.function == function]
    if not matches:
        return MIXED
    return max(matches, key=lambda b: (table.scores[b.stem], -STEM_BY_CHINESE[b.stem].index)).stem


def map_cognitive_functions(chart: Chart, table: EnergyTable, bureau: Bureau,
                            interactions: InteractionResult, pattern: Pattern,
                            peer_share: float,
                            params: EngineParams = DEFAULT_PARAMS) -> CognitiveProfile:
    """
    Project baseline energies onto the eight cognitive functions.

    Args:
        chart: the four-pillar chart
        table: baseline energy table (no Day Master amplification)
        bureau: bureau result; bureau-element stems are forced latent and
            relabelled
        interactions: supplies the Ne/Ni compensation totals
        pattern: the classified pattern; its Ten God gets the social boost
        peer_share: peer + seal share of the baseline table
        params: tuning parameters

    Returns:
        CognitiveProfile
    """
    cp = params.cognitive
    dm = chart.day_master
    modes = display_modes(table, params)
    pattern_god = pattern.base.ten_god

    weighted = {s: v * cp.day_master_mult if s == dm.chinese else v
                for s, v in table.scores.items()}
    weighted_total = sum(weighted.values())

    functions = {f: 0.0 for f in FUNCTIONS}
    breakdown = []
    for stem in HEAVENLY_STEMS:
        value = weighted[stem.chinese]
        if value <= 0:
            continue
        pct = safe_percent(value, weighted_total)

        god = ten_god(dm, stem)
        transformed = bureau.is_bureau and stem.element == bureau.element
        if transformed:
            god = BUREAU_RELABEL.get(god, god)
            mode = LATENT
        else:
            mode = modes[stem.chinese]

        social_weights = ten_god_weights(god, peer_share, params)
        social_base = max(pct, cp.activation_base) * cp.pattern_mult if god == pattern_god else pct
        stem_weights = cp.stem_weights[stem.chinese]

        for f, w in stem_weights.items():
            functions[f] += pct * cp.phys_contribution_ratio * w
        for f, w in social_weights.items():
            functions[f] += social_base * cp.social_contribution_ratio * w

        breakdown.append(StemBreakdown(
            stem=stem.chinese,
            pct=pct,
            ten_god=god,
            mode=mode,
            function=max(FUNCTIONS, key=lambda f: (stem_weights[f], -FUNCTIONS.index(f))),
            contribution=pct * cp.phys_contribution_ratio + social_base * cp.social_contribution_ratio,
        ))

    functions["Ne"] += interactions.ne_compensation
    functions["Ni"] += interactions.ni_compensation
    total = sum(functions.values())
    functions = {f: safe_percent(v, total) for f, v in functions.items()}

    label = label_for(functions)
    stack = MBTI_STACKS[label]

    ten_gods = {}
    for b in breakdown:
        ten_gods[b.ten_god.value] = ten_gods.get(b.ten_god.value, 0.0) + b.pct

    profile = CognitiveProfile(
        functions=functions,
        label=label,
        dominant=stack[0],
        auxiliary=stack[1],
        inferior=stack[3],
        dominant_stem=_attributed_stem(stack[0], breakdown, table),
        auxiliary_stem=_attributed_stem(stack[1], breakdown, table),
        stems=tuple(breakdown),
        ten_god_distribution=ten_gods,
    )
    logger.debug("cognitive label %s (dominant %s via %s)", label, profile.dominant,
                 profile.dominant_stem)
    return profile
