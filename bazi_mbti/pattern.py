"""
Pattern (格局), strength and useful-god (用神) classification.

Handles:
- Pattern naming from the bureau, a revealed month hidden stem, or the
  month main qi
- Five strength tiers from the peer + seal energy share
- Climate god (调候) and balance god (扶抑) selection and arbitration
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bazi_mbti.bazi import (
    HEAVENLY_STEMS,
    PRODUCTION_CYCLE,
    CONTROL_CYCLE,
    Chart,
    Element,
    GodCategory,
    TenGod,
    hidden_stems,
    main_qi,
    ten_god,
)
from bazi_mbti.energy import EnergyTable, element_energy, peer_share, safe_percent
from bazi_mbti.interactions import Bureau
from bazi_mbti.params import DEFAULT_PARAMS, EngineParams

logger = logging.getLogger(__name__)

NONE_LABEL = "无"


# ============================================================
# PATTERN CLASSIFICATION
# ============================================================

class PatternBase(Enum):
    DIRECT_OFFICER = "正官"
    SEVEN_KILLINGS = "七杀"
    DIRECT_RESOURCE = "正印"
    INDIRECT_RESOURCE = "偏印"
    EATING_GOD = "食神"
    HURTING_OFFICER = "伤官"
    DIRECT_WEALTH = "正财"
    INDIRECT_WEALTH = "偏财"
    ESTABLISHED = "建禄"
    MONTH_ROBBERY = "月劫"

    @property
    def ten_god(self) -> Optional[TenGod]:
        """The Ten God the pattern is named after; None for peer patterns."""
        if self in (PatternBase.ESTABLISHED, PatternBase.MONTH_ROBBERY):
            return None
        return TenGod(self.value)


def pattern_base_for(god: TenGod) -> PatternBase:
    if god == TenGod.COMPANION:
        return PatternBase.ESTABLISHED
    if god == TenGod.ROB_WEALTH:
        return PatternBase.MONTH_ROBBERY
    return PatternBase(god.value)


_P = GodCategory.PEER
_O = GodCategory.OUTPUT
_W = GodCategory.WEALTH
_K = GodCategory.OFFICER
_S = GodCategory.SEAL

# base -> {is_strong: (preferred categories, taboo categories)}
PATTERN_RULES = {
    PatternBase.DIRECT_OFFICER: {True: ((_W, _O), (_S,)), False: ((_S, _P), (_W, _O))},
    PatternBase.SEVEN_KILLINGS: {True: ((_O, _S), (_W,)), False: ((_S, _P), (_W, _O))},
    PatternBase.DIRECT_RESOURCE: {True: ((_W, _O), (_S, _P)), False: ((_K, _P), (_W,))},
    PatternBase.INDIRECT_RESOURCE: {True: ((_W, _O), (_S,)), False: ((_P, _K), (_O,))},
    PatternBase.EATING_GOD: {True: ((_W, _K), (_S,)), False: ((_S, _P), (_W, _O))},
    PatternBase.HURTING_OFFICER: {True: ((_W, _S), (_K,)), False: ((_S, _P), (_K, _W))},
    PatternBase.DIRECT_WEALTH: {True: ((_O, _K), (_P,)), False: ((_P, _S), (_O, _W))},
    PatternBase.INDIRECT_WEALTH: {True: ((_O, _K), (_P,)), False: ((_P, _S), (_O, _W))},
    PatternBase.ESTABLISHED: {True: ((_K, _W, _O), (_S,)), False: ((_S, _P), (_K, _O))},
    PatternBase.MONTH_ROBBERY: {True: ((_K, _W, _O), (_S,)), False: ((_S, _P), (_K, _W))},
}


@dataclass(frozen=True)
class Pattern:
    name: str
    base: PatternBase
    source: str  # "bureau", "revealed", "main_qi"


def _bureau_god(day_master_element: Element, bureau_element: Element) -> TenGod:
    if PRODUCTION_CYCLE[day_master_element] == bureau_element:
        return TenGod.HURTING_OFFICER
    if PRODUCTION_CYCLE[bureau_element] == day_master_element:
        return TenGod.INDIRECT_RESOURCE
    if CONTROL_CYCLE[day_master_element] == bureau_element:
        return TenGod.INDIRECT_WEALTH
    if CONTROL_CYCLE[bureau_element] == day_master_element:
        return TenGod.SEVEN_KILLINGS
    return TenGod.ROB_WEALTH


def classify_pattern(chart: Chart, bureau: Bureau) -> Pattern:
    """
    Name the governing pattern of the chart.

    A bureau decides the pattern by its element's relation to the Day Master.
    Otherwise the first month hidden stem (by proportion) that is revealed
    among the visible stems and is not a peer names it; failing that, the
    month main qi does.
    """
    dm = chart.day_master

    if bureau.is_bureau:
        base = pattern_base_for(_bureau_god(dm.element, bureau.element))
        return Pattern(f"{bureau.element.chinese}{base.value}局", base, "bureau")

    visible = {s.chinese for s in chart.stems}
    ordered = sorted(hidden_stems(chart.month_branch), key=lambda h: -h.proportion)
    for h in ordered:
        if h.stem.chinese not in visible:
            continue
        god = ten_god(dm, h.stem)
        if god.category != GodCategory.PEER:
            return Pattern(f"{god.value}格", PatternBase(god.value), "revealed")

    god = ten_god(dm, main_qi(chart.month_branch))
    base = pattern_base_for(god)
    if god.category == GodCategory.PEER:
        return Pattern(f"{base.value}格", base, "main_qi")
    return Pattern(f"{base.value}格(月令本气)", base, "main_qi")


# ============================================================
# STRENGTH
# ============================================================

class StrengthTier(Enum):
    EXTREME_DOMINANT = "专旺"
    STRONG = "身强"
    BALANCED_STRONG = "中和偏强"
    BALANCED_WEAK = "中和偏弱"
    EXTREME_WEAK = "身弱"


@dataclass(frozen=True)
class Strength:
    tier: StrengthTier
    is_strong: bool
    peer_share: float


def classify_strength(share: float, params: EngineParams = DEFAULT_PARAMS) -> Strength:
    sp = params.strength
    if share > sp.dominant_above:
        return Strength(StrengthTier.EXTREME_DOMINANT, True, share)
    if share < sp.weak_below:
        return Strength(StrengthTier.EXTREME_WEAK, False, share)
    if share >= sp.strong_from:
        tier = StrengthTier.STRONG
    elif share >= sp.balanced_strong_from:
        tier = StrengthTier.BALANCED_STRONG
    else:
        tier = StrengthTier.BALANCED_WEAK
    return Strength(tier, share >= sp.balanced_strong_from, share)


# ============================================================
# USEFUL GOD
# ============================================================

# Lower is kinder
NICENESS = {
    TenGod.DIRECT_OFFICER: 1,
    TenGod.DIRECT_RESOURCE: 1,
    TenGod.EATING_GOD: 1,
    TenGod.DIRECT_WEALTH: 1,
    TenGod.COMPANION: 2,
    TenGod.INDIRECT_WEALTH: 2,
    TenGod.SEVEN_KILLINGS: 3,
    TenGod.HURTING_OFFICER: 3,
    TenGod.INDIRECT_RESOURCE: 3,
    TenGod.ROB_WEALTH: 3,
}


@dataclass(frozen=True)
class UsefulGodDecision:
    climate_element: Optional[Element]
    climate_god: Optional[str]
    balance_god: Optional[str]
    useful_god: Optional[str]
    rule: str  # "climate", "climate_sufficient" or "balance"
    trace: str

    def to_dict(self):
        return {
            "climate_element": self.climate_element.chinese if self.climate_element else NONE_LABEL,
            "climate_god": self.climate_god or NONE_LABEL,
            "balance_god": self.balance_god or NONE_LABEL,
            "useful_god": self.useful_god or NONE_LABEL,
            "rule": self.rule,
            "trace": self.trace,
        }


def climate_need(chart: Chart, temperature: float,
                 params: EngineParams = DEFAULT_PARAMS) -> Optional[Element]:
    """Water for a hot chart, fire for a cold one, otherwise None."""
    cp = params.climate
    month = chart.month_branch.chinese
    hot = month in cp.hot_branches or (month in cp.warm_borderline
                                       and temperature > cp.borderline_threshold)
    cold = month in cp.cold_branches or (month in cp.cool_borderline
                                         and temperature < -cp.borderline_threshold)
    if hot:
        return Element.WATER
    if cold:
        return Element.FIRE
    return None


def balance_candidates(chart: Chart, table: EnergyTable, pattern: Pattern,
                       strength: Strength) -> list[str]:
    """Ranked balance-god candidates, best first."""
    preferred, taboo = PATTERN_RULES[pattern.base][strength.is_strong]
    if strength.is_strong:
        raw = (GodCategory.OFFICER, GodCategory.OUTPUT, GodCategory.WEALTH)
    else:
        raw = (GodCategory.SEAL, GodCategory.PEER)
    pool = [c for c in raw if c not in taboo] or list(preferred)

    dm = chart.day_master
    ranked = []
    for stem in HEAVENLY_STEMS:
        energy = table.scores[stem.chinese]
        if energy <= 0:
            continue
        god = ten_god(dm, stem)
        if god.category not in pool and god.category not in preferred:
            continue
        is_pref = god.category in preferred
        ranked.append(((not is_pref, NICENESS[god], -energy, stem.index), stem.chinese))
    ranked.sort()
    return [s for _, s in ranked]


def select_useful_god(chart: Chart, table: EnergyTable, pattern: Pattern,
                      strength: Strength,
                      params: EngineParams = DEFAULT_PARAMS) -> UsefulGodDecision:
    """
    Choose the climate god and the balance god, then arbitrate.

    A mid-range chart with a climate need takes the climate god unless the
    climate element already holds more than the ceiling share of energy.
    """
    steps = []
    target = climate_need(chart, table.temperature, params)
    climate_god = None
    if target is not None:
        present = [s for s in HEAVENLY_STEMS
                   if s.element == target and table.scores[s.chinese] > 0]
        if present:
            climate_god = max(present, key=lambda s: (table.scores[s.chinese], -s.index)).chinese
        steps.append(f"climate needs {target.chinese}: {climate_god or NONE_LABEL}")

    ranked = balance_candidates(chart, table, pattern, strength)
    balance_god = ranked[0] if ranked else None
    steps.append(f"balance: {balance_god or NONE_LABEL}")

    sp = params.strength
    mid_range = sp.weak_below <= strength.peer_share <= sp.strong_from
    if mid_range and target is not None and climate_god is not None:
        share = safe_percent(element_energy(table)[target], table.total)
        if share > params.climate.climate_share_ceiling:
            useful, rule = balance_god, "climate_sufficient"
            steps.append(f"climate element at {share:.1f}% already sufficient, use balance")
        else:
            useful, rule = climate_god, "climate"
            steps.append("climate first")
    else:
        useful, rule = balance_god, "balance"
        steps.append("decided by strength and pattern")

    trace = " | ".join(steps)
    logger.debug("useful god %s by %s (%s)", useful, rule, trace)
    return UsefulGodDecision(target, climate_god, balance_god, useful, rule, trace)


@dataclass(frozen=True)
class Classification:
    pattern: Pattern
    strength: Strength
    useful_god: UsefulGodDecision


def classify(chart: Chart, bureau: Bureau, table: EnergyTable,
             params: EngineParams = DEFAULT_PARAMS) -> Classification:
    pattern = classify_pattern(chart, bureau)
    strength = classify_strength(peer_share(table, chart.day_master), params)
    decision = select_useful_god(chart, table, pattern, strength, params)
    logger.debug("pattern %s, strength %s (%.1f%%)", pattern.name, strength.tier.value,
                 strength.peer_share)
    return Classification(pattern, strength, decision)
