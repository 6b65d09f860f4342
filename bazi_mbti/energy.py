"""
Seasonal weighting, stem↔branch flow and energy aggregation.

Handles:
- Base pillar scores scaled by the interaction multipliers
- Bureau transmutation of branches inside the bureau set
- The five-step seasonal ring around the seasonal element
- Rootless (虚浮) stem dampening
- Per-pillar flow adjustments, with a distinct rule set for the month pillar
- Aggregation into one ElementEnergyTable over the ten stems
- Energy profile: element / category / Ten God / stem shares and climate

Every step builds new dicts from the previous ones; nothing handed in by the
caller is modified.
"""

import logging
from dataclasses import dataclass

from bazi_mbti.bazi import (
    CONTROL_CYCLE,
    ELEMENT_ORDER,
    HEAVENLY_STEMS,
    PRODUCTION_CYCLE,
    STEM_BY_CHINESE,
    Chart,
    Element,
    GodCategory,
    TenGod,
    hidden_stems,
    ten_god,
)
from bazi_mbti.interactions import Bureau, InteractionRecord, InteractionResult
from bazi_mbti.params import DEFAULT_PARAMS, EngineParams, FlowRule

logger = logging.getLogger(__name__)


def safe_percent(part: float, total: float) -> float:
    """part / total * 100, or 0.0 when the total is not positive."""
    if total <= 0:
        return 0.0
    return part / total * 100.0


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class EnergyTable:
    scores: dict          # stem chinese -> energy, all ten stems in cycle order
    total: float
    temperature: float
    stem_scores: tuple    # per pillar visible stem energy after flow
    branch_scores: tuple  # per pillar {stem chinese: fragment energy}
    records: tuple

    def share(self, stem: str) -> float:
        return safe_percent(self.scores.get(stem, 0.0), self.total)


@dataclass(frozen=True)
class EnergyProfile:
    element_energy: dict
    element_share: dict
    category_energy: dict
    category_share: dict
    ten_god_energy: dict
    ten_god_share: dict
    stem_share: dict
    max_element_energy: float
    temperature: float
    climate_level: str

    def to_dict(self):
        return {
            "element_energy": self.element_energy,
            "element_share": self.element_share,
            "category_energy": self.category_energy,
            "category_share": self.category_share,
            "ten_god_energy": self.ten_god_energy,
            "ten_god_share": self.ten_god_share,
            "stem_share": self.stem_share,
            "max_element_energy": self.max_element_energy,
            "temperature": self.temperature,
            "climate_level": self.climate_level,
        }


# ============================================================
# SEASON AND FLOW
# ============================================================

def season_multipliers(season: Element, params: EngineParams = DEFAULT_PARAMS) -> dict:
    """Element -> multiplier, ring ordered along the production cycle."""
    ep = params.energy
    ring = [ep.season_same, ep.season_next, ep.season_next2, ep.season_prev2, ep.season_prev]
    start = ELEMENT_ORDER.index(season)
    return {ELEMENT_ORDER[(start + step) % 5]: ring[step] for step in range(5)}


def flow_rule(stem_element: Element, branch_element: Element, is_month: bool,
              params: EngineParams = DEFAULT_PARAMS) -> tuple[str, FlowRule]:
    """Pick the stem↔branch adjustment for one pillar."""
    fp = params.flow
    if stem_element == branch_element:
        name = "same"
    elif PRODUCTION_CYCLE[branch_element] == stem_element:
        name = "branch_produces_stem"
    elif PRODUCTION_CYCLE[stem_element] == branch_element:
        name = "stem_produces_branch"
    elif CONTROL_CYCLE[branch_element] == stem_element:
        name = "branch_controls_stem"
    else:
        name = "stem_controls_branch"
    rule = getattr(fp, f"month_{name}" if is_month else name)
    return name, rule


def bureau_stems(element: Element) -> list[str]:
    """Yang and yin stem of the bureau element."""
    return [s.chinese for s in HEAVENLY_STEMS if s.element == element]


def _dominant_fragment(fragments: dict) -> str:
    # Highest energy; earlier stem wins a tie.
    return max(fragments, key=lambda s: (fragments[s], -STEM_BY_CHINESE[s].index))


# ============================================================
# AGGREGATION
# ============================================================

def compute_energy(chart: Chart, bureau: Bureau, interactions: InteractionResult,
                   params: EngineParams = DEFAULT_PARAMS) -> EnergyTable:
    """
    Run the seasonal and flow model and sum the result per stem.

    Args:
        chart: the four-pillar chart
        bureau: seasonal element and bureau set
        interactions: multipliers from resolve_interactions
        params: tuning parameters

    Returns:
        EnergyTable with all ten stems (absent stems score 0.0)
    """
    ep = params.energy
    records: list[InteractionRecord] = []
    stems = chart.stems
    branches = chart.branches

    # Base scores
    stem_scores = [ep.stem_base[i] * interactions.stem_mults[i] for i in range(4)]
    branch_scores = []
    for i, branch in enumerate(branches):
        if branch.chinese in bureau.branches:
            fragments = [(s, ep.bureau_split) for s in bureau_stems(bureau.element)]
            rec = InteractionRecord("bureau", (i,), branch.chinese, "transmuted", ep.bureau_split,
                                    f"{bureau.source} splits into yang and yin {bureau.element.value}")
            logger.debug("%s %s %s", rec.kind, rec.symbols, rec.note)
            records.append(rec)
        else:
            fragments = [(h.stem.chinese, h.proportion) for h in hidden_stems(branch)]
        base = ep.branch_base[i] * interactions.branch_mults[i]
        branch_scores.append({s: base * ratio for s, ratio in fragments})

    # Seasonal ring
    ring = season_multipliers(bureau.element, params)
    stem_scores = [score * ring[stem.element] for score, stem in zip(stem_scores, stems)]
    branch_scores = [
        {s: v * ring[STEM_BY_CHINESE[s].element] for s, v in fragments.items()}
        for fragments in branch_scores
    ]

    # Rootless stems
    rooted = []
    for i, stem in enumerate(stems):
        has_root = any(fragments.get(stem.chinese, 0.0) > 0 for fragments in branch_scores)
        if not has_root:
            rec = InteractionRecord("rootless", (i,), stem.chinese, "dampened", ep.rootless_mult)
            logger.debug("%s %s x%.2f", rec.kind, rec.symbols, rec.multiplier)
            records.append(rec)
        rooted.append(stem_scores[i] if has_root else stem_scores[i] * ep.rootless_mult)
    stem_scores = rooted

    # Stem↔branch flow
    flowed_stems = []
    flowed_branches = []
    for i, (stem, fragments) in enumerate(zip(stems, branch_scores)):
        if not fragments:
            flowed_stems.append(stem_scores[i])
            flowed_branches.append(fragments)
            continue
        branch_element = STEM_BY_CHINESE[_dominant_fragment(fragments)].element
        name, rule = flow_rule(stem.element, branch_element, is_month=(i == 1), params=params)
        flowed_stems.append(stem_scores[i] * rule.stem)
        flowed_branches.append({s: v * rule.branch for s, v in fragments.items()})
        rec = InteractionRecord("flow", (i,), stem.chinese + branches[i].chinese, name,
                                rule.stem, f"branch x{rule.branch}")
        logger.debug("%s %s %s stem x%.2f branch x%.2f", rec.kind, rec.symbols, name,
                     rule.stem, rule.branch)
        records.append(rec)

    # Sum per stem
    visible = {s.chinese for s in stems}
    scores = {s.chinese: 0.0 for s in HEAVENLY_STEMS}
    for stem, value in zip(stems, flowed_stems):
        scores[stem.chinese] += value
    for fragments in flowed_branches:
        for s, value in fragments.items():
            full_weight = s in visible or (bureau.is_bureau
                                           and STEM_BY_CHINESE[s].element == bureau.element)
            scores[s] += value if full_weight else value * ep.hidden_discount

    total = sum(scores.values())
    temperature = sum(v * params.climate.temperature[s] for s, v in scores.items())
    logger.debug("energy total %.2f, temperature %.2f", total, temperature)

    return EnergyTable(
        scores=scores,
        total=total,
        temperature=temperature,
        stem_scores=tuple(flowed_stems),
        branch_scores=tuple(flowed_branches),
        records=tuple(records),
    )


def element_energy(table: EnergyTable) -> dict:
    energy = {e: 0.0 for e in ELEMENT_ORDER}
    for s, value in table.scores.items():
        energy[STEM_BY_CHINESE[s].element] += value
    return energy


def category_energy(table: EnergyTable, day_master) -> dict:
    energy = {c: 0.0 for c in GodCategory}
    for s, value in table.scores.items():
        energy[ten_god(day_master, STEM_BY_CHINESE[s]).category] += value
    return energy


def peer_share(table: EnergyTable, day_master) -> float:
    """Share of peer plus seal energy (同党占比)."""
    cats = category_energy(table, day_master)
    return safe_percent(cats[GodCategory.PEER] + cats[GodCategory.SEAL], table.total)


def climate_level(temperature: float, params: EngineParams = DEFAULT_PARAMS) -> str:
    cp = params.climate
    if temperature > cp.dry_severe:
        return "燥"
    if temperature > cp.dry_mild:
        return "偏燥"
    if temperature < -cp.dry_severe:
        return "湿"
    if temperature < -cp.dry_mild:
        return "偏湿"
    return "中和"


def profile(table: EnergyTable, chart: Chart, params: EngineParams = DEFAULT_PARAMS) -> EnergyProfile:
    """Summarise an energy table by element, category, Ten God and stem."""
    dm = chart.day_master
    elements = element_energy(table)
    cats = category_energy(table, dm)

    gods = {g: 0.0 for g in TenGod}
    for s, value in table.scores.items():
        gods[ten_god(dm, STEM_BY_CHINESE[s])] += value

    return EnergyProfile(
        element_energy={e.chinese: v for e, v in elements.items()},
        element_share={e.chinese: safe_percent(v, table.total) for e, v in elements.items()},
        category_energy={c.value: v for c, v in cats.items()},
        category_share={c.value: safe_percent(v, table.total) for c, v in cats.items()},
        ten_god_energy={g.value: v for g, v in gods.items()},
        ten_god_share={g.value: safe_percent(v, table.total) for g, v in gods.items()},
        stem_share={s: safe_percent(v, table.total) for s, v in table.scores.items()},
        max_element_energy=max(elements.values()),
        temperature=table.temperature,
        climate_level=climate_level(table.temperature, params),
    )
