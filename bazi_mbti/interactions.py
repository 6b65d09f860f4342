"""
Structural bureau detection and combine/clash interaction physics.

Handles:
- Directional (三会) and triangular (三合) bureau detection
- Stem five-combinations (天干五合) on adjacent pillars
- Branch six-combinations (六合) on adjacent pillars
- Branch six-clashes (六冲) across every pair of pillars
- Ne/Ni compensation totals for the cognitive mapper

Each stage returns a fresh result; multipliers are folded into new tuples
and every decision is written to an InteractionRecord trace.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from bazi_mbti.bazi import Chart, Element, main_qi
from bazi_mbti.params import DEFAULT_PARAMS, EngineParams

logger = logging.getLogger(__name__)


# ============================================================
# RULE TABLES (branch / stem indices)
# ============================================================

# Directional bureaus (三会), checked before triangular ones
DIRECTIONAL_BUREAUS = [
    ((2, 3, 4), Element.WOOD),     # Yin-Mao-Chen
    ((5, 6, 7), Element.FIRE),     # Si-Wu-Wei
    ((8, 9, 10), Element.METAL),   # Shen-You-Xu
    ((11, 0, 1), Element.WATER),   # Hai-Zi-Chou
]

# Triangular bureaus (三合)
TRIANGULAR_BUREAUS = [
    ((11, 3, 7), Element.WOOD),    # Hai-Mao-Wei
    ((2, 6, 10), Element.FIRE),    # Yin-Wu-Xu
    ((5, 9, 1), Element.METAL),    # Si-You-Chou
    ((8, 0, 4), Element.WATER),    # Shen-Zi-Chen
]

# Stem five-combinations (天干五合)
STEM_COMBINATIONS = {
    frozenset((0, 5)): Element.EARTH,   # Jia-Ji
    frozenset((1, 6)): Element.METAL,   # Yi-Geng
    frozenset((2, 7)): Element.WATER,   # Bing-Xin
    frozenset((3, 8)): Element.WOOD,    # Ding-Ren
    frozenset((4, 9)): Element.FIRE,    # Wu-Gui
}

# Branch six-combinations (六合)
SIX_COMBINATIONS = {
    frozenset((0, 1)): Element.EARTH,   # Zi-Chou
    frozenset((2, 11)): Element.WOOD,   # Yin-Hai
    frozenset((3, 10)): Element.FIRE,   # Mao-Xu
    frozenset((4, 9)): Element.METAL,   # Chen-You
    frozenset((6, 7)): Element.EARTH,   # Wu-Wei
    frozenset((5, 8)): Element.WATER,   # Si-Shen
}

# Six Clashes (六冲)
SIX_CLASHES = [
    frozenset((0, 6)),    # Zi-Wu
    frozenset((1, 7)),    # Chou-Wei
    frozenset((2, 8)),    # Yin-Shen
    frozenset((3, 9)),    # Mao-You
    frozenset((4, 10)),   # Chen-Xu
    frozenset((5, 11)),   # Si-Hai
]


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class InteractionRecord:
    """One detected interaction or energy adjustment."""
    kind: str           # "stem_combine", "branch_combine", "clash", "bureau", ...
    positions: tuple    # pillar indices involved
    symbols: str        # the characters involved, e.g. "甲己"
    outcome: str        # "combined", "bound", "adjacent", "remote", "skipped", ...
    multiplier: float = 1.0
    note: str = ""

    def to_dict(self):
        return {
            "kind": self.kind,
            "positions": list(self.positions),
            "symbols": self.symbols,
            "outcome": self.outcome,
            "multiplier": self.multiplier,
            "note": self.note,
        }


@dataclass(frozen=True)
class Bureau:
    element: Element             # seasonal element used downstream
    kind: Optional[str]          # "directional", "triangular" or None
    branches: frozenset          # branch chinese symbols in the bureau set
    source: str                  # e.g. "三会木局", "月令寅"

    @property
    def is_bureau(self) -> bool:
        return self.kind is not None


@dataclass(frozen=True)
class InteractionResult:
    stem_mults: tuple
    branch_mults: tuple
    records: tuple
    ne_compensation: float
    ni_compensation: float
    combined_positions: frozenset = field(default_factory=frozenset)
    clashed_positions: frozenset = field(default_factory=frozenset)


# ============================================================
# BUREAU DETECTION
# ============================================================

def detect_bureau(chart: Chart) -> Bureau:
    """
    Find the structural bureau among the four branches.

    Directional triads win over triangular ones. With no triad present the
    seasonal element is the element of the month branch's main qi.
    """
    present = {b.index for b in chart.branches}

    for kind, table, label in (("directional", DIRECTIONAL_BUREAUS, "三会"),
                               ("triangular", TRIANGULAR_BUREAUS, "三合")):
        for triad, element in table:
            if all(idx in present for idx in triad):
                members = frozenset(b.chinese for b in chart.branches if b.index in triad)
                bureau = Bureau(element=element, kind=kind, branches=members,
                                source=f"{label}{element.chinese}局")
                logger.debug("bureau detected: %s", bureau.source)
                return bureau

    month = chart.month_branch
    return Bureau(element=main_qi(month).element, kind=None, branches=frozenset(),
                  source=f"月令{month.chinese}")


# ============================================================
# COMBINE / CLASH RESOLUTION
# ============================================================

def _record(records: list, rec: InteractionRecord):
    logger.debug("%s %s %s x%.2f %s", rec.kind, rec.symbols, rec.outcome,
                 rec.multiplier, rec.note)
    records.append(rec)


def resolve_interactions(chart: Chart, bureau: Bureau,
                         params: EngineParams = DEFAULT_PARAMS) -> InteractionResult:
    """
    Evaluate stem combinations, branch combinations and clashes.

    Args:
        chart: the four-pillar chart
        bureau: result of detect_bureau; supplies the seasonal element and
            the bureau set that shields clashes
        params: tuning parameters

    Returns:
        InteractionResult with per-pillar multipliers, the trace and the
        two compensation totals (Ne from clashes, Ni from combinations)
    """
    ip = params.interactions
    comp = params.compensation
    stems = chart.stems
    branches = chart.branches
    season = bureau.element
    month_element = main_qi(chart.month_branch).element

    stem_mults = [1.0] * 4
    branch_mults = [1.0] * 4
    records: list[InteractionRecord] = []

    # Stem combinations, adjacent pairs only
    for i in range(3):
        a, b = stems[i], stems[i + 1]
        target = STEM_COMBINATIONS.get(frozenset((a.index, b.index)))
        if target is None:
            continue
        if target == season:
            _record(records, InteractionRecord("stem_combine", (i, i + 1), a.chinese + b.chinese,
                                               "combined", 1.0, f"transforms to {target.value}"))
        else:
            stem_mults[i] *= ip.stem_bound_mult
            stem_mults[i + 1] *= ip.stem_bound_mult
            _record(records, InteractionRecord("stem_combine", (i, i + 1), a.chinese + b.chinese,
                                               "bound", ip.stem_bound_mult,
                                               f"{target.value} out of season"))

    # Branch combinations take priority over clashes
    combined = set()
    bound = [False] * 4
    combine_sum = 0.0
    for i in range(3):
        a, b = branches[i], branches[i + 1]
        target = SIX_COMBINATIONS.get(frozenset((a.index, b.index)))
        if target is None:
            continue
        combined.update((i, i + 1))
        combine_sum += comp.six_combine_boost
        if target == season or target == month_element:
            _record(records, InteractionRecord("branch_combine", (i, i + 1), a.chinese + b.chinese,
                                               "combined", 1.0, f"transforms to {target.value}"))
            continue
        for k in (i, i + 1):
            if not bound[k]:
                branch_mults[k] *= ip.branch_bound_mult
                bound[k] = True
        _record(records, InteractionRecord("branch_combine", (i, i + 1), a.chinese + b.chinese,
                                           "bound", ip.branch_bound_mult,
                                           "each branch penalised once"))

    if len(combined) == 4:
        ni_compensation = comp.full_combine_boost
        _record(records, InteractionRecord("full_combine", (0, 1, 2, 3),
                                           "".join(b.chinese for b in branches),
                                           "saturated", 1.0,
                                           f"Ni compensation set to {ni_compensation}"))
    else:
        ni_compensation = combine_sum

    # Clashes over every pair of pillars
    clashed = set()
    clash_sum = 0.0
    for i in range(4):
        for j in range(i + 1, 4):
            a, b = branches[i], branches[j]
            if frozenset((a.index, b.index)) not in SIX_CLASHES:
                continue
            clashed.update((i, j))
            if a.chinese in bureau.branches or b.chinese in bureau.branches:
                _record(records, InteractionRecord("clash", (i, j), a.chinese + b.chinese,
                                                   "skipped", 1.0, f"shielded by {bureau.source}"))
                continue
            if j - i == 1:
                mult, boost, outcome = ip.adjacent_clash_mult, comp.adjacent_clash_boost, "adjacent"
            else:
                mult, boost, outcome = ip.remote_clash_mult, comp.remote_clash_boost, "remote"
            branch_mults[i] *= mult
            branch_mults[j] *= mult
            clash_sum += boost
            _record(records, InteractionRecord("clash", (i, j), a.chinese + b.chinese,
                                               outcome, mult))

    if len(clashed) == 4:
        ne_compensation = comp.full_clash_boost
        _record(records, InteractionRecord("full_clash", (0, 1, 2, 3),
                                           "".join(b.chinese for b in branches),
                                           "saturated", 1.0,
                                           f"Ne compensation set to {ne_compensation}"))
    else:
        ne_compensation = clash_sum

    return InteractionResult(
        stem_mults=tuple(stem_mults),
        branch_mults=tuple(branch_mults),
        records=tuple(records),
        ne_compensation=ne_compensation,
        ni_compensation=ni_compensation,
        combined_positions=frozenset(combined),
        clashed_positions=frozenset(clashed),
    )
