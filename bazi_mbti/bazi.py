"""
Four Pillars data model.

Handles:
- Heavenly Stem / Earthly Branch definitions with element and polarity tags
- Hidden stem decomposition (fixed proportions per branch)
- Five Element production and control cycles
- Ten Gods relationship mapping and category grouping
- Pillar and Chart containers

Everything here is a closed enumeration or a pure lookup. Stages further
down the pipeline only read these objects; nothing in this module is mutated
after import.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ============================================================
# STEMS, BRANCHES, ELEMENTS
# ============================================================

class Polarity(Enum):
    YANG = "阳"
    YIN = "阴"


class Element(Enum):
    # Declaration order is the production cycle: each element produces the next.
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"

    @property
    def chinese(self) -> str:
        return ELEMENT_CHINESE[self]


ELEMENT_CHINESE = {
    Element.WOOD: "木",
    Element.FIRE: "火",
    Element.EARTH: "土",
    Element.METAL: "金",
    Element.WATER: "水",
}

ELEMENT_ORDER = list(Element)


@dataclass(frozen=True)
class HeavenlyStem:
    """A 天干. `index` counts from 甲 = 0 and drives every cycle formula."""
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int

    def __str__(self):
        return f"{self.chinese}{self.element.chinese}"


@dataclass(frozen=True)
class EarthlyBranch:
    """
    A 地支 with its seasonal element and hidden stems.

    `index` counts from 子 = 0. `hidden` pairs each stem with its share of
    the branch, main qi first, then the classical listing order.
    """
    chinese: str
    pinyin: str
    animal: str
    element: Element
    polarity: Polarity
    index: int
    hidden: tuple

    def __str__(self):
        return f"{self.chinese}{self.animal}"


@dataclass(frozen=True)
class HiddenStem:
    stem: HeavenlyStem
    proportion: float


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = [
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
]

EARTHLY_BRANCHES = [
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0,
                  (("癸", 1.0),)),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1,
                  (("己", 0.7), ("癸", 0.2), ("辛", 0.1))),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2,
                  (("甲", 0.7), ("丙", 0.2), ("戊", 0.1))),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3,
                  (("乙", 1.0),)),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4,
                  (("戊", 0.7), ("乙", 0.2), ("癸", 0.1))),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5,
                  (("丙", 0.7), ("庚", 0.1), ("戊", 0.2))),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6,
                  (("丁", 0.7), ("己", 0.3))),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7,
                  (("己", 0.7), ("丁", 0.2), ("乙", 0.1))),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8,
                  (("庚", 0.7), ("壬", 0.2), ("戊", 0.1))),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9,
                  (("辛", 1.0),)),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10,
                  (("戊", 0.7), ("辛", 0.2), ("丁", 0.1))),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11,
                  (("壬", 0.8), ("甲", 0.2))),
]

# Lookup helpers
STEM_BY_CHINESE = {s.chinese: s for s in HEAVENLY_STEMS}
STEM_BY_PINYIN = {s.pinyin: s for s in HEAVENLY_STEMS}
BRANCH_BY_CHINESE = {b.chinese: b for b in EARTHLY_BRANCHES}
BRANCH_BY_PINYIN = {b.pinyin: b for b in EARTHLY_BRANCHES}

POSITIONS = ("year", "month", "day", "hour")


def stem_for(symbol: str) -> Optional[HeavenlyStem]:
    """Resolve a stem from its Chinese character or pinyin name."""
    return STEM_BY_CHINESE.get(symbol) or STEM_BY_PINYIN.get(symbol)


def branch_for(symbol: str) -> Optional[EarthlyBranch]:
    """Resolve a branch from its Chinese character or pinyin name."""
    return BRANCH_BY_CHINESE.get(symbol) or BRANCH_BY_PINYIN.get(symbol)


def hidden_stems(branch: EarthlyBranch) -> list[HiddenStem]:
    """Hidden stems of a branch, main qi first. Proportions sum to 1.0."""
    return [HiddenStem(STEM_BY_CHINESE[c], ratio) for c, ratio in branch.hidden]


def main_qi(branch: EarthlyBranch) -> HeavenlyStem:
    """The dominant (highest proportion) hidden stem of a branch."""
    return max(hidden_stems(branch), key=lambda h: h.proportion).stem


# ============================================================
# FIVE ELEMENT CYCLES
# ============================================================

# Each element produces the next: wood feeds fire, fire leaves earth, ...
PRODUCTION_CYCLE = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

# Each element restrains the one two steps ahead in the production cycle
CONTROL_CYCLE = {
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
}


def element_relationship(day_master_element: Element, other_element: Element) -> str:
    """How `other_element` stands towards the Day Master's element."""
    if other_element == day_master_element:
        return "same"
    if PRODUCTION_CYCLE[other_element] == day_master_element:
        return "produces_me"
    if PRODUCTION_CYCLE[day_master_element] == other_element:
        return "i_produce"
    if CONTROL_CYCLE[day_master_element] == other_element:
        return "i_control"
    return "controls_me"


# ============================================================
# TEN GODS (十神) RELATIONSHIP MAPPING
# ============================================================

class GodCategory(Enum):
    PEER = "比劫"
    OUTPUT = "食伤"
    WEALTH = "财星"
    OFFICER = "官杀"
    SEAL = "印枭"


class TenGod(Enum):
    COMPANION = "比肩"
    ROB_WEALTH = "劫财"
    EATING_GOD = "食神"
    HURTING_OFFICER = "伤官"
    INDIRECT_WEALTH = "偏财"
    DIRECT_WEALTH = "正财"
    SEVEN_KILLINGS = "七杀"
    DIRECT_OFFICER = "正官"
    INDIRECT_RESOURCE = "偏印"
    DIRECT_RESOURCE = "正印"

    @property
    def category(self) -> GodCategory:
        return TEN_GOD_CATEGORY[self]


TEN_GOD_CATEGORY = {
    TenGod.COMPANION: GodCategory.PEER,
    TenGod.ROB_WEALTH: GodCategory.PEER,
    TenGod.EATING_GOD: GodCategory.OUTPUT,
    TenGod.HURTING_OFFICER: GodCategory.OUTPUT,
    TenGod.INDIRECT_WEALTH: GodCategory.WEALTH,
    TenGod.DIRECT_WEALTH: GodCategory.WEALTH,
    TenGod.SEVEN_KILLINGS: GodCategory.OFFICER,
    TenGod.DIRECT_OFFICER: GodCategory.OFFICER,
    TenGod.INDIRECT_RESOURCE: GodCategory.SEAL,
    TenGod.DIRECT_RESOURCE: GodCategory.SEAL,
}

TEN_GODS = {
    # (relationship, same_polarity): god
    ("same", True): TenGod.COMPANION,
    ("same", False): TenGod.ROB_WEALTH,
    ("produces_me", True): TenGod.INDIRECT_RESOURCE,
    ("produces_me", False): TenGod.DIRECT_RESOURCE,
    ("i_produce", True): TenGod.EATING_GOD,
    ("i_produce", False): TenGod.HURTING_OFFICER,
    ("i_control", True): TenGod.INDIRECT_WEALTH,
    ("i_control", False): TenGod.DIRECT_WEALTH,
    ("controls_me", True): TenGod.SEVEN_KILLINGS,
    ("controls_me", False): TenGod.DIRECT_OFFICER,
}

UNKNOWN = "未知"


def ten_god(day_master: HeavenlyStem, other: HeavenlyStem) -> TenGod:
    """
    Determine the Ten God relationship between the Day Master and another stem.

    Args:
        day_master: the Day Master stem
        other: the stem being evaluated

    Returns:
        TenGod member
    """
    relationship = element_relationship(day_master.element, other.element)
    same_polarity = (day_master.polarity == other.polarity)
    return TEN_GODS[(relationship, same_polarity)]


def ten_god_name(target: str, day_master: str) -> str:
    """String-level Ten God lookup; unknown symbols give the 未知 sentinel."""
    dm = stem_for(day_master)
    other = stem_for(target)
    if dm is None or other is None:
        return UNKNOWN
    return ten_god(dm, other).value


# ============================================================
# PILLARS AND CHART
# ============================================================

@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    def __str__(self):
        return f"{self.ganzhi} {self.stem.pinyin} {self.branch.pinyin} ({self.branch.animal}, {self.element.value})"

    @property
    def ganzhi(self) -> str:
        return self.stem.chinese + self.branch.chinese

    @property
    def element(self) -> Element:
        # A pillar is tagged with its stem's element.
        return self.stem.element

    def to_dict(self):
        return {
            "position": self.position,
            "stem": self.stem.chinese,
            "branch": self.branch.chinese,
            "element": self.element.value,
            "combined": self.ganzhi,
            "description": str(self),
        }


@dataclass(frozen=True)
class Chart:
    pillars: tuple  # exactly four Pillars, year → hour

    @property
    def stems(self) -> list[HeavenlyStem]:
        return [p.stem for p in self.pillars]

    @property
    def branches(self) -> list[EarthlyBranch]:
        return [p.branch for p in self.pillars]

    @property
    def day_master(self) -> HeavenlyStem:
        return self.pillars[2].stem

    @property
    def month_branch(self) -> EarthlyBranch:
        return self.pillars[1].branch

    def pillar(self, position: str) -> Pillar:
        return self.pillars[POSITIONS.index(position)]

    def to_dict(self):
        return {p.position: {"stem": p.stem.chinese, "branch": p.branch.chinese}
                for p in self.pillars}
