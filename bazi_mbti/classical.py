"""
Classical chart annotations.

Handles:
- Ten Gods for visible and hidden stems
- Nayin (纳音) sound elements for the sixty stem-branch pairs
- Twelve life-cycle stages (十二长生) of the Day Master and self-seat (自坐)
- Void (空亡) pair of each pillar's sexagenary decade
- Shen-sha (神煞) stars, each rule checked independently per pillar

Pure lookups; no energy weighting happens here.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from bazi_mbti.bazi import (
    EARTHLY_BRANCHES,
    Chart,
    EarthlyBranch,
    HeavenlyStem,
    Polarity,
    hidden_stems,
    ten_god,
)

logger = logging.getLogger(__name__)


# ============================================================
# NAYIN AND VOID
# ============================================================

# One name per consecutive pair of the sixty-pair cycle, Jia Zi first
NAYIN = [
    "海中金", "炉中火", "大林木", "路旁土", "剑锋金",
    "山头火", "涧下水", "城头土", "白蜡金", "杨柳木",
    "泉中水", "屋上土", "霹雳火", "松柏木", "长流水",
    "砂石金", "山下火", "平地木", "壁上土", "金箔金",
    "覆灯火", "天河水", "大驿土", "钗钏金", "桑柘木",
    "大溪水", "沙中土", "天上火", "石榴木", "大海水",
]


def sexagenary_index(stem: HeavenlyStem, branch: EarthlyBranch) -> Optional[int]:
    """Position 0-59 of a stem-branch pair, or None for a mixed-polarity pair."""
    if (stem.index - branch.index) % 2:
        return None
    return (6 * stem.index - 5 * branch.index) % 60


def nayin(stem: HeavenlyStem, branch: EarthlyBranch) -> Optional[str]:
    n = sexagenary_index(stem, branch)
    return None if n is None else NAYIN[n // 2]


def void_pair(stem: HeavenlyStem, branch: EarthlyBranch) -> Optional[tuple]:
    """
    The two branches left out of the pillar's ten-day decade.

    Jia Zi decade (甲子..癸酉) leaves Xu and Hai void.
    """
    n = sexagenary_index(stem, branch)
    if n is None:
        return None
    start_branch = (n - n % 10) % 12
    return (EARTHLY_BRANCHES[(start_branch + 10) % 12].chinese,
            EARTHLY_BRANCHES[(start_branch + 11) % 12].chinese)


# ============================================================
# LIFE CYCLE
# ============================================================

LIFE_STAGES = ["长生", "沐浴", "冠带", "临官", "帝旺", "衰",
               "病", "死", "墓", "绝", "胎", "养"]

# Stem -> branch index of 长生. Yang stems count forward, yin backward.
CHANG_SHENG = {
    "甲": 11, "丙": 2, "戊": 2, "庚": 5, "壬": 8,
    "乙": 6, "丁": 9, "己": 9, "辛": 0, "癸": 3,
}

SELF_SEAT = {
    "子": "帝旺", "丑": "衰", "寅": "长生", "卯": "帝旺",
    "辰": "墓", "巳": "临官", "午": "帝旺", "未": "墓",
    "申": "长生", "酉": "帝旺", "戌": "墓", "亥": "长生",
}


def life_cycle(day_master: HeavenlyStem, branch: EarthlyBranch) -> str:
    origin = CHANG_SHENG[day_master.chinese]
    if day_master.polarity == Polarity.YANG:
        step = (branch.index - origin) % 12
    else:
        step = (origin - branch.index) % 12
    return LIFE_STAGES[step]


def self_seat(branch: EarthlyBranch) -> str:
    return SELF_SEAT[branch.chinese]


# ============================================================
# SHEN-SHA
# ============================================================

@dataclass(frozen=True)
class ShenShaContext:
    position: str
    stem: str
    branch: str
    day_stem: str
    month_branch: str
    year_branch: str
    day_branch: str
    year_stem: str

    @property
    def ganzhi(self) -> str:
        return self.stem + self.branch

    @property
    def base_branches(self) -> list[str]:
        """Year and day branch, duplicates removed, year first."""
        bases = [self.year_branch]
        if self.day_branch != self.year_branch:
            bases.append(self.day_branch)
        return bases


@dataclass(frozen=True)
class ShenShaHit:
    name: str
    reason: str

    def to_dict(self):
        return {"name": self.name, "reason": self.reason}


# Day pillar only
TEN_SPIRIT_DAYS = ("甲辰", "乙亥", "丙辰", "丁酉", "戊午", "庚戌", "庚寅", "辛亥", "壬寅", "癸未")
KUI_GANG_DAYS = ("戊戌", "庚辰", "庚戌", "壬辰")
ADVANCING_DAYS = ("甲子", "甲午", "己卯", "己酉")
MISMATCH_DAYS = ("丙子", "丁丑", "戊寅", "辛卯", "壬辰", "癸巳",
                 "丙午", "丁未", "戊申", "辛酉", "壬戌", "癸亥")
LONE_PHOENIX_DAYS = ("丁巳", "戊申", "戊午", "辛亥", "壬子", "丙午", "壬辰", "癸巳")

NOBLE = {
    "甲": ("丑", "未"), "戊": ("丑", "未"),
    "乙": ("子", "申"), "己": ("子", "申"),
    "丙": ("亥", "酉"), "丁": ("亥", "酉"),
    "壬": ("卯", "巳"), "癸": ("卯", "巳"),
    "庚": ("午", "寅"), "辛": ("午", "寅"),
}

# Day stem -> branch
PROSPERITY = {"甲": "寅", "乙": "卯", "丙": "巳", "丁": "午", "戊": "巳",
              "己": "午", "庚": "申", "辛": "酉", "壬": "亥", "癸": "子"}
ACADEMIC = {"甲": "巳", "乙": "午", "丙": "申", "丁": "酉", "戊": "申",
            "己": "酉", "庚": "亥", "辛": "子", "壬": "寅", "癸": "卯"}
NATIONAL_SEAL = {"甲": "戌", "乙": "亥", "丙": "丑", "丁": "丑", "戊": "丑",
                 "己": "丑", "庚": "辰", "辛": "辰", "壬": "未", "癸": "未"}
VIRTUE_ELEGANCE = {"甲": ("寅", "午"), "乙": ("巳", "酉"), "丙": ("申", "子"),
                   "丁": ("亥", "卯"), "戊": ("申", "子"), "己": ("亥", "卯"),
                   "庚": ("寅", "午"), "辛": ("巳", "酉"), "壬": ("寅", "午"),
                   "癸": ("巳", "酉")}
GOLDEN_CARRIAGE = {"甲": "辰", "乙": "巳", "丙": "未", "丁": "未", "戊": "未",
                   "己": "未", "庚": "戌", "辛": "戌", "壬": "丑", "癸": "丑"}
GOAT_BLADE = {"甲": "卯", "乙": "辰", "丙": "午", "丁": "未", "戊": "午",
              "己": "未", "庚": "酉", "辛": "戌", "壬": "子", "癸": "丑"}
RED_CHARM = {"甲": "午", "乙": "申", "丙": "寅", "丁": "未", "戊": "辰",
             "己": "辰", "庚": "戌", "辛": "酉", "壬": "子", "癸": "申"}

# Month branch -> stem or branch
HEAVENLY_VIRTUE = {"寅": "丁", "卯": "申", "辰": "壬", "巳": "辛", "午": "亥", "未": "甲",
                   "申": "癸", "酉": "寅", "戌": "丙", "亥": "乙", "子": "巳", "丑": "庚"}
MONTHLY_VIRTUE = {"寅": "丙", "午": "丙", "戌": "丙",
                  "申": "壬", "子": "壬", "辰": "壬",
                  "亥": "甲", "卯": "甲", "未": "甲",
                  "巳": "庚", "酉": "庚", "丑": "庚"}
FIVE_COMBINE = {"甲": "己", "己": "甲", "乙": "庚", "庚": "乙", "丙": "辛",
                "辛": "丙", "丁": "壬", "壬": "丁", "戊": "癸", "癸": "戊"}

# Triad of the base branch -> star branch
TRIAD_STARS = [
    (("申", "子", "辰"), {"桃花": "酉", "驿马": "寅", "华盖": "辰", "将星": "子",
                         "劫煞": "巳", "灾煞": "午", "亡神": "亥"}),
    (("寅", "午", "戌"), {"桃花": "卯", "驿马": "申", "华盖": "戌", "将星": "午",
                         "劫煞": "亥", "灾煞": "子", "亡神": "巳"}),
    (("巳", "酉", "丑"), {"桃花": "午", "驿马": "亥", "华盖": "丑", "将星": "酉",
                         "劫煞": "申", "灾煞": "卯", "亡神": "申"}),
    (("亥", "卯", "未"), {"桃花": "子", "驿马": "巳", "华盖": "未", "将星": "卯",
                         "劫煞": "寅", "灾煞": "酉", "亡神": "寅"}),
]

HEAVENLY_JOY = {"子": "酉", "丑": "申", "寅": "未", "卯": "午", "辰": "巳", "巳": "辰",
                "午": "卯", "未": "寅", "申": "丑", "酉": "子", "戌": "亥", "亥": "戌"}


def _day_only(days: tuple) -> Callable:
    def rule(ctx: ShenShaContext):
        if ctx.position == "day" and ctx.ganzhi in days:
            return "限日柱"
        return None
    return rule


def _noble(ctx: ShenShaContext):
    for label, base in (("日", ctx.day_stem), ("年", ctx.year_stem)):
        if ctx.branch in NOBLE[base]:
            return f"{label}干{base}查天乙贵人"
    return None


def _by_day_stem(table: dict) -> Callable:
    def rule(ctx: ShenShaContext):
        target = table[ctx.day_stem]
        hit = ctx.branch in target if isinstance(target, tuple) else ctx.branch == target
        return f"日干{ctx.day_stem}查地支" if hit else None
    return rule


def _heavenly_virtue(ctx: ShenShaContext):
    value = HEAVENLY_VIRTUE[ctx.month_branch]
    if value in (ctx.stem, ctx.branch):
        return f"月支{ctx.month_branch}查天干或地支"
    return None


def _monthly_virtue(ctx: ShenShaContext):
    if MONTHLY_VIRTUE[ctx.month_branch] == ctx.stem:
        return f"月支{ctx.month_branch}查天干"
    return None


def _heavenly_virtue_combo(ctx: ShenShaContext):
    if FIVE_COMBINE.get(HEAVENLY_VIRTUE[ctx.month_branch]) == ctx.stem:
        return f"天德{HEAVENLY_VIRTUE[ctx.month_branch]}五合"
    return None


def _monthly_virtue_combo(ctx: ShenShaContext):
    if FIVE_COMBINE[MONTHLY_VIRTUE[ctx.month_branch]] == ctx.stem:
        return f"月德{MONTHLY_VIRTUE[ctx.month_branch]}五合"
    return None


def _by_triad(star: str) -> Callable:
    def rule(ctx: ShenShaContext):
        for base in ctx.base_branches:
            for triad, stars in TRIAD_STARS:
                if base in triad and stars[star] == ctx.branch:
                    return f"{base}支查{star}"
        return None
    return rule


def _heavenly_joy(ctx: ShenShaContext):
    for base in ctx.base_branches:
        if HEAVENLY_JOY[base] == ctx.branch:
            return f"{base}支查天喜"
    return None


# Checked in this order; a name is reported once per pillar
SHEN_SHA_RULES = [
    ("十灵日", _day_only(TEN_SPIRIT_DAYS)),
    ("魁罡格", _day_only(KUI_GANG_DAYS)),
    ("进神", _day_only(ADVANCING_DAYS)),
    ("阴阳差错", _day_only(MISMATCH_DAYS)),
    ("孤鸾煞", _day_only(LONE_PHOENIX_DAYS)),
    ("天乙贵人", _noble),
    ("禄神", _by_day_stem(PROSPERITY)),
    ("文昌贵人", _by_day_stem(ACADEMIC)),
    ("国印贵人", _by_day_stem(NATIONAL_SEAL)),
    ("德秀贵人", _by_day_stem(VIRTUE_ELEGANCE)),
    ("福星贵人", _by_day_stem(PROSPERITY)),
    ("金舆", _by_day_stem(GOLDEN_CARRIAGE)),
    ("羊刃", _by_day_stem(GOAT_BLADE)),
    ("红艳", _by_day_stem(RED_CHARM)),
    ("天德贵人", _heavenly_virtue),
    ("月德贵人", _monthly_virtue),
    ("天德合", _heavenly_virtue_combo),
    ("月德合", _monthly_virtue_combo),
    ("桃花", _by_triad("桃花")),
    ("驿马", _by_triad("驿马")),
    ("华盖", _by_triad("华盖")),
    ("将星", _by_triad("将星")),
    ("劫煞", _by_triad("劫煞")),
    ("灾煞", _by_triad("灾煞")),
    ("亡神", _by_triad("亡神")),
    ("天喜", _heavenly_joy),
]


def shen_sha(ctx: ShenShaContext) -> list[ShenShaHit]:
    """All stars that fire for one pillar, in rule order."""
    hits = []
    for name, rule in SHEN_SHA_RULES:
        reason = rule(ctx)
        if reason is not None:
            hits.append(ShenShaHit(name, reason))
    return hits


def shen_sha_context(chart: Chart, position: str) -> ShenShaContext:
    pillar = chart.pillar(position)
    return ShenShaContext(
        position=position,
        stem=pillar.stem.chinese,
        branch=pillar.branch.chinese,
        day_stem=chart.day_master.chinese,
        month_branch=chart.month_branch.chinese,
        year_branch=chart.pillar("year").branch.chinese,
        day_branch=chart.pillar("day").branch.chinese,
        year_stem=chart.pillar("year").stem.chinese,
    )


# ============================================================
# ANNOTATION RECORD
# ============================================================

@dataclass(frozen=True)
class ClassicalAnnotations:
    chart: Chart
    hidden: dict          # position -> list of hidden stem dicts
    nayin: dict
    ten_gods: dict        # {"stems": {...}, "hidden": {...}}
    shen_sha: dict        # position -> list of names
    shen_sha_audit: dict  # position -> list of ShenShaHit
    life_cycle: dict      # position -> {"branch", "stage"}
    self_seat: dict       # position -> {"branch", "stage"}
    void: dict

    def to_dict(self):
        dm = self.chart.day_master
        return {
            "pillars": {p.position: p.to_dict() for p in self.chart.pillars},
            "day_master": {
                "stem": dm.chinese,
                "element": dm.element.chinese,
                "ten_god": ten_god(dm, dm).value,
            },
            "hidden_stems": self.hidden,
            "nayin": self.nayin,
            "ten_gods": self.ten_gods,
            "shen_sha": self.shen_sha,
            "shen_sha_audit": {pos: [h.to_dict() for h in hits]
                               for pos, hits in self.shen_sha_audit.items()},
            "life_cycle": self.life_cycle,
            "self_seat": self.self_seat,
            "void": {pos: list(pair) if pair else None for pos, pair in self.void.items()},
        }


def build_annotations(chart: Chart) -> ClassicalAnnotations:
    dm = chart.day_master
    hidden = {}
    hidden_gods = {}
    nayins = {}
    stem_gods = {}
    names = {}
    audit = {}
    stages = {}
    seats = {}
    voids = {}

    for p in chart.pillars:
        pos = p.position
        hidden[pos] = [
            {
                "stem": h.stem.chinese,
                "element": h.stem.element.chinese,
                "proportion": h.proportion,
                "ten_god": ten_god(dm, h.stem).value,
            }
            for h in hidden_stems(p.branch)
        ]
        hidden_gods[pos] = [h["ten_god"] for h in hidden[pos]]
        stem_gods[pos] = ten_god(dm, p.stem).value
        nayins[pos] = nayin(p.stem, p.branch)
        hits = shen_sha(shen_sha_context(chart, pos))
        audit[pos] = hits
        names[pos] = [h.name for h in hits]
        stages[pos] = {"branch": p.branch.chinese, "stage": life_cycle(dm, p.branch)}
        seats[pos] = {"branch": p.branch.chinese, "stage": self_seat(p.branch)}
        voids[pos] = void_pair(p.stem, p.branch)

    logger.debug("classical annotations for %s: %d shen-sha",
                 " ".join(p.ganzhi for p in chart.pillars),
                 sum(len(v) for v in names.values()))

    return ClassicalAnnotations(
        chart=chart,
        hidden=hidden,
        nayin=nayins,
        ten_gods={"stems": stem_gods, "hidden": hidden_gods},
        shen_sha=names,
        shen_sha_audit=audit,
        life_cycle=stages,
        self_seat=seats,
        void=voids,
    )

