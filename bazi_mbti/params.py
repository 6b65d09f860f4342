"""
Tuned engine parameters.

The weights, thresholds and multipliers below are fitted values, kept apart
from the algorithms that consume them. A parameter set is a frozen
dataclass tree tagged with a version string; every pipeline entry point takes
an optional ``params`` argument and falls back to ``DEFAULT_PARAMS``.
"""

from dataclasses import dataclass, field

from bazi_mbti.bazi import TenGod


FUNCTIONS = ("Te", "Ti", "Fe", "Fi", "Se", "Si", "Ne", "Ni")


@dataclass(frozen=True)
class EnergyParams:
    stem_base: tuple = (100.0, 100.0, 100.0, 100.0)
    # The month branch carries triple weight.
    branch_base: tuple = (100.0, 300.0, 100.0, 100.0)
    # Season ring by distance from the seasonal element along the
    # production cycle: same, produced-by-season, producing-season,
    # two ahead, two behind.
    season_same: float = 1.5
    season_next: float = 1.2
    season_prev: float = 0.9
    season_next2: float = 0.7
    season_prev2: float = 0.8
    rootless_mult: float = 0.6
    hidden_discount: float = 0.8
    bureau_split: float = 0.5


@dataclass(frozen=True)
class FlowRule:
    """Stem and branch multipliers for one stem↔branch relation."""
    stem: float
    branch: float


@dataclass(frozen=True)
class FlowParams:
    # Year, day and hour pillars.
    same: FlowRule = FlowRule(1.3, 1.0)
    branch_produces_stem: FlowRule = FlowRule(1.2, 0.9)
    stem_produces_branch: FlowRule = FlowRule(0.8, 1.1)
    branch_controls_stem: FlowRule = FlowRule(0.7, 0.9)
    stem_controls_branch: FlowRule = FlowRule(0.8, 0.8)
    # Month pillar.
    month_same: FlowRule = FlowRule(1.2, 1.05)
    month_branch_produces_stem: FlowRule = FlowRule(1.2, 1.0)
    month_stem_produces_branch: FlowRule = FlowRule(0.8, 1.1)
    month_branch_controls_stem: FlowRule = FlowRule(0.65, 0.95)
    month_stem_controls_branch: FlowRule = FlowRule(0.8, 0.9)


@dataclass(frozen=True)
class InteractionParams:
    stem_bound_mult: float = 0.7
    branch_bound_mult: float = 0.7
    adjacent_clash_mult: float = 0.6
    remote_clash_mult: float = 0.85


@dataclass(frozen=True)
class CompensationParams:
    adjacent_clash_boost: float = 30.0
    remote_clash_boost: float = 5.0
    full_clash_boost: float = 130.0
    six_combine_boost: float = 6.658452162258187
    full_combine_boost: float = 100.0


@dataclass(frozen=True)
class StrengthParams:
    dominant_above: float = 90.0
    weak_below: float = 24.0
    strong_from: float = 72.0
    balanced_strong_from: float = 50.0


def _temperature():
    return {
        "甲": 1, "乙": -1, "丙": 7, "丁": 4, "戊": 2,
        "己": -2, "庚": -1, "辛": -2, "壬": -6, "癸": -4,
    }


@dataclass(frozen=True)
class ClimateParams:
    temperature: dict = field(default_factory=_temperature)
    hot_branches: tuple = ("巳", "午", "未")
    cold_branches: tuple = ("亥", "子", "丑")
    warm_borderline: tuple = ("寅", "戌")
    cool_borderline: tuple = ("申", "辰")
    borderline_threshold: float = 350.0
    climate_share_ceiling: float = 25.0
    dry_severe: float = 400.0
    dry_mild: float = 200.0


def _ten_god_weights():
    return {
        TenGod.COMPANION: {"Fi": 1.1272976009264932, "Si": 0.1863814102337426, "Te": 0.028233847020994463, "Ti": 0.12619025142351841, "Fe": 0.5063539735489445, "Se": 0.04750643927511244, "Ne": 0.2288940331477292, "Ni": 0.04914244442346482},
        TenGod.ROB_WEALTH: {"Fe": 0.8339904239001248, "Se": 0.06029630481607141, "Te": 1.0130032077342419, "Ti": 0.05798032519810626, "Fi": 0.19419929116536636, "Si": 0.2362482447450704, "Ne": 0.012221296472533116, "Ni": 0.10981074479289557},
        TenGod.EATING_GOD: {"Fi": 0.1029270997261323, "Ne": 1.221423597947489, "Te": 0.04766758744569931, "Ti": 0.05280170002818327, "Fe": 0.04766758744569931, "Se": 0.4319447873943418, "Si": 0.04766758744569931, "Ni": 0.34790005256675566},
        TenGod.HURTING_OFFICER: {"Ne": 0.79796184802047398, "Ti": 0.28655711351256824, "Te": 0.2818667704815759, "Fe": 0.14872303509699475, "Fi": 0.21097103135364315, "Se": 0.275566927839208, "Si": 0.01410779346566536, "Ni": 0.28424548022987056},
        TenGod.DIRECT_WEALTH: {"Si": 0.024871628298928253, "Te": 0.03509236761285633, "Ti": 0.06691772068474677, "Fe": 0.97818821086778849, "Fi": 0.3338385057178014, "Se": 0.30552734730653086, "Ne": 0.012054959274314703, "Ni": 0.38132758954048074},
        TenGod.INDIRECT_WEALTH: {"Se": 0.03587249683594573, "Te": 0.05819893761991663, "Ti": 0.2037534413146295, "Fe": 0.8885894448223746, "Fi": 0.38539252468549157, "Si": 0.392482885691753, "Ne": 0.27890853876984056, "Ni": 0.25680173026004824},
        TenGod.DIRECT_OFFICER: {"Te": 0.1551263704367319, "Si": 0.08258775257666712, "Ti": 0.47380419949607714, "Fe": 0.12062779895453588, "Fi": 0.30291872466162323, "Se": 0.17155420488198786, "Ne": 0.1293404928680672, "Ni": 0.2640404561243095},
        TenGod.SEVEN_KILLINGS: {"Te": 1.1981982935867653, "Ni": 0.27345584792093314, "Ti": 0.20382434748257502, "Fe": 0.1154865347587994, "Fi": 0.3834705261339111, "Se": 0.27971544615187427, "Si": 0.0695817306275623, "Ne": 0.27626727333757944},
        TenGod.DIRECT_RESOURCE: {"Fe": 0.323119860391175234, "Si": 0.901, "Te": 0.01, "Ti": 0.46249674766753607, "Fi": 0.46824057318480844, "Se": 0.0574045921798849, "Ne": 0.5142061485396071, "Ni": 0.4546286479879464},
        TenGod.INDIRECT_RESOURCE: {"Ni": 1.08635681486845135, "Ti": 0.70653056793881817, "Te": 0.37557265582184295, "Fe": 0.23260374691260582, "Fi": 0.29208527021925743, "Se": 0.1907372166472286, "Si": 0.12731811769642984, "Ne": 0.06986605626648905},
    }


def _stem_weights():
    return {
        "甲": {"Te": 1.23443572403728782, "Fi": 0.11558796533816014, "Ti": 0.4705620975440448, "Fe": 0.39039223063983824, "Se": 0.13461286964025437, "Si": 0.42334614852425073, "Ne": 0.06316765745248096, "Ni": 0.1678953068236827},
        "乙": {"Fe": 0.019109492919350074, "Ne": 0.84997368212982486, "Te": 0.019109492919350074, "Ti": 0.019109492919350074, "Fi": 0.4293462356642604, "Se": 0.5251326176091642, "Si": 0.019109492919350074, "Ni": 0.019109492919350074},
        "丙": {"Se": 0.3385567918127332, "Fe": 0.932900260388142, "Te": 0.1357445326217361, "Ti": 0.35005209408935034, "Fi": 0.19134510715211622, "Si": 0.25764531259723134, "Ne": 0.24882441702507285, "Ni": 0.2845417186629456},
        "丁": {"Ni": 0.8323136404142509, "Ti": 0.34844479540108608, "Te": 0.42193120919253135, "Fe": 0.21713693915072724, "Fi": 0.05294770841273588, "Se": 0.13390283848689524, "Si": 0.17571483747196412, "Ne": 0.217608031469809},
        "戊": {"Si": 0.1646142330072045, "Fi": 0.43352232958956973, "Te": 0.01, "Ti": 0.0738253677436321, "Fe": 0.029956046665663438, "Se": 0.777169585895979, "Ne": 0.1009124370979512, "Ni": 0.01},
        "己": {"Fe": 0.35376642945774667, "Si": 0.011410580113885635, "Te": 0.20044601524216302, "Ti": 0.01, "Fi": 0.23514572700265327, "Se": 0.01, "Ne": 0.7918762834307395, "Ni": 0.38740775000610733},
        "庚": {"Te": 0.07824165322191358, "Se": 0.11822277122885805, "Ti": 0.045576763108743874, "Fe": 0.32122859430813045, "Fi": 0.03568392486829501, "Si": 0.13897162832005802, "Ne": 0.13507411483174242, "Ni": 0.22700055011225867},
        "辛": {"Fi": 0.012163335020735355, "Se": 0.2033122035640154, "Te": 0.37347197450292086, "Ti": 0.3312058990673226, "Fe": 0.3706127341175688, "Si": 0.04050120842915505, "Ne": 0.3273704302101597, "Ni": 0.3413622150881224},
        "壬": {"Ne": 0.01, "Te": 0.1403790152254841, "Ti": 0.41, "Fe": 0.011488081163630292, "Fi": 0.08487703714549497, "Se": 0.1932207156040188, "Si": 0.22656173822587852, "Ni": 0.3234828444663765},
        "癸": {"Ni": 0.31, "Fi": 0.01, "Te": 0.07630995265459674, "Ti": 1.2181176253833563, "Fe": 0.2, "Se": 0.6370981307431082, "Si": 0.4438727233693656, "Ne": 0.29460156784957303},
    }


@dataclass(frozen=True)
class CognitiveParams:
    ten_god_weights: dict = field(default_factory=_ten_god_weights)
    stem_weights: dict = field(default_factory=_stem_weights)
    phys_contribution_ratio: float = 0.50042442849570757
    social_contribution_ratio: float = 0.6155755715042924
    activation_base: float = 8.322594297471033
    pattern_mult: float = 2.075067010340313
    day_master_mult: float = 2.5
    latent_below: float = 10.0
    manifest_from: float = 15.0
    weak_defense_threshold: float = 23.254319515436514
    weak_defense_weights: dict = field(default_factory=lambda: {"Fi": 0.9091873223445278})
    weak_defense_mult: float = 0.4615850087516475
    strong_attack_threshold: float = 97.0
    strong_attack_weights: dict = field(default_factory=lambda: {"Fi": 2.8162545768225424})
    strong_attack_mult: float = 1.2000000000000002


@dataclass(frozen=True)
class EngineParams:
    version: str = "2025.1"
    energy: EnergyParams = EnergyParams()
    flow: FlowParams = FlowParams()
    interactions: InteractionParams = InteractionParams()
    compensation: CompensationParams = CompensationParams()
    strength: StrengthParams = StrengthParams()
    climate: ClimateParams = field(default_factory=ClimateParams)
    cognitive: CognitiveParams = field(default_factory=CognitiveParams)


DEFAULT_PARAMS = EngineParams()
