"""Four-pillar chart inference: classical annotations and cognitive-function profile."""

from bazi_mbti.astro_calendar import CalendarResolutionError
from bazi_mbti.chart_input import ChartInput, build_chart
from bazi_mbti.params import DEFAULT_PARAMS, EngineParams
from bazi_mbti.report import ChartAnalysis, analyze_chart, classical_annotations
