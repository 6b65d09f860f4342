import pytest

from bazi_mbti.chart_input import ChartInput, build_chart


@pytest.fixture
def make_chart():
    def _make(gans: str, zhis: str):
        return build_chart(ChartInput.from_pillars(list(gans), list(zhis)))
    return _make
