"""
Chart input contract and pillar builder.

A request is either a birth moment (date mode) or four stems plus four
branches (direct mode). Exactly one mode is active per request; anything
else is rejected by validation rather than guessed at.
"""

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from bazi_mbti import astro_calendar
from bazi_mbti.bazi import POSITIONS, Chart, Pillar, branch_for, stem_for

logger = logging.getLogger(__name__)


class DateInput(BaseModel):
    year: int
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    hour: int = Field(ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    utc_offset: float = Field(default=astro_calendar.CHINA_UTC_OFFSET, ge=-14.0, le=14.0)
    # IANA zone name; takes precedence over utc_offset
    timezone: Optional[str] = None


class DirectInput(BaseModel):
    """Four stems and four branches, year → hour, Chinese or pinyin."""
    gans: list[str]
    zhis: list[str]

    @field_validator("gans")
    @classmethod
    def check_stems(cls, value: list[str]) -> list[str]:
        if len(value) != 4:
            raise ValueError(f"gans must hold exactly 4 stems, got {len(value)}")
        resolved = []
        for symbol in value:
            stem = stem_for(symbol)
            if stem is None:
                raise ValueError(f"unknown heavenly stem: {symbol!r}")
            resolved.append(stem.chinese)
        return resolved

    @field_validator("zhis")
    @classmethod
    def check_branches(cls, value: list[str]) -> list[str]:
        if len(value) != 4:
            raise ValueError(f"zhis must hold exactly 4 branches, got {len(value)}")
        resolved = []
        for symbol in value:
            branch = branch_for(symbol)
            if branch is None:
                raise ValueError(f"unknown earthly branch: {symbol!r}")
            resolved.append(branch.chinese)
        return resolved


class ChartInput(BaseModel):
    date: Optional[DateInput] = None
    direct: Optional[DirectInput] = None

    @model_validator(mode="after")
    def check_one_mode(self):
        if (self.date is None) == (self.direct is None):
            raise ValueError("exactly one of 'date' or 'direct' must be given")
        return self

    @classmethod
    def from_date(cls, year: int, month: int, day: int, hour: int, minute: int = 0,
                  longitude: Optional[float] = None,
                  utc_offset: float = astro_calendar.CHINA_UTC_OFFSET,
                  timezone: Optional[str] = None) -> "ChartInput":
        return cls(date=DateInput(year=year, month=month, day=day, hour=hour,
                                  minute=minute, longitude=longitude,
                                  utc_offset=utc_offset, timezone=timezone))

    @classmethod
    def from_pillars(cls, gans: list[str], zhis: list[str]) -> "ChartInput":
        return cls(direct=DirectInput(gans=gans, zhis=zhis))

    @property
    def mode(self) -> str:
        return "date" if self.date is not None else "direct"


def pillars_from_symbols(gans: list[str], zhis: list[str]) -> list[Pillar]:
    return [
        Pillar(stem=stem_for(g), branch=branch_for(z), position=position)
        for g, z, position in zip(gans, zhis, POSITIONS)
    ]


def build_chart(request: Union[ChartInput, Chart]) -> Chart:
    """
    Assemble the four-pillar chart for a request.

    Date mode goes through the calendar resolver; direct mode is a pure
    lookup of the validated symbols. A Chart passes straight through.

    Raises:
        CalendarResolutionError: the birth moment cannot be resolved
    """
    if isinstance(request, Chart):
        return request
    if request.direct is not None:
        pillars = pillars_from_symbols(request.direct.gans, request.direct.zhis)
    else:
        d = request.date
        pillars = astro_calendar.resolve(d.year, d.month, d.day, d.hour, d.minute,
                                         longitude=d.longitude, utc_offset=d.utc_offset,
                                         timezone=d.timezone)
    chart = Chart(pillars=tuple(pillars))
    logger.debug("built %s chart: %s", request.mode,
                 " ".join(p.ganzhi for p in chart.pillars))
    return chart
