"""
Calendar utilities for pillar resolution.
Handles true solar time correction, the Li Chun year boundary,
solar-longitude month boundaries and the sexagenary day count.

The birth moment is taken as clock time at a fixed UTC offset (China
Standard Time by default) or in a named IANA zone. Year and month pillars
follow the Sun's actual ecliptic longitude; the hour pillar follows local
solar time when a longitude is supplied.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import swisseph as swe

from bazi_mbti.bazi import EARTHLY_BRANCHES, HEAVENLY_STEMS, Pillar

logger = logging.getLogger(__name__)

STANDARD_MERIDIAN = 120.0
CHINA_UTC_OFFSET = 8.0

# Moshier ephemeris is built into the library; no data files needed.
_EPHE_FLAGS = swe.FLG_MOSEPH

LI_CHUN_LONGITUDE = 315.0


class CalendarResolutionError(ValueError):
    """Raised when a clock time cannot be turned into four pillars."""


def lmt_correction(longitude: float, standard_meridian: float = STANDARD_MERIDIAN) -> float:
    """
    Calculate the solar time correction in minutes.

    China uses a single timezone based on 120°E. Every 15° of longitude
    is one hour of solar time, so the shift is (longitude - 120) / 15 * 60.

    Example:
        Beijing (116.4°E): correction = (116.4 - 120.0) * 4 = -14.4 min
        So 12:00 clock time → 11:45:36 solar time
    """
    return (longitude - standard_meridian) / 15.0 * 60.0


def apply_lmt(clock_time: datetime, longitude: Optional[float],
              standard_meridian: float = STANDARD_MERIDIAN) -> datetime:
    """Convert clock time to local solar time. No longitude, no shift."""
    if longitude is None:
        return clock_time
    correction_minutes = lmt_correction(longitude, standard_meridian)
    if abs(correction_minutes) < 1e-6:
        return clock_time
    return clock_time + timedelta(minutes=correction_minutes)


def utc_offset_for(tz_name: str, clock: datetime) -> tuple[float, float, bool]:
    """
    Determine the UTC offset of a named zone at a local clock time.
    Detects historical DST (e.g., China 1986-1991).

    Returns:
        (clock_offset, standard_offset, dst_detected)

        clock_offset:    what the clock was actually set to (includes DST if active)
        standard_offset: the zone's standard (non-DST) offset

    Raises:
        CalendarResolutionError: the zone name is unknown
    """
    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise CalendarResolutionError(f"Unknown timezone {tz_name!r}") from exc

    local_dt = clock.replace(tzinfo=zone)
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst_seconds = local_dt.dst()
    dst_detected = dst_seconds is not None and dst_seconds.total_seconds() > 0
    if dst_detected:
        standard_offset = clock_offset - dst_seconds.total_seconds() / 3600
    else:
        standard_offset = clock_offset
    return clock_offset, standard_offset, dst_detected


def _julian_ut(moment: datetime, utc_offset: float) -> float:
    utc = moment - timedelta(hours=utc_offset)
    hour = utc.hour + utc.minute / 60.0 + utc.second / 3600.0
    return swe.julday(utc.year, utc.month, utc.day, hour)


def sun_longitude(jd_ut: float) -> float:
    """Apparent ecliptic longitude of the Sun in degrees."""
    position, _ = swe.calc_ut(jd_ut, swe.SUN, _EPHE_FLAGS)
    return position[0] % 360.0


def li_chun_jd(year: int) -> float:
    """Julian Day (UT) when the Sun reaches 315° in the given Gregorian year."""
    return swe.solcross_ut(LI_CHUN_LONGITUDE, swe.julday(year, 1, 1, 0), _EPHE_FLAGS)


def sun_longitude_to_month_branch_index(sun_lon: float) -> int:
    """
    Month branch index for a solar longitude.

    Each month opens on a Jie term, every 30° from Li Chun (315°, Yin month)
    onwards, so 345° opens Mao, 15° Chen, ... and 285° (Xiao Han) opens Chou.
    """
    months_since_li_chun = int(((sun_lon - LI_CHUN_LONGITUDE) % 360) // 30)
    return (months_since_li_chun + 2) % 12


# ============================================================
# PILLAR COMPUTATION
# ============================================================

def year_pillar(effective_year: int) -> Pillar:
    """
    Compute the Year Pillar for a year that already starts at Li Chun.

    Year 4 CE was Jia Zi, the start of the cycle.
    """
    stem_index = (effective_year - 4) % 10
    branch_index = (effective_year - 4) % 12
    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="year",
    )


def month_pillar(year_stem_index: int, month_branch_index: int) -> Pillar:
    """
    Month pillar by the Five Tigers rule (五虎遁).

    The Yin month of a Jia or Ji year is Bing Yin; each later year stem pair
    shifts the starting stem on by two (Wu, Geng, Ren, Jia).
    """
    start_stem = (year_stem_index % 5) * 2 + 2
    months_from_tiger = (month_branch_index - 2) % 12
    stem_index = (start_stem + months_from_tiger) % 10

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[month_branch_index],
        position="month",
    )


def day_index(date: datetime) -> int:
    """
    Sexagenary index (0 = Jia Zi) of a civil date.

    The 60-day cycle maps to the Julian Day Number with a fixed offset:
    (JDN + 49) % 60. Checked against 1949-10-01 = Jia Zi and
    2000-01-01 = Wu Wu.
    """
    jdn = int(swe.julday(date.year, date.month, date.day, 12.0))
    return (jdn + 49) % 60


def day_pillar(date: datetime) -> Pillar:
    sexagenary = day_index(date)
    return Pillar(
        stem=HEAVENLY_STEMS[sexagenary % 10],
        branch=EARTHLY_BRANCHES[sexagenary % 12],
        position="day",
    )


def hour_pillar(solar_time: datetime) -> Pillar:
    """
    Compute the Hour Pillar using the Five Rats Escape (Wu Shu Dun) formula.

    Chinese hours (shi chen) are 2-hour blocks, 23:00-00:59 = Zi (Rat).
    From 23:00 the hour stem already counts from the next day's stem.
    """
    hour = solar_time.hour
    branch_index = ((hour + 1) // 2) % 12

    stem_day = solar_time + timedelta(days=1) if hour == 23 else solar_time
    day_stem_index = day_index(stem_day) % 10
    # Jia/Ji day → Jia Zi hour, Yi/Geng → Bing Zi, Bing/Xin → Wu Zi, ...
    start_stem = (day_stem_index % 5) * 2
    stem_index = (start_stem + branch_index) % 10

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="hour",
    )


def resolve(year: int, month: int, day: int, hour: int, minute: int = 0,
            longitude: Optional[float] = None,
            utc_offset: float = CHINA_UTC_OFFSET,
            timezone: Optional[str] = None,
            standard_meridian: float = STANDARD_MERIDIAN) -> list[Pillar]:
    """
    Resolve a clock time into the four pillars.

    Args:
        year, month, day, hour, minute: local clock time
        longitude: birth longitude (east positive); when given, the hour
            pillar uses true solar time
        utc_offset: the clock's offset from UTC in hours
        timezone: IANA zone name; overrides utc_offset and standard_meridian,
            and strips any DST hour before the solar time correction
        standard_meridian: meridian of the clock's standard time

    Returns:
        [year, month, day, hour] pillars

    Raises:
        CalendarResolutionError: the date/time or the zone does not exist
    """
    try:
        clock = datetime(year, month, day, hour, minute)
    except (TypeError, ValueError) as exc:
        raise CalendarResolutionError(
            f"Cannot resolve {year}-{month}-{day} {hour}:{minute}: {exc}"
        ) from exc

    standard_clock = clock
    if timezone is not None:
        utc_offset, standard_offset, dst_detected = utc_offset_for(timezone, clock)
        standard_meridian = standard_offset * 15.0
        if dst_detected:
            standard_clock = clock - timedelta(hours=utc_offset - standard_offset)
            logger.debug("%s: DST active, standard time %s", timezone,
                         standard_clock.isoformat())

    # offsets and the late Rat hour can push past datetime's 1..9999 range
    try:
        jd_ut = _julian_ut(clock, utc_offset)

        effective_year = clock.year if jd_ut >= li_chun_jd(clock.year) else clock.year - 1
        yp = year_pillar(effective_year)

        month_branch_index = sun_longitude_to_month_branch_index(sun_longitude(jd_ut))
        mp = month_pillar(yp.stem.index, month_branch_index)

        dp = day_pillar(clock)

        solar_time = apply_lmt(standard_clock, longitude, standard_meridian)
        hp = hour_pillar(solar_time)
    except (OverflowError, swe.Error) as exc:
        raise CalendarResolutionError(
            f"Cannot resolve {clock.isoformat()} at UTC{utc_offset:+g}: {exc}"
        ) from exc

    logger.debug("resolved %s (solar %s) -> %s %s %s %s", clock.isoformat(),
                 solar_time.isoformat(), yp.ganzhi, mp.ganzhi, dp.ganzhi, hp.ganzhi)
    return [yp, mp, dp, hp]
