"""
CLI wrapper for analyze_chart() and classical_annotations().

Usage:
    python -m bazi_mbti.run --date YYYY-MM-DD --time HH:MM [--longitude LON] \
        [--utc-offset OFFSET | --timezone ZONE] [--classical] [--verbose]
    python -m bazi_mbti.run --gans 甲乙丙丁 --zhis 子丑寅卯 [--classical]
    python -m bazi_mbti.run --gans Jia Yi Bing Ding --zhis Zi Chou Yin Mao
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from bazi_mbti.astro_calendar import CHINA_UTC_OFFSET, CalendarResolutionError
from bazi_mbti.chart_input import ChartInput
from bazi_mbti.report import analyze_chart, classical_annotations


def _symbols(values) -> list[str]:
    # a single run of Chinese characters, e.g. 甲乙丙丁, is one symbol per character
    if values and len(values) == 1 and not values[0].isascii():
        return list(values[0])
    return list(values or [])


def parse_request(args) -> ChartInput:
    if args.gans or args.zhis:
        return ChartInput.from_pillars(_symbols(args.gans), _symbols(args.zhis))
    year, month, day = (int(part) for part in args.date.split("-"))
    hour, minute = (int(part) for part in args.time.split(":"))
    return ChartInput.from_date(year, month, day, hour, minute,
                                longitude=args.longitude, utc_offset=args.utc_offset,
                                timezone=args.timezone)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Analyse a four-pillar chart.")
    parser.add_argument("--date", help="birth date, YYYY-MM-DD")
    parser.add_argument("--time", default="12:00", help="birth clock time, HH:MM")
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--utc-offset", dest="utc_offset", type=float, default=CHINA_UTC_OFFSET)
    parser.add_argument("--timezone", default=None,
                        help="IANA zone name, e.g. Asia/Shanghai (overrides --utc-offset)")
    parser.add_argument("--gans", nargs="+",
                        help="four stems, year to hour: 甲乙丙丁 or Jia Yi Bing Ding")
    parser.add_argument("--zhis", nargs="+",
                        help="four branches, year to hour: 子丑寅卯 or Zi Chou Yin Mao")
    parser.add_argument("--classical", action="store_true",
                        help="print the classical annotations instead of the analysis")
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if not args.date and not (args.gans or args.zhis):
        parser.error("give either --date or --gans/--zhis")

    try:
        request = parse_request(args)
        if args.classical:
            result = classical_annotations(request).to_dict()
        else:
            result = analyze_chart(request).to_dict()
    except (ValidationError, CalendarResolutionError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
