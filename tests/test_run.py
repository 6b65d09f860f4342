import json

import pytest

from bazi_mbti.cognitive import MBTI_STACKS
from bazi_mbti.run import main


def test_direct_mode_prints_report(capsys):
    assert main(["--gans", "甲乙丙丁", "--zhis", "子丑寅卯"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["mbti_label"] in MBTI_STACKS


def test_classical_flag(capsys):
    assert main(["--gans", "甲乙丙丁", "--zhis", "子丑寅卯", "--classical"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["day_master"]["stem"] == "丙"


def test_date_mode(capsys):
    assert main(["--date", "1990-01-01", "--time", "12:00", "--longitude", "116.4"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["pillars"]["year"] == {"stem": "己", "branch": "巳"}


def test_bad_input_exits_nonzero(capsys):
    assert main(["--gans", "甲乙丙", "--zhis", "子丑寅卯"]) == 1
    assert "error" in capsys.readouterr().err
    assert main(["--date", "2023-02-30"]) == 1


def test_missing_input_is_usage_error():
    with pytest.raises(SystemExit):
        main([])


def test_pinyin_pillars_match_chinese(capsys):
    assert main(["--gans", "甲乙丙丁", "--zhis", "子丑寅卯"]) == 0
    chinese = json.loads(capsys.readouterr().out)
    assert main(["--gans", "Jia", "Yi", "Bing", "Ding",
                 "--zhis", "Zi", "Chou", "Yin", "Mao"]) == 0
    pinyin = json.loads(capsys.readouterr().out)
    assert pinyin == chinese


def test_unresolvable_moments_exit_nonzero(capsys):
    assert main(["--date", "2000-01-01", "--utc-offset", "1e9"]) == 1
    assert "error" in capsys.readouterr().err
    assert main(["--date", "9999-12-31", "--time", "20:00", "--utc-offset", "-8"]) == 1
