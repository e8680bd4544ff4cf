import json
from pathlib import Path

import pytest

from edumetrics.config import DEFAULT_CONFIG, AnalysisConfig, load_config


def test_defaults_match_reference_constants():
    assert DEFAULT_CONFIG.full_marks_per_question == 3
    assert DEFAULT_CONFIG.pass_fraction == 0.6
    assert DEFAULT_CONFIG.bottom_fraction == 0.1
    assert DEFAULT_CONFIG.total_question_count == 20
    assert DEFAULT_CONFIG.max_total(20) == 60
    assert DEFAULT_CONFIG.pass_threshold(3) == 5.4


def test_from_dict_overrides_and_validates():
    config = AnalysisConfig.from_dict({"full_marks_per_question": "5", "total_question_count": 25})
    assert config.full_marks_per_question == 5.0
    assert config.total_question_count == 25
    assert config.pass_fraction == 0.6

    with pytest.raises(ValueError):
        AnalysisConfig.from_dict({"pass_fraction": 1.5})
    with pytest.raises(ValueError):
        AnalysisConfig.from_dict({"full_marks": 3})
    with pytest.raises(ValueError):
        AnalysisConfig.from_dict({"total_question_count": "many"})


def test_load_config(tmp_path: Path):
    assert load_config(None) is DEFAULT_CONFIG
    assert load_config(tmp_path / "missing.json") is DEFAULT_CONFIG

    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bottom_fraction": 0.2}), encoding="utf-8")
    assert load_config(path).bottom_fraction == 0.2

    path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_as_dict_round_trips():
    config = AnalysisConfig(pass_fraction=0.5)
    assert AnalysisConfig.from_dict(config.as_dict()) == config
