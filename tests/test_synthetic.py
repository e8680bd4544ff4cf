from pathlib import Path

import pytest

from edumetrics.io import read_score_csv
from tools.generate_synthetic import generate_synthetic_dataset


def test_generate_synthetic_dataset_follows_template(tmp_path: Path):
    output = tmp_path / "synthetic.csv"
    result = generate_synthetic_dataset(output, n_students=12, n_questions=8, seed=123)

    assert output.exists()
    assert list(result.columns[:5]) == ["学号", "姓名", "班级", "考试名称", "考试日期"]
    assert result.columns[-1] == "总分"
    assert len(result) == 12
    assert result["学号"].is_unique

    rows = read_score_csv(output)
    assert all(row.question_count == 8 for row in rows)
    assert all(0 <= s <= 3 for row in rows for s in row.scores)
    assert all(row.total == sum(row.scores) for row in rows)


def test_generate_synthetic_dataset_is_seeded(tmp_path: Path):
    first = generate_synthetic_dataset(tmp_path / "a.csv", n_students=5, seed=7)
    second = generate_synthetic_dataset(tmp_path / "b.csv", n_students=5, seed=7)
    assert first.equals(second)


def test_generate_synthetic_dataset_rejects_empty(tmp_path: Path):
    with pytest.raises(ValueError):
        generate_synthetic_dataset(tmp_path / "c.csv", n_students=0)
