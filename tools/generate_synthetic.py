#!/usr/bin/env python3
"""Generate a synthetic score batch for demos.

Usage:
    python tools/generate_synthetic.py --output data/synthetic_class.csv --students 40 --questions 20 --seed 42

Rows follow the upload template (学号, 姓名, 班级, 考试名称, 考试日期, 题1..题N, 总分).
Each student gets an ability level; a few students share a weak block of
consecutive questions and a few lose points on scattered questions, so the
focus-student rules have something to find.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from edumetrics.template import template_headers  # noqa: E402

SURNAMES = ["王", "李", "张", "刘", "陈", "杨", "赵", "黄", "周", "吴"]
GIVEN = ["芳", "明", "伟", "洋", "静", "磊", "悦", "涛", "婷", "强"]


def generate_synthetic_dataset(
    output_path: Path,
    n_students: int = 40,
    n_questions: int = 20,
    full_marks: int = 3,
    seed: int = 42,
    class_name: str = "五年级1班",
    exam_name: str = "期中考试",
    exam_date: str = "2025-05-10",
) -> pd.DataFrame:
    if n_students < 1 or n_questions < 1:
        raise ValueError("n_students and n_questions must be at least 1")

    rng = np.random.default_rng(seed)
    ability = np.clip(rng.normal(0.75, 0.15, size=n_students), 0.05, 1.0)

    block_students = set(rng.choice(n_students, size=max(1, n_students // 8), replace=False).tolist())
    scattered_students = set(rng.choice(n_students, size=max(1, n_students // 8), replace=False).tolist())
    block_start = int(rng.integers(0, max(1, n_questions - 3)))

    records = []
    for idx in range(n_students):
        scores = rng.binomial(full_marks, ability[idx], size=n_questions)
        if idx in block_students:
            scores[block_start : block_start + 3] = 0
        if idx in scattered_students:
            picks = rng.choice(n_questions, size=min(4, n_questions), replace=False)
            scores[picks] = 0
        name = SURNAMES[idx % len(SURNAMES)] + GIVEN[(idx // len(SURNAMES) + idx) % len(GIVEN)]
        row = [f"S{idx + 1:03d}", name, class_name, exam_name, exam_date]
        row.extend(int(s) for s in scores)
        row.append(int(scores.sum()))
        records.append(row)

    result = pd.DataFrame(records, columns=template_headers(n_questions))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    result.to_csv(output_path, index=False)
    return result


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic score batch for demos")
    parser.add_argument("--output", type=Path, default=Path("data/synthetic_class.csv"), help="Where to write the CSV")
    parser.add_argument("--students", type=int, default=40, help="Number of synthetic students")
    parser.add_argument("--questions", type=int, default=20, help="Number of questions")
    parser.add_argument("--full-marks", type=int, default=3, help="Full marks per question")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args(list(argv) if argv is not None else None)

    generate_synthetic_dataset(
        args.output,
        n_students=args.students,
        n_questions=args.questions,
        full_marks=args.full_marks,
        seed=args.seed,
    )
    print(f"Synthetic dataset written to {args.output}")


if __name__ == "__main__":
    main()
