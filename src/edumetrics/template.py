import csv
import io
from typing import List, Sequence

from .io import IDENTITY_COLUMNS, TOTAL_COLUMN

EXAMPLE_STUDENTS = [
    (["A001", "张三", "初二1班", "期中考试", "2025-05-10"], [8, 7, 9]),
    (["A002", "李四", "初二1班", "期中考试", "2025-05-10"], [5, 6, 4]),
]


def template_headers(num_questions: int) -> List[str]:
    return IDENTITY_COLUMNS + [f"题{i}" for i in range(1, num_questions + 1)] + [TOTAL_COLUMN]


def _example_scores(seed_scores: Sequence[int], num_questions: int) -> List[int]:
    return [seed_scores[i] if i < len(seed_scores) else 0 for i in range(num_questions)]


def score_template_csv(num_questions: int = 10) -> str:
    """CSV text for the score upload template with two example students."""
    try:
        count = max(1, int(num_questions) or 10)
    except (TypeError, ValueError):
        count = 10

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(template_headers(count))
    for identity, seed_scores in EXAMPLE_STUDENTS:
        scores = _example_scores(seed_scores, count)
        writer.writerow(identity + scores + [sum(scores)])
    return buffer.getvalue().rstrip("\n")
