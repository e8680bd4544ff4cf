import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Sequence

import pandas as pd

from .concepts import KnowledgeMap, ResolvedKnowledgeMap
from .config import DEFAULT_CONFIG, AnalysisConfig
from .models import ClassStats, KnowledgePointStat, MasteryLevel, ScoreRow

logger = logging.getLogger(__name__)


def round_half_up(value: float, digits: int = 2) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def score_matrix(rows: Sequence[ScoreRow]) -> pd.DataFrame:
    """Students x questions frame; columns are 1-based question numbers."""
    if not rows:
        return pd.DataFrame()
    width = max(row.question_count for row in rows)
    data = [list(row.scores) + [0.0] * (width - row.question_count) for row in rows]
    return pd.DataFrame(data, columns=list(range(1, width + 1)), dtype=float)


def question_stats(rows: Sequence[ScoreRow]) -> pd.DataFrame:
    matrix = score_matrix(rows)
    if matrix.empty:
        return pd.DataFrame(columns=["question", "average", "zero_count"])

    students = len(matrix)
    return pd.DataFrame(
        {
            "question": matrix.columns,
            "average": [matrix[q].sum() / students for q in matrix.columns],
            "zero_count": [int((matrix[q] == 0).sum()) for q in matrix.columns],
        }
    )


def _evidence(knowledge_point: str, subset: pd.DataFrame) -> str:
    parts = [
        f"题{int(row.question)}中{int(row.zero_count)}名学生得0分"
        for row in subset.itertuples(index=False)
        if row.zero_count > 0
    ]
    if not parts:
        return f"{knowledge_point}相关题目表现良好，无学生得0分"
    return "，".join(parts)


def _group_questions(
    knowledge_map: ResolvedKnowledgeMap, question_count: int, total_question_count: int
) -> Dict[str, List[int]]:
    groups: Dict[str, List[int]] = {}
    for question, labels in knowledge_map.questions.items():
        if question > question_count:
            logger.warning("Knowledge map references question %s but the batch only has %s", question, question_count)
            continue
        if question > total_question_count:
            logger.warning("Ignoring question %s beyond the configured %s questions", question, total_question_count)
            continue
        for label in labels:
            groups.setdefault(label, []).append(question)
    return groups


def knowledge_point_stats(
    rows: Sequence[ScoreRow],
    knowledge_map: KnowledgeMap,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[KnowledgePointStat]:
    """Per knowledge point coverage, average score, mastery tier and evidence.

    The point's average is the mean of its questions' class averages, so every
    question weighs the same regardless of how many points share it. Results
    are ordered by average score, highest first.
    """

    if not isinstance(knowledge_map, ResolvedKnowledgeMap):
        logger.info("Knowledge map is not resolved yet; skipping knowledge point statistics")
        return []
    if not rows or knowledge_map.is_empty():
        return []

    per_question = question_stats(rows).set_index("question", drop=False)
    groups = _group_questions(knowledge_map, len(per_question), config.total_question_count)

    results = []
    for knowledge_point, questions in groups.items():
        subset = per_question.loc[questions]
        raw_average = float(subset["average"].mean())
        coverage = min(100, int(round_half_up(len(questions) / config.total_question_count * 100, 0)))
        results.append(
            KnowledgePointStat(
                knowledge_point=knowledge_point,
                question_numbers=tuple(questions),
                coverage_percent=coverage,
                average_score=round_half_up(raw_average),
                mastery_level=MasteryLevel.from_ratio(raw_average / config.full_marks_per_question),
                evidence=_evidence(knowledge_point, subset),
            )
        )

    return sorted(results, key=lambda stat: -stat.average_score)


def class_summary(rows: Sequence[ScoreRow], config: AnalysisConfig = DEFAULT_CONFIG) -> ClassStats:
    if not rows:
        return ClassStats()

    totals = pd.Series([row.total for row in rows], dtype=float)
    question_count = max(row.question_count for row in rows)
    threshold = config.pass_threshold(question_count)

    highest = float(totals.max())
    lowest = float(totals.min())
    average = min(max(round_half_up(totals.sum() / len(totals)), lowest), highest)
    pass_rate = round_half_up((totals >= threshold).sum() / len(totals) * 100)

    stats = ClassStats(
        total_students=len(rows),
        average_score=average,
        highest_score=highest,
        lowest_score=lowest,
        pass_rate=pass_rate,
    )
    logger.debug("Class summary: %s", stats)
    return stats


def knowledge_overview(rows: Sequence[ScoreRow], knowledge_map: KnowledgeMap, question_count: int) -> pd.DataFrame:
    """Questions tagged per point and the point's average score per question, weakest first."""

    columns = ["knowledge_point", "questions", "avg_score_per_question"]
    if not isinstance(knowledge_map, ResolvedKnowledgeMap) or question_count <= 0:
        return pd.DataFrame(columns=columns)

    per_question = question_stats(rows).set_index("question")
    totals: Dict[str, List[float]] = {}
    for question in range(1, question_count + 1):
        labels = knowledge_map.labels_for(question)
        if not labels:
            continue
        mean = float(per_question.at[question, "average"]) if question in per_question.index else 0.0
        for label in labels:
            totals.setdefault(label, []).append(mean)

    if not totals:
        return pd.DataFrame(columns=columns)

    result = pd.DataFrame(
        [
            {
                "knowledge_point": label,
                "questions": len(means),
                "avg_score_per_question": round_half_up(sum(means) / len(means)),
            }
            for label, means in totals.items()
        ]
    )
    return result.sort_values(by="avg_score_per_question", kind="stable").reset_index(drop=True)


def score_distribution(rows: Sequence[ScoreRow], bins: int = 10) -> pd.DataFrame:
    metric = pd.Series([row.total for row in rows], dtype=float)

    if metric.empty:
        return pd.DataFrame(columns=["bin", "count"])

    counts, edges = pd.cut(metric, bins=bins, include_lowest=True, retbins=True, right=False)
    bucket = counts.value_counts().sort_index()
    labels = [f"{float(edge_start):.1f}-{float(edge_end):.1f}" for edge_start, edge_end in zip(edges[:-1], edges[1:])]
    return pd.DataFrame({"bin": labels, "count": bucket.tolist()})
