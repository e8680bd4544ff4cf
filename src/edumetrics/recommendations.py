import logging
import math
from typing import Iterable, List, Sequence, Set

from .concepts import KnowledgeMap, weak_knowledge_points
from .config import DEFAULT_CONFIG, AnalysisConfig
from .models import FocusStudent, ScoreRow

logger = logging.getLogger(__name__)

GENERIC_ADVICE = "建议全面复习薄弱环节"
NO_WEAKNESS_ADVICE = "继续保持"
NO_WEAKNESS_REASON = "表现良好"


def consecutive_groups(numbers: Iterable[int]) -> List[List[int]]:
    """Maximal runs of at least two consecutive question numbers."""
    ordered = sorted(set(numbers))
    groups: List[List[int]] = []
    current: List[int] = []
    for number in ordered:
        if current and number == current[-1] + 1:
            current.append(number)
            continue
        if len(current) >= 2:
            groups.append(current)
        current = [number]
    if len(current) >= 2:
        groups.append(current)
    return groups


def student_reason(weak_questions: Sequence[int]) -> str:
    if not weak_questions:
        return NO_WEAKNESS_REASON
    question_list = "、".join(str(q) for q in weak_questions)
    return f"题{question_list}得0分，共{len(weak_questions)}道题失分"


def weakness_advice(weak_questions: Sequence[int], config: AnalysisConfig = DEFAULT_CONFIG) -> str:
    """Concatenate every advice clause that applies to the zero-scored questions."""

    if not weak_questions:
        return NO_WEAKNESS_ADVICE

    clauses = []
    groups = consecutive_groups(weak_questions)
    if groups:
        joined = "，".join("、".join(str(q) for q in group) for group in groups)
        clauses.append(f"连续失分题目：{joined}，建议系统学习相关知识点")

    if len(weak_questions) > 3 and not groups:
        clauses.append("失分题目分散，建议加强基础训练和细心程度")

    cutoff = config.early_question_cutoff
    early = [q for q in weak_questions if q <= cutoff]
    late = [q for q in weak_questions if q > cutoff]
    if early:
        clauses.append(f"前{cutoff}题失分{len(early)}道，建议加强基础计算能力")
    if late:
        clauses.append(f"后{cutoff}题失分{len(late)}道，建议加强逻辑推理和综合应用能力")

    if len(weak_questions) <= 3:
        clauses.append("失分较少，建议重点攻克这几道题，争取满分")
    elif len(weak_questions) <= 6:
        clauses.append("失分适中，建议分阶段提升，先攻克基础题")
    else:
        clauses.append("失分较多，建议全面复习，从基础开始系统学习")

    return "；".join(clauses) if clauses else GENERIC_ADVICE


def below_threshold(rows: Sequence[ScoreRow], config: AnalysisConfig = DEFAULT_CONFIG) -> Set[int]:
    """Row positions whose total is at or below the pass line of their own maximum."""
    flagged = set()
    for position, row in enumerate(rows):
        if config.max_total(row.question_count) > 0 and row.total <= config.pass_threshold(row.question_count):
            flagged.add(position)
    return flagged


def bottom_percentile(rows: Sequence[ScoreRow], config: AnalysisConfig = DEFAULT_CONFIG) -> Set[int]:
    """Row positions of the lowest-scoring fraction of the batch, at least one."""
    if not rows:
        return set()
    count = max(1, math.ceil(round(len(rows) * config.bottom_fraction, 9)))
    ordered = sorted(range(len(rows)), key=lambda position: rows[position].total)
    return set(ordered[:count])


def select_focus_students(rows: Sequence[ScoreRow], config: AnalysisConfig = DEFAULT_CONFIG) -> List[FocusStudent]:
    if not rows:
        return []

    rule_a = below_threshold(rows, config)
    rule_b = bottom_percentile(rows, config)
    flagged = sorted(rule_a | rule_b, key=lambda position: (rows[position].total, position))
    logger.debug("Focus students: %d below threshold, %d in bottom percentile, %d total", len(rule_a), len(rule_b), len(flagged))

    students = []
    for position in flagged:
        row = rows[position]
        weak = row.zero_questions()
        students.append(
            FocusStudent(
                student_id=row.student_id,
                name=row.name,
                total=row.total,
                weak_questions=tuple(weak),
                reason=student_reason(weak),
                advice=weakness_advice(weak, config),
            )
        )
    return students


def attach_weak_knowledge_points(students: Iterable[FocusStudent], knowledge_map: KnowledgeMap) -> List[FocusStudent]:
    return [
        student.with_knowledge_points(weak_knowledge_points(student.weak_questions, knowledge_map))
        for student in students
    ]
