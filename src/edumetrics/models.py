from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .concepts import ResolvedKnowledgeMap


def coerce_score(value: object) -> float:
    """Return ``value`` as a float, or 0.0 when it is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


@dataclass(frozen=True)
class ScoreRow:
    """One student's record for a single exam batch."""

    student_id: str
    name: str
    scores: Tuple[float, ...]
    total: float
    class_name: str = ""
    exam_name: str = ""
    exam_date: str = ""

    @classmethod
    def create(
        cls,
        student_id: object,
        name: object,
        scores: Iterable[object],
        total: object = None,
        class_name: object = "",
        exam_name: object = "",
        exam_date: object = "",
    ) -> "ScoreRow":
        cleaned = tuple(coerce_score(s) for s in scores)
        final_total = coerce_score(total) if _is_numeric(total) else sum(cleaned)
        return cls(
            student_id=_text(student_id),
            name=_text(name),
            scores=cleaned,
            total=final_total,
            class_name=_text(class_name),
            exam_name=_text(exam_name),
            exam_date=_text(exam_date),
        )

    @property
    def question_count(self) -> int:
        return len(self.scores)

    def zero_questions(self) -> List[int]:
        return [idx + 1 for idx, score in enumerate(self.scores) if score == 0]


def _text(value: object) -> str:
    if value is None or _is_nan(value):
        return ""
    return str(value).strip()


def _is_nan(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _is_numeric(value: object) -> bool:
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return False
    return math.isfinite(number)


class MasteryLevel(str, Enum):
    NEEDS_ATTENTION = "需关注"
    FAIR = "一般"
    GOOD = "良好"
    EXCELLENT = "优秀"

    @property
    def rank(self) -> int:
        return list(MasteryLevel).index(self)

    @classmethod
    def from_ratio(cls, ratio: float) -> "MasteryLevel":
        # 2.4 / 3 is 0.7999999999999999 in binary floating point.
        ratio = round(ratio, 9)
        if ratio >= 0.9:
            return cls.EXCELLENT
        if ratio >= 0.8:
            return cls.GOOD
        if ratio >= 0.6:
            return cls.FAIR
        return cls.NEEDS_ATTENTION


@dataclass(frozen=True)
class KnowledgePointStat:
    knowledge_point: str
    question_numbers: Tuple[int, ...]
    coverage_percent: int
    average_score: float
    mastery_level: MasteryLevel
    evidence: str

    def as_dict(self) -> Dict[str, object]:
        return {
            "knowledge_point": self.knowledge_point,
            "question_numbers": list(self.question_numbers),
            "coverage_percent": self.coverage_percent,
            "average_score": self.average_score,
            "mastery_level": self.mastery_level.value,
            "evidence": self.evidence,
        }


@dataclass(frozen=True)
class ClassStats:
    total_students: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    pass_rate: float = 0.0

    def as_dict(self) -> Dict[str, object]:
        return {
            "total_students": self.total_students,
            "average_score": self.average_score,
            "highest_score": self.highest_score,
            "lowest_score": self.lowest_score,
            "pass_rate": self.pass_rate,
        }


@dataclass(frozen=True)
class FocusStudent:
    student_id: str
    name: str
    total: float
    weak_questions: Tuple[int, ...]
    reason: str
    advice: str
    weak_knowledge_points: Tuple[str, ...] = ()

    def with_knowledge_points(self, points: Iterable[str]) -> "FocusStudent":
        return replace(self, weak_knowledge_points=tuple(points))

    def as_dict(self) -> Dict[str, object]:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "total": self.total,
            "weak_questions": list(self.weak_questions),
            "reason": self.reason,
            "advice": self.advice,
            "weak_knowledge_points": list(self.weak_knowledge_points),
        }


@dataclass(frozen=True)
class AnalysisReport:
    """Everything the report renderers need from one analysis run."""

    class_stats: ClassStats
    knowledge_points: Tuple[KnowledgePointStat, ...] = ()
    focus_students: Tuple[FocusStudent, ...] = ()
    unknown_labels: Tuple[str, ...] = ()
    knowledge_map_status: str = "resolved"
    question_count: int = 0
    knowledge_map: ResolvedKnowledgeMap = field(default_factory=ResolvedKnowledgeMap)
    config: Optional[Dict[str, object]] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "class_stats": self.class_stats.as_dict(),
            "knowledge_points": [kp.as_dict() for kp in self.knowledge_points],
            "focus_students": [fs.as_dict() for fs in self.focus_students],
            "unknown_labels": list(self.unknown_labels),
            "knowledge_map_status": self.knowledge_map_status,
            "question_count": self.question_count,
            "knowledge_map": self.knowledge_map.as_dict(),
            "config": dict(self.config) if self.config else {},
        }
