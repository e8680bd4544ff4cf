import logging
from typing import Mapping, Optional, Sequence, Union

from .concepts import KnowledgeMap, PendingKnowledgeMap, ResolvedKnowledgeMap, whitelist_map
from .config import DEFAULT_CONFIG, AnalysisConfig
from .io import validate_score_rows
from .metrics import class_summary, knowledge_point_stats
from .models import AnalysisReport, ScoreRow
from .recommendations import attach_weak_knowledge_points, select_focus_students
from .taxonomy import TaxonomyIndex, build_index

logger = logging.getLogger(__name__)


def run_analysis(
    rows: Sequence[ScoreRow],
    knowledge_map: Union[KnowledgeMap, Mapping[object, Sequence[object]], None],
    index: Optional[TaxonomyIndex] = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> AnalysisReport:
    """Compute the full statistics report for one uploaded batch.

    Raises ``ScoreTableError`` when rows disagree on the question count. Every
    other input problem degrades to empty or zero results.
    """

    rows = tuple(rows)
    question_count = validate_score_rows(rows)
    index = index if index is not None else build_index()

    if isinstance(knowledge_map, PendingKnowledgeMap):
        logger.info("Knowledge map still pending extraction; knowledge statistics left empty")
        cleaned: KnowledgeMap = knowledge_map
        unknown: tuple = ()
        status = "pending"
    else:
        result = whitelist_map(knowledge_map, index, limit=config.max_labels_per_question)
        cleaned = result.cleaned
        unknown = result.unknown
        status = "resolved"

    focus = attach_weak_knowledge_points(select_focus_students(rows, config), cleaned)
    report = AnalysisReport(
        class_stats=class_summary(rows, config),
        knowledge_points=tuple(knowledge_point_stats(rows, cleaned, config)),
        focus_students=tuple(focus),
        unknown_labels=unknown,
        knowledge_map_status=status,
        question_count=question_count,
        knowledge_map=cleaned if isinstance(cleaned, ResolvedKnowledgeMap) else ResolvedKnowledgeMap(),
        config=config.as_dict(),
    )
    logger.debug(
        "Analysis finished: %d students, %d knowledge points, %d focus students",
        report.class_stats.total_students,
        len(report.knowledge_points),
        len(report.focus_students),
    )
    return report
