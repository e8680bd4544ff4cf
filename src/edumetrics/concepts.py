from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .taxonomy import TaxonomyIndex

logger = logging.getLogger(__name__)

MAX_LABELS_PER_QUESTION = 2


@dataclass(frozen=True)
class ResolvedKnowledgeMap:
    """Question number -> knowledge point labels. May be empty."""

    questions: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)

    def labels_for(self, question: int) -> Tuple[str, ...]:
        return self.questions.get(question, ())

    def is_empty(self) -> bool:
        return not self.questions

    def as_dict(self) -> Dict[str, List[str]]:
        return {str(q): list(labels) for q, labels in self.questions.items()}


@dataclass(frozen=True)
class PendingKnowledgeMap:
    """A map that has not been extracted yet; only the exam preview text is known."""

    preview: str = ""


KnowledgeMap = Union[ResolvedKnowledgeMap, PendingKnowledgeMap]


@dataclass(frozen=True)
class WhitelistResult:
    cleaned: ResolvedKnowledgeMap
    unknown: Tuple[str, ...]


def question_number(key: object) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if key > 0 else None
    text = str(key).strip()
    if not text.isdigit():
        return None
    number = int(text)
    return number if number > 0 else None


def normalize_label(label: object, index: TaxonomyIndex) -> Optional[str]:
    """Resolve one label to its canonical name by exact (case/space-insensitive) match."""
    if not label:
        return None
    return index.lookup(label)


def normalize_labels(
    labels: Iterable[object],
    index: TaxonomyIndex,
    limit: int = MAX_LABELS_PER_QUESTION,
) -> List[str]:
    resolved: List[str] = []
    for label in labels:
        canonical = normalize_label(label, index)
        if canonical and canonical not in resolved:
            resolved.append(canonical)
        if len(resolved) >= limit:
            break
    return resolved


def whitelist_map(
    raw_map: Union[Mapping[object, Sequence[object]], ResolvedKnowledgeMap, None],
    index: TaxonomyIndex,
    limit: int = MAX_LABELS_PER_QUESTION,
) -> WhitelistResult:
    """Keep only questions whose labels resolve against the catalog.

    Questions with no resolvable label are dropped; their raw labels are
    collected in ``unknown`` so callers can report them.
    """

    if isinstance(raw_map, ResolvedKnowledgeMap):
        raw_map = raw_map.questions
    if not isinstance(raw_map, Mapping):
        return WhitelistResult(cleaned=ResolvedKnowledgeMap(), unknown=())

    cleaned: Dict[int, Tuple[str, ...]] = {}
    unknown: List[str] = []

    for raw_key, raw_labels in raw_map.items():
        number = question_number(raw_key)
        if number is None:
            logger.debug("Ignoring knowledge map key %r: not a question number", raw_key)
            continue
        if isinstance(raw_labels, str):
            labels = [raw_labels]
        else:
            labels = list(raw_labels) if isinstance(raw_labels, (list, tuple)) else []
        resolved = normalize_labels(labels, index, limit=limit)
        if resolved:
            merged = list(cleaned.get(number, ()))
            for name in resolved:
                if name not in merged and len(merged) < limit:
                    merged.append(name)
            cleaned[number] = tuple(merged)
            continue
        for label in labels:
            text = "" if label is None else str(label)
            if text.strip() and text not in unknown:
                unknown.append(text)

    if unknown:
        logger.info("Dropped %d knowledge labels outside the catalog: %s", len(unknown), ", ".join(unknown))
    ordered = {q: cleaned[q] for q in sorted(cleaned)}
    return WhitelistResult(cleaned=ResolvedKnowledgeMap(ordered), unknown=tuple(unknown))


def weak_knowledge_points(weak_questions: Iterable[int], knowledge_map: KnowledgeMap) -> List[str]:
    if not isinstance(knowledge_map, ResolvedKnowledgeMap):
        return []
    points: List[str] = []
    for question in weak_questions:
        for name in knowledge_map.labels_for(question):
            if name not in points:
                points.append(name)
    return points
