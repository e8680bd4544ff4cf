import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class AnalysisConfig:
    """Numeric assumptions shared by every aggregation step."""

    full_marks_per_question: float = 3.0
    pass_fraction: float = 0.6
    bottom_fraction: float = 0.1
    # Coverage denominator. Fixed on purpose and independent of the batch's
    # real question count, so a 10-question batch tops out at 50% per point.
    total_question_count: int = 20
    early_question_cutoff: int = 10
    max_labels_per_question: int = 2

    def __post_init__(self) -> None:
        if self.full_marks_per_question <= 0:
            raise ValueError("full_marks_per_question must be positive")
        if not 0 <= self.pass_fraction <= 1:
            raise ValueError("pass_fraction must be between 0 and 1")
        if not 0 <= self.bottom_fraction <= 1:
            raise ValueError("bottom_fraction must be between 0 and 1")
        if self.total_question_count <= 0:
            raise ValueError("total_question_count must be positive")
        if self.early_question_cutoff < 0:
            raise ValueError("early_question_cutoff must be non-negative")
        if self.max_labels_per_question < 1:
            raise ValueError("max_labels_per_question must be at least 1")

    @classmethod
    def from_dict(cls, mapping: Dict[str, object]) -> "AnalysisConfig":
        unknown = sorted(set(mapping) - set(cls.__dataclass_fields__))
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        defaults = cls()
        try:
            return cls(
                full_marks_per_question=float(mapping.get("full_marks_per_question", defaults.full_marks_per_question)),
                pass_fraction=float(mapping.get("pass_fraction", defaults.pass_fraction)),
                bottom_fraction=float(mapping.get("bottom_fraction", defaults.bottom_fraction)),
                total_question_count=int(mapping.get("total_question_count", defaults.total_question_count)),
                early_question_cutoff=int(mapping.get("early_question_cutoff", defaults.early_question_cutoff)),
                max_labels_per_question=int(mapping.get("max_labels_per_question", defaults.max_labels_per_question)),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid analysis configuration: {exc}") from exc

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)

    def max_total(self, question_count: int) -> float:
        return question_count * self.full_marks_per_question

    def pass_threshold(self, question_count: int) -> float:
        # Rounded so 0.6 * 9 compares equal to a total of 5.4.
        return round(self.pass_fraction * self.max_total(question_count), 9)


DEFAULT_CONFIG = AnalysisConfig()


def load_config(path: Optional[Path]) -> AnalysisConfig:
    if path is None or not path.exists():
        return DEFAULT_CONFIG

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Analysis config JSON must be an object")
    return AnalysisConfig.from_dict(raw)
