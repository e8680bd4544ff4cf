from typing import Dict, List

import pandas as pd

from .config import DEFAULT_CONFIG, AnalysisConfig
from .io import IDENTITY_COLUMNS, TOTAL_COLUMN


def question_columns(df: pd.DataFrame) -> List[str]:
    return list(df.columns[len(IDENTITY_COLUMNS) : -1]) if len(df.columns) > len(IDENTITY_COLUMNS) + 1 else []


def check_required_columns(df: pd.DataFrame) -> Dict[str, bool]:
    return {col: col in df.columns for col in IDENTITY_COLUMNS + [TOTAL_COLUMN]}


def check_missing_identifiers(df: pd.DataFrame) -> int:
    if IDENTITY_COLUMNS[0] not in df.columns:
        return len(df)
    return int((df[IDENTITY_COLUMNS[0]].astype(str).str.strip() == "").sum())


def check_duplicate_ids(df: pd.DataFrame) -> int:
    if IDENTITY_COLUMNS[0] not in df.columns:
        return 0
    ids = df[IDENTITY_COLUMNS[0]].astype(str).str.strip()
    return int(ids[ids != ""].duplicated().sum())


def _numeric_scores(df: pd.DataFrame) -> pd.DataFrame:
    return df[question_columns(df)].apply(pd.to_numeric, errors="coerce")


def check_numeric_scores(df: pd.DataFrame) -> int:
    """Cells that will be read as 0 because they are blank or not numbers."""
    return int(_numeric_scores(df).isna().sum().sum())


def check_score_ranges(df: pd.DataFrame, config: AnalysisConfig = DEFAULT_CONFIG) -> int:
    scores = _numeric_scores(df)
    invalid = (scores < 0) | (scores > config.full_marks_per_question)
    return int(invalid.sum().sum())


def check_total_mismatches(df: pd.DataFrame) -> int:
    if not question_columns(df):
        return 0
    totals = pd.to_numeric(df[df.columns[-1]], errors="coerce")
    summed = _numeric_scores(df).fillna(0).sum(axis=1)
    mismatched = totals.notna() & ((totals - summed).abs() > 1e-9)
    return int(mismatched.sum())


def run_invariants(df: pd.DataFrame, config: AnalysisConfig = DEFAULT_CONFIG) -> List[Dict[str, object]]:
    results = []

    required = check_required_columns(df)
    missing_required = [col for col, present in required.items() if not present]
    if not question_columns(df):
        missing_required.append("题1..题N")
    results.append(
        {
            "name": "required_columns",
            "ok": len(missing_required) == 0,
            "detail": ", ".join(missing_required) if missing_required else "all present",
        }
    )

    missing_ids = check_missing_identifiers(df)
    results.append({"name": "missing_identifiers", "ok": missing_ids == 0, "detail": missing_ids})

    duplicates = check_duplicate_ids(df)
    results.append({"name": "duplicate_student_ids", "ok": duplicates == 0, "detail": duplicates})

    non_numeric = check_numeric_scores(df)
    results.append({"name": "non_numeric_scores", "ok": non_numeric == 0, "detail": non_numeric})

    out_of_range = check_score_ranges(df, config)
    results.append({"name": "score_range_violations", "ok": out_of_range == 0, "detail": out_of_range})

    mismatches = check_total_mismatches(df)
    results.append({"name": "total_mismatches", "ok": mismatches == 0, "detail": mismatches})

    return results
