import io
import json
import logging
from datetime import date
from pathlib import Path
from typing import IO, Dict, List, Optional, Sequence

import pandas as pd

from .concepts import KnowledgeMap, PendingKnowledgeMap, ResolvedKnowledgeMap, question_number
from .models import AnalysisReport, ScoreRow
from .security import build_export_path, report_filename

logger = logging.getLogger(__name__)

IDENTITY_COLUMNS = ["学号", "姓名", "班级", "考试名称", "考试日期"]
TOTAL_COLUMN = "总分"
PREVIEW_KEY = "__preview"


class ScoreTableError(ValueError):
    """Raised when a score table cannot form a rectangular batch."""


def _decode(data: str | bytes, source: object) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info("Score file %s is not UTF-8, retrying as GBK", source)
    try:
        return data.decode("gbk")
    except UnicodeDecodeError as exc:
        raise ScoreTableError(f"Score file {source} is neither UTF-8 nor GBK") from exc


def read_csv(source: str | Path | IO[str] | IO[bytes]) -> pd.DataFrame:
    """Read a score table as text cells, decoding UTF-8 first and GBK second.

    Rows with more cells than the header raise ``ScoreTableError``; so do rows
    with fewer, which pandas would otherwise pad with NaN.
    """

    data = Path(source).read_bytes() if isinstance(source, (str, Path)) else source.read()
    # Keep every cell as text so bad scores can be coerced to 0 explicitly.
    try:
        df = pd.read_csv(io.StringIO(_decode(data, source)), keep_default_na=False, dtype=str)
    except pd.errors.ParserError as exc:
        raise ScoreTableError(f"Score table is not rectangular: {exc}") from exc

    if not isinstance(df.index, pd.RangeIndex):
        # pandas turns an extra leading cell on every row into an index.
        raise ScoreTableError("Score table rows have more cells than the header")
    short = df.isna().any(axis=1)
    if short.any():
        ids = [str(value) or f"#{pos + 1}" for pos, value in zip(df.index[short], df.iloc[:, 0][short])]
        raise ScoreTableError(f"Rows with fewer cells than the header: {', '.join(ids)}")
    return df


def rows_from_dataframe(df: pd.DataFrame) -> List[ScoreRow]:
    """Convert a frame laid out like the score template into score rows.

    Columns are positional: five identity columns, one column per question,
    then the total. A blank or non-numeric total falls back to the sum of the
    question scores.
    """

    if len(df.columns) < len(IDENTITY_COLUMNS) + 1:
        raise ScoreTableError(
            f"Score table needs {', '.join(IDENTITY_COLUMNS)}, question columns and {TOTAL_COLUMN}; got {list(df.columns)}"
        )

    question_count = len(df.columns) - len(IDENTITY_COLUMNS) - 1
    start = len(IDENTITY_COLUMNS)
    rows = []
    for values in df.itertuples(index=False, name=None):
        rows.append(
            ScoreRow.create(
                student_id=values[0],
                name=values[1],
                class_name=values[2],
                exam_name=values[3],
                exam_date=values[4],
                scores=values[start : start + question_count],
                total=values[start + question_count],
            )
        )
    return rows


def read_score_csv(source: str | Path | IO[str] | IO[bytes]) -> List[ScoreRow]:
    try:
        df = read_csv(source)
    except pd.errors.EmptyDataError:
        return []
    return rows_from_dataframe(df)


def validate_score_rows(rows: Sequence[ScoreRow], question_count: Optional[int] = None) -> int:
    """Return the batch's question count, raising if any row disagrees with it."""
    if not rows:
        return question_count or 0

    expected = rows[0].question_count if question_count is None else question_count
    bad = [row.student_id or f"#{idx + 1}" for idx, row in enumerate(rows) if row.question_count != expected]
    if bad:
        raise ScoreTableError(f"Rows with a question count other than {expected}: {', '.join(bad)}")
    return expected


def _label_list(value: object) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return []


def parse_knowledge_map(raw: object) -> KnowledgeMap:
    """Turn decoded JSON into a knowledge map variant.

    Accepts a plain ``{"1": ["label", ...]}`` object, the extraction format
    ``{"questionKnowledgeMap": {...}}``, or ``{"__preview": "..."}`` for a map
    that still has to be extracted from the exam text.
    """

    if not isinstance(raw, dict):
        logger.warning("Knowledge map must be a JSON object, got %s; using an empty map", type(raw).__name__)
        return ResolvedKnowledgeMap()

    if isinstance(raw.get("questionKnowledgeMap"), dict):
        raw = raw["questionKnowledgeMap"]

    questions: Dict[int, List[str]] = {}
    for key, value in raw.items():
        number = question_number(key)
        if number is None:
            continue
        questions.setdefault(number, []).extend(_label_list(value))

    if not questions and PREVIEW_KEY in raw:
        return PendingKnowledgeMap(preview=str(raw.get(PREVIEW_KEY) or ""))
    return ResolvedKnowledgeMap({q: tuple(labels) for q, labels in sorted(questions.items())})


def load_knowledge_map(path: Path) -> KnowledgeMap:
    if not path.exists():
        return ResolvedKnowledgeMap()
    return parse_knowledge_map(json.loads(path.read_text(encoding="utf-8")))


def _bullets(lines: Sequence[str]) -> str:
    return "\n- ".join(lines)


def report_to_text(report: AnalysisReport, file_name: str = "") -> str:
    stats = report.class_stats
    overview = [
        f"学生人数：{stats.total_students}",
        f"平均分：{stats.average_score}",
        f"最高分：{stats.highest_score}",
        f"最低分：{stats.lowest_score}",
        f"及格率：{stats.pass_rate}%",
    ]
    mastery = [
        f"{kp.knowledge_point}（题{'、'.join(str(q) for q in kp.question_numbers)}，占比{kp.coverage_percent}%）："
        f"平均分{kp.average_score}，{kp.mastery_level.value}；{kp.evidence}"
        for kp in report.knowledge_points
    ] or ["暂无知识点数据"]
    focus = [
        f"{s.name}（{s.student_id}，总分{s.total}）：{s.reason}；{s.advice}"
        + (f"；相关知识点：{'、'.join(s.weak_knowledge_points)}" if s.weak_knowledge_points else "")
        for s in report.focus_students
    ] or ["无"]

    return "\n\n".join(
        [
            f"文件：{file_name}",
            "班级整体表现:\n- " + _bullets(overview),
            "知识点掌握情况:\n- " + _bullets(mastery),
            "重点关注的学生:\n- " + _bullets(focus),
        ]
    )


def export_report(
    report: AnalysisReport,
    base_dir: Path,
    file_name: str = "",
    generated_on: Optional[date] = None,
) -> Path:
    base_dir.mkdir(parents=True, exist_ok=True)
    path = build_export_path(base_dir, report_filename(file_name, generated_on or date.today()))
    path.write_text(json.dumps(report.as_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path
