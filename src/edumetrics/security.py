import re
from datetime import date
from pathlib import Path

# Unicode word characters are allowed so Chinese exam names survive.
SAFE_FILENAME_RE = re.compile(r"[^\w.-]+")
REPORT_PREFIX = "EduMetrics"


def sanitize_filename(name: str, fallback: str = "report") -> str:
    """Return a filesystem-safe filename.

    - Reject ``..`` path segments.
    - Join remaining path segments with underscores.
    - Collapse unsafe characters and strip leading dots.
    """
    raw = str(name or "").strip()
    parts = [p for p in raw.replace("\\", "/").split("/") if p not in ("", ".")]
    if any(p == ".." for p in parts):
        raise ValueError("Path traversal not allowed")
    cleaned = SAFE_FILENAME_RE.sub("_", "_".join(parts))
    while ".." in cleaned:
        cleaned = cleaned.replace("..", ".")
    cleaned = cleaned.lstrip(".")
    return cleaned or fallback


def report_filename(source_name: str, generated_on: date, suffix: str = ".json") -> str:
    stem = Path(str(source_name or "").replace("\\", "/")).stem if source_name else ""
    safe = sanitize_filename(stem, fallback="报告")
    return f"{REPORT_PREFIX}_{safe}_{generated_on:%Y%m%d}{suffix}"


def build_export_path(base_dir: Path, filename: str) -> Path:
    path = base_dir / sanitize_filename(filename)
    resolved_base = base_dir.resolve()
    resolved_path = path.resolve()
    if resolved_base not in resolved_path.parents:
        raise ValueError("Export path escapes base directory")
    return resolved_path
