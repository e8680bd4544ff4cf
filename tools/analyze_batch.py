#!/usr/bin/env python3
"""Run the statistics pipeline on a score CSV and write the JSON report.

Usage:
    python tools/analyze_batch.py --scores data/class.csv --knowledge-map data/map.json --out-dir data/exports
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from edumetrics.config import load_config  # noqa: E402
from edumetrics.concepts import ResolvedKnowledgeMap  # noqa: E402
from edumetrics.io import export_report, load_knowledge_map, read_score_csv, report_to_text  # noqa: E402
from edumetrics.models import AnalysisReport  # noqa: E402
from edumetrics.pipeline import run_analysis  # noqa: E402
from edumetrics.taxonomy import STANDARD_KNOWLEDGE_POINTS, build_index, load_catalog  # noqa: E402


def analyze_files(
    scores_path: Path,
    knowledge_map_path: Path | None = None,
    config_path: Path | None = None,
    catalog_path: Path | None = None,
) -> AnalysisReport:
    rows = read_score_csv(scores_path)
    knowledge_map = load_knowledge_map(knowledge_map_path) if knowledge_map_path else ResolvedKnowledgeMap()
    catalog = load_catalog(catalog_path) if catalog_path else STANDARD_KNOWLEDGE_POINTS
    return run_analysis(rows, knowledge_map, index=build_index(catalog), config=load_config(config_path))


def main(argv: Iterable[str] | None = None) -> Path:
    parser = argparse.ArgumentParser(description="Compute class, knowledge point and focus student statistics")
    parser.add_argument("--scores", type=Path, required=True, help="Score CSV in the upload template layout")
    parser.add_argument("--knowledge-map", type=Path, help="JSON object of question number -> knowledge labels")
    parser.add_argument("--config", type=Path, help="Optional JSON analysis config")
    parser.add_argument("--catalog", type=Path, help="Optional JSON knowledge catalog replacing the standard one")
    parser.add_argument("--out-dir", type=Path, default=Path("data/exports"), help="Directory for the JSON report")
    parser.add_argument("--text", action="store_true", help="Also print the plain-text report")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    report = analyze_files(args.scores, args.knowledge_map, args.config, args.catalog)
    path = export_report(report, args.out_dir, args.scores.name)
    if args.text:
        print(report_to_text(report, args.scores.name))
    print(f"Report written to {path}")
    return path


if __name__ == "__main__":
    main()
