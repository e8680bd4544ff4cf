import json
from pathlib import Path

import pytest

from edumetrics.taxonomy import (
    STANDARD_KNOWLEDGE_POINTS,
    CatalogError,
    KnowledgeCatalogEntry,
    build_index,
    load_catalog,
    stringify_catalog,
)


def test_build_index_covers_standard_catalog(index):
    assert len(index.canonical_names) == len(STANDARD_KNOWLEDGE_POINTS) == 18
    assert index.lookup("小数加减") == "小数加减"
    assert index.lookup("小数计算") == "小数加减"


def test_lookup_ignores_case_and_surrounding_whitespace():
    index = build_index([KnowledgeCatalogEntry(id="A", name="Linear Equations", aliases=("Equations",))])
    assert index.lookup("  linear EQUATIONS ") == "Linear Equations"
    assert index.lookup("equations\t") == "Linear Equations"
    assert index.lookup("") is None
    assert index.lookup(None) is None


def test_keywords_are_not_used_for_matching(index):
    # "凑十法" is a keyword of 20以内加减法, not an alias.
    assert index.lookup("凑十法") is None


def test_empty_catalog_builds_empty_index():
    index = build_index([])
    assert index.canonical_names == frozenset()
    assert index.lookup("小数加减") is None


def test_duplicate_canonical_name_is_fatal():
    entries = [
        KnowledgeCatalogEntry(id="A", name="分数"),
        KnowledgeCatalogEntry(id="B", name=" 分数 "),
    ]
    with pytest.raises(CatalogError):
        build_index(entries)


def test_alias_colliding_with_other_entry_is_fatal():
    entries = [
        KnowledgeCatalogEntry(id="A", name="分数初步", aliases=("认识分数",)),
        KnowledgeCatalogEntry(id="B", name="分数乘除", aliases=("认识分数",)),
    ]
    with pytest.raises(CatalogError):
        build_index(entries)

    with pytest.raises(CatalogError):
        build_index(
            [
                KnowledgeCatalogEntry(id="A", name="Fractions"),
                KnowledgeCatalogEntry(id="B", name="Decimals", aliases=("FRACTIONS",)),
            ]
        )


def test_alias_repeating_own_name_is_allowed():
    index = build_index([KnowledgeCatalogEntry(id="A", name="Area", aliases=("area", "Area calc", "AREA CALC"))])
    assert index.lookup("area calc") == "Area"


def test_load_catalog_from_json(tmp_path: Path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps([{"id": "X1", "name": "概率", "aliases": ["可能性"], "keywords": ["抛硬币"]}], ensure_ascii=False),
        encoding="utf-8",
    )
    entries = load_catalog(path)
    assert entries == [KnowledgeCatalogEntry(id="X1", name="概率", aliases=("可能性",), keywords=("抛硬币",))]
    assert build_index(entries).lookup("可能性") == "概率"


def test_load_catalog_rejects_non_list(tmp_path: Path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"name": "概率"}), encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_stringify_catalog_numbers_entries():
    text = stringify_catalog()
    lines = text.splitlines()
    assert lines[0] == "1. 20以内加减法"
    assert lines[-1] == "18. 立体图形"
