from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a knowledge catalog has duplicate names or alias collisions."""


@dataclass(frozen=True)
class KnowledgeCatalogEntry:
    id: str
    name: str
    aliases: Tuple[str, ...] = ()
    # Informational only; never consulted when resolving labels.
    keywords: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "KnowledgeCatalogEntry":
        name = str(raw.get("name") or "").strip()
        if not name:
            raise CatalogError(f"Catalog entry {raw.get('id')!r} has no name")
        return cls(
            id=str(raw.get("id") or name),
            name=name,
            aliases=tuple(str(a) for a in raw.get("aliases") or ()),
            keywords=tuple(str(k) for k in raw.get("keywords") or ()),
        )


def _entry(entry_id: str, name: str, aliases: Sequence[str], keywords: Sequence[str]) -> KnowledgeCatalogEntry:
    return KnowledgeCatalogEntry(id=entry_id, name=name, aliases=tuple(aliases), keywords=tuple(keywords))


STANDARD_KNOWLEDGE_POINTS: Tuple[KnowledgeCatalogEntry, ...] = (
    _entry("G1_01", "20以内加减法", ["20以内计算"], ["凑十法", "进位加", "退位减"]),
    _entry("G1_02", "认识图形", ["基本图形"], ["圆形", "正方形", "三角形", "长方形"]),
    _entry("G1_03", "认识钟表", ["认识时间"], ["整点", "半点", "时钟分钟"]),
    _entry("G2_01", "乘法口诀", ["九九表"], ["表内乘法", "乘法记忆"]),
    _entry("G2_02", "长度单位", ["厘米米"], ["测量", "单位换算"]),
    _entry("G2_03", "角的初步认识", ["角的概念"], ["直角", "锐角", "钝角"]),
    _entry("G3_01", "两位数乘除法", ["多位数乘除"], ["竖式计算", "进位"]),
    _entry("G3_02", "分数初步", ["认识分数"], ["几分之一", "分数大小"]),
    _entry("G3_03", "长方形面积", ["面积计算"], ["长乘宽", "面积公式"]),
    _entry("G4_01", "小数加减", ["小数计算"], ["小数点", "数位对齐"]),
    _entry("G4_02", "三角形特性", ["三角形性质"], ["内角和", "三角形分类"]),
    _entry("G4_03", "统计图表", ["数据统计"], ["条形图", "数据分析"]),
    _entry("G5_01", "分数乘除", ["分数运算"], ["约分", "通分", "最简分数"]),
    _entry("G5_02", "平行四边形面积", ["多边形面积"], ["底乘高", "面积推导"]),
    _entry("G5_03", "简易方程", ["一元一次方程"], ["解方程", "等式性质"]),
    _entry("G6_01", "比例应用", ["比例问题"], ["比例尺", "正比例", "反比例"]),
    _entry("G6_02", "圆的周长面积", ["圆的计算"], ["圆周率", "半径直径"]),
    _entry("G6_03", "立体图形", ["空间几何"], ["长方体", "圆柱体", "体积计算"]),
)


def normalize_key(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip().casefold()


@dataclass(frozen=True)
class TaxonomyIndex:
    canonical_names: FrozenSet[str] = frozenset()
    name_to_canonical: Dict[str, str] = field(default_factory=dict)
    alias_to_canonical: Dict[str, str] = field(default_factory=dict)

    def lookup(self, label: object) -> Optional[str]:
        key = normalize_key(label)
        if not key:
            return None
        return self.name_to_canonical.get(key) or self.alias_to_canonical.get(key)


def build_index(entries: Iterable[KnowledgeCatalogEntry] = STANDARD_KNOWLEDGE_POINTS) -> TaxonomyIndex:
    """Build the lookup tables for a catalog.

    Every canonical name and alias must stay unique after stripping and
    case-folding; a collision raises ``CatalogError``.
    """

    entries = list(entries)
    names: Dict[str, str] = {}
    aliases: Dict[str, str] = {}
    owners: Dict[str, str] = {}

    for entry in entries:
        key = normalize_key(entry.name)
        if not key:
            raise CatalogError(f"Catalog entry {entry.id!r} has an empty name")
        if key in owners:
            raise CatalogError(f"Duplicate knowledge point '{entry.name}' (already used by '{owners[key]}')")
        owners[key] = entry.name
        names[key] = entry.name

    for entry in entries:
        for alias in entry.aliases:
            key = normalize_key(alias)
            if not key:
                continue
            owner = owners.get(key)
            if owner == entry.name:
                continue
            if owner is not None:
                raise CatalogError(f"Alias '{alias}' of '{entry.name}' collides with '{owner}'")
            owners[key] = entry.name
            aliases[key] = entry.name

    logger.debug("Built taxonomy index with %d names and %d aliases", len(names), len(aliases))
    return TaxonomyIndex(
        canonical_names=frozenset(names.values()),
        name_to_canonical=names,
        alias_to_canonical=aliases,
    )


def load_catalog(path: Path) -> List[KnowledgeCatalogEntry]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise CatalogError("Knowledge catalog JSON must be a list of entries")
    entries = []
    for item in raw:
        if not isinstance(item, dict):
            raise CatalogError("Knowledge catalog entries must be JSON objects")
        entries.append(KnowledgeCatalogEntry.from_dict(item))
    return entries


def stringify_catalog(entries: Iterable[KnowledgeCatalogEntry] = STANDARD_KNOWLEDGE_POINTS) -> str:
    """Numbered list of canonical names, one per line, for extraction prompts."""
    return "\n".join(f"{idx}. {entry.name}" for idx, entry in enumerate(entries, start=1))
