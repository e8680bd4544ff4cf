from typing import Dict, List

import pandas as pd

from .io import rows_from_dataframe
from .models import ScoreRow
from .template import template_headers

EXAM = ("五年级1班", "期中考试", "2025-05-10")

SAMPLE_STUDENTS = [
    ("S01", "王芳", [3] * 20),
    ("S02", "李明", [3] * 18 + [2, 2]),
    ("S03", "张伟", [3, 3, 3, 3, 3, 0, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 0, 3]),
    ("S04", "刘洋", [3, 0, 0, 3, 2, 3, 3, 2, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3, 3]),
    ("S05", "陈静", [2, 3, 0, 3, 2, 0, 3, 1, 3, 0, 2, 3, 0, 3, 2, 3, 2, 0, 3, 3]),
    ("S06", "赵磊", [3, 1, 0, 0, 0, 2, 1, 0, 3, 2, 0, 0, 1, 2, 0, 3, 0, 1, 0, 2]),
    ("S07", "孙悦", [3, 3, 3, 3, 3, 3, 0, 0, 0, 3, 3, 3, 3, 3, 3, 0, 0, 0, 0, 0]),
]

# Raw extraction output: mixes canonical names, aliases and labels outside the catalog.
SAMPLE_KNOWLEDGE_MAP: Dict[str, List[str]] = {
    "1": ["小数加减"],
    "2": ["小数计算", "三角形特性"],
    "3": ["三角形性质"],
    "4": ["统计图表"],
    "5": ["数据统计"],
    "6": ["分数乘除"],
    "7": ["简易方程"],
    "8": ["一元一次方程"],
    "9": ["简易方程", "比例应用"],
    "10": ["小数点的计算"],
    "11": ["比例问题"],
    "12": ["圆的周长面积"],
    "13": ["圆的计算"],
    "14": ["立体图形"],
    "15": ["空间几何"],
    "16": ["平行四边形面积"],
    "17": ["多边形面积"],
    "18": ["分数运算"],
    "19": ["统计图表"],
    "20": ["Magic Math", "趣味数学"],
}


def load_sample_dataframe() -> pd.DataFrame:
    headers = template_headers(20)
    records = []
    for student_id, name, scores in SAMPLE_STUDENTS:
        records.append([student_id, name, *EXAM, *scores, sum(scores)])
    return pd.DataFrame(records, columns=headers)


def load_sample_rows() -> List[ScoreRow]:
    return rows_from_dataframe(load_sample_dataframe())
