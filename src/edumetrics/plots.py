from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import KnowledgePointStat

MASTERY_COLORS = {"优秀": "#2e7d32", "良好": "#1976d2", "一般": "#f9a825", "需关注": "#c62828"}


def knowledge_frame(stats: Sequence[KnowledgePointStat]) -> pd.DataFrame:
    return pd.DataFrame([kp.as_dict() for kp in stats])


def coverage_pie(stats: Sequence[KnowledgePointStat]) -> go.Figure:
    if not stats:
        return go.Figure()
    fig = px.pie(knowledge_frame(stats), names="knowledge_point", values="coverage_percent", title="知识点占比")
    return fig


def mastery_bar(stats: Sequence[KnowledgePointStat]) -> go.Figure:
    if not stats:
        return go.Figure()
    fig = px.bar(
        knowledge_frame(stats),
        x="knowledge_point",
        y="average_score",
        color="mastery_level",
        color_discrete_map=MASTERY_COLORS,
        title="知识点平均得分",
    )
    fig.update_layout(xaxis_title="知识点", yaxis_title="平均分")
    return fig


def distribution_chart(dist_df: pd.DataFrame) -> go.Figure:
    if dist_df.empty:
        return go.Figure()
    fig = px.bar(dist_df, x="bin", y="count", title="总分分布", labels={"bin": "分数段", "count": "人数"})
    fig.update_layout(bargap=0.05)
    return fig
