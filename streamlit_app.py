import json
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from edumetrics import invariants, plots  # noqa: E402
from edumetrics.concepts import KnowledgeMap, ResolvedKnowledgeMap  # noqa: E402
from edumetrics.config import DEFAULT_CONFIG  # noqa: E402
from edumetrics.io import ScoreTableError, parse_knowledge_map, read_csv, report_to_text, rows_from_dataframe  # noqa: E402
from edumetrics.metrics import knowledge_overview, score_distribution  # noqa: E402
from edumetrics.models import AnalysisReport  # noqa: E402
from edumetrics.pipeline import run_analysis  # noqa: E402
from edumetrics.sample_data import SAMPLE_KNOWLEDGE_MAP, load_sample_dataframe  # noqa: E402
from edumetrics.security import report_filename  # noqa: E402
from edumetrics.taxonomy import build_index, stringify_catalog  # noqa: E402
from edumetrics.template import score_template_csv  # noqa: E402


st.set_page_config(
    page_title="EduMetrics 学情分析",
    layout="wide",
    page_icon="📊",
)


def _render_header():
    st.title("EduMetrics 学情分析")
    st.caption("上传按题得分表和题号→知识点映射，查看班级、知识点与重点关注学生统计。")


def _get_raw_dataframe() -> tuple[pd.DataFrame | None, str]:
    st.sidebar.subheader("1) 上传成绩 CSV")
    uploaded = st.sidebar.file_uploader("成绩表（学号,姓名,班级,考试名称,考试日期,题1..题N,总分）", type=["csv"])
    st.sidebar.download_button(
        "下载成绩模板",
        data=score_template_csv(20).encode("utf-8-sig"),
        file_name="score_template.csv",
        mime="text/csv",
    )

    if st.sidebar.button("加载示例数据"):
        st.session_state["use_sample"] = True

    if uploaded:
        st.session_state["use_sample"] = False
        return read_csv(uploaded), uploaded.name
    if st.session_state.get("use_sample"):
        return load_sample_dataframe(), "sample.csv"
    return None, ""


def _get_knowledge_map(use_sample: bool) -> KnowledgeMap:
    st.sidebar.subheader("2) 题号→知识点映射")
    uploaded = st.sidebar.file_uploader("知识点映射 JSON", type=["json"])
    if uploaded:
        try:
            return parse_knowledge_map(json.loads(uploaded.getvalue().decode("utf-8")))
        except ValueError as exc:
            st.sidebar.error(f"无法解析知识点映射：{exc}")
            return ResolvedKnowledgeMap()
    if use_sample:
        return parse_knowledge_map(SAMPLE_KNOWLEDGE_MAP)
    with st.sidebar.expander("标准知识点清单"):
        st.text(stringify_catalog())
    return ResolvedKnowledgeMap()


def _show_invariants(df: pd.DataFrame):
    results = invariants.run_invariants(df, DEFAULT_CONFIG)
    failed = [res for res in results if not res["ok"]]
    if failed:
        st.warning("数据检查：" + "；".join(f"{res['name']}={res['detail']}" for res in failed))
    else:
        st.success("数据检查通过")


def _show_metrics(report: AnalysisReport):
    stats = report.class_stats
    m1, m2, m3, m4, m5 = st.columns(5)
    m1.metric("学生人数", stats.total_students)
    m2.metric("平均分", f"{stats.average_score:.2f}")
    m3.metric("最高分", stats.highest_score)
    m4.metric("最低分", stats.lowest_score)
    m5.metric("及格率", f"{stats.pass_rate:.2f}%")


def _render_knowledge(report: AnalysisReport, rows):
    st.subheader("知识点掌握情况")
    if report.knowledge_map_status == "pending":
        st.info("知识点映射尚未识别，暂不计算知识点统计。")
        return
    if report.unknown_labels:
        st.caption("未匹配标准清单的知识点（已忽略）：" + "、".join(report.unknown_labels))
    if not report.knowledge_points:
        st.info("没有可用的知识点映射。")
        return

    left, right = st.columns([2, 1])
    with left:
        st.plotly_chart(plots.mastery_bar(report.knowledge_points), use_container_width=True)
    with right:
        st.plotly_chart(plots.coverage_pie(report.knowledge_points), use_container_width=True)
    st.dataframe(plots.knowledge_frame(report.knowledge_points), use_container_width=True, height=320)

    st.write("### 各知识点平均每题得分（由低到高）")
    st.dataframe(knowledge_overview(rows, report.knowledge_map, report.question_count), use_container_width=True)


def _render_focus(report: AnalysisReport):
    st.subheader("重点关注的学生")
    if not report.focus_students:
        st.info("没有需要重点关注的学生。")
        return
    for student in report.focus_students:
        with st.container(border=True):
            st.markdown(f"**{student.name}**（{student.student_id}） 总分：{student.total}")
            st.write(student.reason)
            st.write(student.advice)
            if student.weak_knowledge_points:
                st.caption("相关知识点：" + "、".join(student.weak_knowledge_points))


def _download_buttons(report: AnalysisReport, file_name: str):
    today = pd.Timestamp.today().date()
    json_bytes = json.dumps(report.as_dict(), ensure_ascii=False, indent=2).encode("utf-8")
    st.download_button("下载 JSON 报告", data=json_bytes, file_name=report_filename(file_name, today), mime="application/json")
    text_bytes = report_to_text(report, file_name).encode("utf-8")
    st.download_button("下载文本报告", data=text_bytes, file_name=report_filename(file_name, today, suffix=".txt"), mime="text/plain")


def main():
    _render_header()
    try:
        raw_df, file_name = _get_raw_dataframe()
    except (ScoreTableError, pd.errors.EmptyDataError) as exc:
        st.error(f"无法读取成绩表：{exc}")
        return

    if raw_df is None:
        st.info("上传成绩 CSV 或加载示例数据开始分析。")
        return

    knowledge_map = _get_knowledge_map(use_sample=file_name == "sample.csv")

    st.write("### 数据预览")
    st.dataframe(raw_df.head(20), use_container_width=True)
    _show_invariants(raw_df)

    try:
        rows = rows_from_dataframe(raw_df)
        report = run_analysis(rows, knowledge_map, index=build_index(), config=DEFAULT_CONFIG)
    except ScoreTableError as exc:
        st.error(str(exc))
        return

    _show_metrics(report)
    st.plotly_chart(plots.distribution_chart(score_distribution(rows)), use_container_width=True)
    _render_knowledge(report, rows)
    _render_focus(report)
    _download_buttons(report, file_name)


if __name__ == "__main__":
    main()
