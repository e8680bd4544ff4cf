from edumetrics import plots
from edumetrics.metrics import score_distribution
from edumetrics.pipeline import run_analysis


def test_knowledge_charts(sample_rows, sample_knowledge_map, index):
    report = run_analysis(sample_rows, sample_knowledge_map, index=index)
    frame = plots.knowledge_frame(report.knowledge_points)
    assert list(frame.columns[:2]) == ["knowledge_point", "question_numbers"]

    bar = plots.mastery_bar(report.knowledge_points)
    assert bar.layout.title.text == "知识点平均得分"
    assert sum(len(trace.x) for trace in bar.data) == len(report.knowledge_points)

    pie = plots.coverage_pie(report.knowledge_points)
    assert len(pie.data[0].labels) == len(report.knowledge_points)


def test_charts_handle_empty_input(sample_rows):
    assert len(plots.mastery_bar(()).data) == 0
    assert len(plots.coverage_pie(()).data) == 0
    assert len(plots.distribution_chart(score_distribution([])).data) == 0
    assert len(plots.distribution_chart(score_distribution(sample_rows)).data) == 1
