import pytest

from edumetrics.concepts import PendingKnowledgeMap, ResolvedKnowledgeMap, whitelist_map
from edumetrics.config import AnalysisConfig
from edumetrics.metrics import (
    class_summary,
    knowledge_overview,
    knowledge_point_stats,
    question_stats,
    round_half_up,
    score_distribution,
)
from edumetrics.models import ClassStats, MasteryLevel


def test_round_half_up():
    assert round_half_up(2.675) == 2.68
    assert round_half_up(12.5, 0) == 13.0
    assert round_half_up(2.0 / 3) == 0.67


def test_class_summary_sample(sample_rows):
    stats = class_summary(sample_rows)
    assert stats.total_students == 7
    assert stats.average_score == pytest.approx(45.57)
    assert stats.highest_score == 60
    assert stats.lowest_score == 21
    # Pass line is 60% of 20 questions x 3 marks = 36, inclusive.
    assert stats.pass_rate == pytest.approx(85.71)


def test_class_summary_empty_batch_is_all_zero():
    assert class_summary([]) == ClassStats(0, 0.0, 0.0, 0.0, 0.0)


def test_class_summary_bounds(rows_factory):
    rows = rows_factory([1, 0, 2], [3, 3, 3], [0, 0, 0], [2, 2, 1])
    stats = class_summary(rows)
    assert stats.lowest_score <= stats.average_score <= stats.highest_score
    assert 0 <= stats.pass_rate <= 100
    # 60% of 9 is 5.4; totals 3, 9, 0, 5 -> only 9 passes.
    assert stats.pass_rate == 25.0


def test_class_summary_uses_authoritative_total(rows_factory):
    rows = rows_factory([0, 0], [3, 3], totals=[5, None])
    stats = class_summary(rows)
    assert stats.highest_score == 6
    assert stats.lowest_score == 5


def test_question_stats_counts_zeros(rows_factory):
    stats = question_stats(rows_factory([3, 0], [1, 0], [2, 3]))
    assert list(stats["question"]) == [1, 2]
    assert list(stats["average"]) == pytest.approx([2.0, 1.0])
    assert list(stats["zero_count"]) == [0, 2]


def test_single_point_full_marks_is_excellent(rows_factory):
    rows = rows_factory([3], [3], [3])
    stats = knowledge_point_stats(rows, ResolvedKnowledgeMap({1: ("小数加减",)}))
    assert len(stats) == 1
    kp = stats[0]
    assert kp.knowledge_point == "小数加减"
    assert kp.question_numbers == (1,)
    assert kp.average_score == 3.00
    assert kp.mastery_level is MasteryLevel.EXCELLENT
    assert kp.mastery_level == "优秀"
    assert kp.coverage_percent == 5
    assert kp.evidence == "小数加减相关题目表现良好，无学生得0分"


def test_all_zero_point_needs_attention(rows_factory):
    rows = rows_factory([0, 3], [0, 3])
    kp = knowledge_point_stats(rows, ResolvedKnowledgeMap({1: ("统计图表",)}))[0]
    assert kp.average_score == 0.0
    assert kp.mastery_level is MasteryLevel.NEEDS_ATTENTION
    assert kp.evidence == "题1中2名学生得0分"


def test_sample_knowledge_point_stats(sample_rows, sample_knowledge_map, index):
    cleaned = whitelist_map(sample_knowledge_map, index).cleaned
    stats = {kp.knowledge_point: kp for kp in knowledge_point_stats(sample_rows, cleaned)}

    decimals = stats["小数加减"]
    assert decimals.question_numbers == (1, 2)
    assert decimals.coverage_percent == 10
    assert decimals.average_score == pytest.approx(2.57)
    assert decimals.mastery_level is MasteryLevel.GOOD
    assert decimals.evidence == "题2中1名学生得0分"

    charts = stats["统计图表"]
    assert charts.question_numbers == (4, 5, 19)
    assert charts.coverage_percent == 15
    assert charts.average_score == pytest.approx(2.14)
    assert charts.mastery_level is MasteryLevel.FAIR
    assert charts.evidence == "题4中1名学生得0分，题5中1名学生得0分，题19中3名学生得0分"


def test_shared_question_counts_fully_for_both_points(rows_factory):
    rows = rows_factory([3, 0], [3, 0])
    stats = knowledge_point_stats(rows, ResolvedKnowledgeMap({1: ("A", "B"), 2: ("B",)}))
    by_name = {kp.knowledge_point: kp for kp in stats}
    assert by_name["A"].average_score == 3.0
    assert by_name["B"].question_numbers == (1, 2)
    assert by_name["B"].average_score == 1.5


def test_knowledge_stats_sorted_and_in_range(sample_rows, sample_knowledge_map, index):
    cleaned = whitelist_map(sample_knowledge_map, index).cleaned
    stats = knowledge_point_stats(sample_rows, cleaned)
    averages = [kp.average_score for kp in stats]
    assert averages == sorted(averages, reverse=True)
    for kp in stats:
        assert set(kp.question_numbers) <= set(range(1, 21))


def test_mastery_tier_boundaries(rows_factory):
    config = AnalysisConfig(full_marks_per_question=10)
    cases = {9: MasteryLevel.EXCELLENT, 8: MasteryLevel.GOOD, 6: MasteryLevel.FAIR, 5.99: MasteryLevel.NEEDS_ATTENTION}
    for score, expected in cases.items():
        kp = knowledge_point_stats(rows_factory([score]), ResolvedKnowledgeMap({1: ("P",)}), config)[0]
        assert kp.mastery_level is expected


def test_coverage_uses_configured_total(rows_factory):
    rows = rows_factory([3, 3, 3])
    cleaned = ResolvedKnowledgeMap({1: ("P",), 2: ("P",), 3: ("Q",)})
    stats = {kp.knowledge_point: kp for kp in knowledge_point_stats(rows, cleaned, AnalysisConfig(total_question_count=8))}
    assert stats["P"].coverage_percent == 25
    # 1 / 8 = 12.5% rounds half up.
    assert stats["Q"].coverage_percent == 13


def test_knowledge_stats_degrade_to_empty(rows_factory):
    rows = rows_factory([3, 3])
    assert knowledge_point_stats(rows, ResolvedKnowledgeMap()) == []
    assert knowledge_point_stats(rows, PendingKnowledgeMap("试卷预览")) == []
    assert knowledge_point_stats([], ResolvedKnowledgeMap({1: ("P",)})) == []


def test_knowledge_stats_ignore_questions_outside_batch(rows_factory):
    rows = rows_factory([3, 3])
    stats = knowledge_point_stats(rows, ResolvedKnowledgeMap({1: ("P",), 7: ("P",), 9: ("Q",)}))
    assert [kp.knowledge_point for kp in stats] == ["P"]
    assert stats[0].question_numbers == (1,)


def test_knowledge_overview_is_ascending(rows_factory):
    rows = rows_factory([3, 1, 0], [3, 1, 2])
    cleaned = ResolvedKnowledgeMap({1: ("A",), 2: ("B",), 3: ("B", "C")})
    overview = knowledge_overview(rows, cleaned, question_count=3)
    assert list(overview["knowledge_point"]) == ["B", "C", "A"]
    assert list(overview["questions"]) == [2, 1, 1]
    assert list(overview["avg_score_per_question"]) == pytest.approx([1.0, 1.0, 3.0])


def test_knowledge_overview_pending_is_empty(rows_factory):
    overview = knowledge_overview(rows_factory([3]), PendingKnowledgeMap(), question_count=1)
    assert overview.empty


def test_score_distribution(sample_rows):
    dist = score_distribution(sample_rows, bins=4)
    assert set(dist.columns) == {"bin", "count"}
    assert dist["count"].sum() == len(sample_rows)
    assert score_distribution([]).empty


def test_questions_beyond_configured_total_are_ignored(rows_factory):
    rows = rows_factory([3] * 25)
    cleaned = ResolvedKnowledgeMap({q: ("P",) for q in range(1, 26)})
    kp = knowledge_point_stats(rows, cleaned)[0]
    assert kp.question_numbers == tuple(range(1, 21))
    assert kp.coverage_percent == 100


def test_coverage_never_exceeds_100(rows_factory):
    rows = rows_factory([3, 3, 3])
    cleaned = ResolvedKnowledgeMap({1: ("P",), 2: ("P",), 3: ("P",)})
    kp = knowledge_point_stats(rows, cleaned, AnalysisConfig(total_question_count=3))[0]
    assert kp.coverage_percent == 100
