"""End-to-end tests for the analysis runners."""

import pandas as pd
import pytest

from clinistat import (
    AnalysisConfig,
    CorrelationConfig,
    SurvivalConfig,
    compare_groups,
    run_correlation,
    run_survival,
)
from clinistat.api import survival_records
from clinistat.stats.results import NoResult, TestResult
from clinistat.stats.roc import RocResult


def test_compare_two_groups(two_group_samples):
    config = AnalysisConfig(marker="CRP", sampling="last", positive_group="sepsis")
    report = compare_groups(two_group_samples, config)

    assert report.groups == ("control", "sepsis")
    assert report.n_samples == 24
    assert set(report.tests) == {"welch_t", "mann_whitney_u"}
    assert all(isinstance(res, TestResult) for res in report.tests.values())
    assert report.tests["welch_t"].p_value < 0.05

    assert isinstance(report.roc, RocResult)
    assert report.roc.positive_group == "sepsis"
    assert report.roc.auc > 0.8
    assert report.recommended_test in ("welch_t", "mann_whitney_u")


def test_compare_all_samples_without_reduction(two_group_samples):
    report = compare_groups(two_group_samples, AnalysisConfig(marker="CRP"))

    assert report.n_samples == len(two_group_samples)
    assert report.summaries["control"].n == 36


def test_compare_nearest_with_day_window(two_group_samples):
    config = AnalysisConfig(marker="CRP", sampling="nearest", target_day=6, day_min=1)
    report = compare_groups(two_group_samples, config)

    # day 0 is filtered out, day 7 is nearest to 6
    assert report.n_samples == 24
    mask = two_group_samples["day"] == 7.0
    expected = two_group_samples.loc[mask & (two_group_samples["group"] == "control"), "value"]
    assert report.summaries["control"].mean == pytest.approx(expected.mean())


def test_compare_three_groups(three_group_samples):
    report = compare_groups(three_group_samples, AnalysisConfig())

    assert report.groups == ("A", "B", "C")
    assert set(report.tests) == {"anova", "kruskal_wallis"}
    assert report.tests["anova"].df == 2
    assert report.tests["anova"].df2 == 42
    assert report.tests["kruskal_wallis"].p_value < 0.05
    assert report.roc is None


def test_compare_rejects_bad_input(two_group_samples, three_group_samples):
    with pytest.raises(ValueError, match="not found"):
        compare_groups(two_group_samples, AnalysisConfig(marker="ALT"))

    only_one = three_group_samples.loc[three_group_samples["group"] == "A"]
    with pytest.raises(ValueError, match="At least 2 groups"):
        compare_groups(only_one, AnalysisConfig())

    with pytest.raises(ValueError, match="missing columns"):
        compare_groups(three_group_samples.drop(columns="value"), AnalysisConfig())


def test_compare_requires_marker_choice_for_multi_marker_table(multi_marker_samples):
    two = multi_marker_samples.assign(group=["a", "b"] * (len(multi_marker_samples) // 2))
    with pytest.raises(ValueError, match="several markers"):
        compare_groups(two, AnalysisConfig())


def test_run_correlation(multi_marker_samples):
    matrix = run_correlation(multi_marker_samples, CorrelationConfig(method="spearman"))

    assert matrix.markers == ("CRP", "IL6", "PCT")
    assert matrix.method == "spearman"
    assert matrix.cell("CRP", "IL6").n == 20
    assert matrix.cell("CRP", "IL6").r > 0.9
    assert matrix.cell("IL6", "PCT").r is None


def test_run_correlation_day_window(multi_marker_samples):
    matrix = run_correlation(
        multi_marker_samples, CorrelationConfig(markers=["IL6", "CRP"], day_min=2, day_max=2)
    )

    assert matrix.markers == ("IL6", "CRP")
    assert matrix.cell("IL6", "CRP").n == 10


def test_run_survival_two_groups(survival_frame):
    report = run_survival(survival_frame, SurvivalConfig())

    assert list(report.curves) == ["early", "late"]
    assert report.curves["early"].n_events == 3
    assert report.log_rank
    assert report.log_rank.observed == (3.0, 2.0)
    assert 0.0 < report.log_rank.p_value <= 1.0


def test_run_survival_group_subset(survival_frame):
    report = run_survival(survival_frame, SurvivalConfig(groups=["late"]))

    assert list(report.curves) == ["late"]
    assert isinstance(report.log_rank, NoResult)


def test_survival_records_validation(survival_frame):
    records = survival_records(survival_frame)
    assert len(records) == 8
    assert records[0].status == 1 and records[0].time == 2.0

    with_gap = survival_frame.astype({"time": float})
    with_gap.loc[0, "time"] = float("nan")
    assert len(survival_records(with_gap)) == 7

    with pytest.raises(ValueError, match=">= 0"):
        survival_records(survival_frame.assign(time=-1))
    with pytest.raises(ValueError, match="Status"):
        survival_records(survival_frame.assign(status=2))
    with pytest.raises(ValueError, match="missing columns"):
        survival_records(pd.DataFrame({"subject_id": ["a"], "time": [1.0]}))
