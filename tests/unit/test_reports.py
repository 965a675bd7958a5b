"""Tests for the tabular report builders."""

import numpy as np
import pytest

from clinistat.api import compare_groups, run_correlation, run_survival
from clinistat.config import AnalysisConfig, CorrelationConfig, SurvivalConfig
from clinistat.reports import (
    SUMMARY_COLUMNS,
    TEST_COLUMNS,
    format_group_summary,
    format_test_results,
    format_roc,
    format_roc_points,
    format_correlation_matrix,
    format_correlation_pairs,
    format_survival_curves,
    format_survival_summary,
)
from clinistat.stats.normality import METHOD_JARQUE_BERA
from clinistat.stats.results import NoResult
from clinistat.stats.tests import welch_ttest


def test_format_group_summary(two_group_samples):
    report = compare_groups(two_group_samples, AnalysisConfig(marker="CRP", sampling="last"))
    table = format_group_summary(report)

    assert list(table.columns) == SUMMARY_COLUMNS
    assert table["group"].tolist() == ["control", "sepsis"]
    assert table["n"].tolist() == [12, 12]
    assert table["normality_method"].tolist() == [METHOD_JARQUE_BERA] * 2


def test_format_group_summary_empty_group(two_group_samples):
    config = AnalysisConfig(marker="CRP", groups=["control", "sepsis", "absent"])
    table = format_group_summary(compare_groups(two_group_samples, config))

    row = table.loc[table["group"] == "absent"].iloc[0]
    assert row["n"] == 0
    assert np.isnan(row["mean"])
    assert bool(row["normal"]) is False


def test_format_test_results_keeps_skip_reason():
    tests = {
        "welch_t": welch_ttest([1.0, 2.0, 3.0], [4.0, 5.0, 7.0]),
        "mann_whitney_u": NoResult("group size < 2"),
    }
    table = format_test_results(tests)

    assert list(table.columns) == TEST_COLUMNS
    assert table["test"].tolist() == ["Welch t-test", "Mann–Whitney U"]
    assert table.loc[0, "note"] == ""
    assert table.loc[1, "note"] == "group size < 2"
    assert np.isnan(table.loc[1, "p_value"])
    assert np.isnan(table.loc[0, "df2"])


def test_format_roc(two_group_samples):
    config = AnalysisConfig(marker="CRP", sampling="first", positive_group="sepsis")
    report = compare_groups(two_group_samples, config)

    summary = format_roc(report.roc)
    assert len(summary) == 1
    assert summary.loc[0, "positive_group"] == report.roc.positive_group
    assert summary.loc[0, "auc"] == pytest.approx(report.roc.auc)

    points = format_roc_points(report.roc)
    assert len(points) == len(report.roc.points)
    assert points["fpr"].is_monotonic_increasing


def test_format_correlation_tables(multi_marker_samples):
    matrix = run_correlation(multi_marker_samples, CorrelationConfig())

    r = format_correlation_matrix(matrix)
    n = format_correlation_matrix(matrix, value="n")
    assert list(r.index) == ["CRP", "IL6", "PCT"]
    assert r.loc["CRP", "IL6"] == pytest.approx(r.loc["IL6", "CRP"])
    assert np.isnan(r.loc["CRP", "PCT"])
    assert n.loc["CRP", "PCT"] == 2

    pairs = format_correlation_pairs(matrix)
    assert len(pairs) == 3
    assert pairs.loc[0, "marker1"] == "CRP" and pairs.loc[0, "marker2"] == "IL6"
    assert pairs.loc[1, "significance"] == ""

    with pytest.raises(ValueError, match="value must be"):
        format_correlation_matrix(matrix, value="z")


def test_format_survival_tables(survival_frame):
    report = run_survival(survival_frame, SurvivalConfig())

    curves = format_survival_curves(report)
    assert set(curves["group"]) == {"early", "late"}
    assert curves.groupby("group")["survival"].first().tolist() == [1.0, 1.0]

    summary = format_survival_summary(report)
    assert summary["group"].tolist() == ["early", "late"]
    assert summary["events"].tolist() == [3, 2]
    assert summary.loc[0, "median_survival"] == 3.0
    assert summary["log_rank_p"].notna().all()
