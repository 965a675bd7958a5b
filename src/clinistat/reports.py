"""Tabular views of analysis results for the output layer.

Each builder turns immutable result records into a pandas DataFrame with one
row per group, test, curve point or matrix cell. Values are left numeric;
rounding and labelling belong to whoever renders the table.
"""

from __future__ import annotations

from typing import Dict, List, Union

import numpy as np
import pandas as pd

from clinistat.api import ComparisonReport, SurvivalReport
from clinistat.stats.correlation import CorrelationMatrix
from clinistat.stats.results import NoResult, TestResult
from clinistat.stats.roc import RocResult

TEST_NAMES = {
    "welch_t": "Welch t-test",
    "mann_whitney_u": "Mann–Whitney U",
    "kruskal_wallis": "Kruskal–Wallis",
    "anova": "ANOVA",
}

SUMMARY_COLUMNS = [
    "group", "n", "mean", "sd", "se", "median", "q1", "q3", "iqr", "min", "max",
    "whisker_low", "whisker_high", "n_outliers", "normality_p", "normal", "normality_method",
]
TEST_COLUMNS = ["test", "statistic", "df", "df2", "p_value", "significance", "note"]


def format_group_summary(report: ComparisonReport) -> pd.DataFrame:
    """Descriptive statistics and normality screen, one row per group.

    Returns:
        DataFrame with columns: group, n, mean, sd, se, median, q1, q3, iqr,
        min, max, whisker_low, whisker_high, n_outliers, normality_p, normal,
        normality_method
    """
    rows = []
    for group in report.groups:
        summary = report.summaries[group]
        norm = report.normality[group]
        row = {"group": group, "n": 0}
        if summary:
            row.update(
                {
                    "n": summary.n,
                    "mean": summary.mean,
                    "sd": summary.sd,
                    "se": summary.se,
                    "median": summary.median,
                    "q1": summary.q1,
                    "q3": summary.q3,
                    "iqr": summary.iqr,
                    "min": summary.min,
                    "max": summary.max,
                    "whisker_low": summary.whisker_low,
                    "whisker_high": summary.whisker_high,
                    "n_outliers": len(summary.outliers),
                }
            )
        row["normality_p"] = norm.p_value if norm.p_value is not None else np.nan
        row["normal"] = norm.is_normal
        row["normality_method"] = norm.method
        rows.append(row)

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def format_test_results(tests: Dict[str, Union[TestResult, NoResult]]) -> pd.DataFrame:
    """One row per hypothesis test; skipped tests keep their reason in ``note``."""
    rows: List[Dict[str, object]] = []
    for kind, res in tests.items():
        name = TEST_NAMES.get(kind, kind)
        if not res:
            rows.append({"test": name, "note": res.reason})
            continue
        rows.append(
            {
                "test": name,
                "statistic": res.statistic,
                "df": res.df if res.df is not None else np.nan,
                "df2": res.df2 if res.df2 is not None else np.nan,
                "p_value": res.p_value,
                "significance": res.significance,
                "note": "",
            }
        )

    return pd.DataFrame(rows, columns=TEST_COLUMNS)


def format_roc(roc: RocResult) -> pd.DataFrame:
    """Single-row ROC summary (AUC, CI, Youden cutoff, direction)."""
    optimal = roc.optimal
    return pd.DataFrame(
        [
            {
                "positive_group": roc.positive_group,
                "negative_group": roc.negative_group,
                "n_positive": roc.n_positive,
                "n_negative": roc.n_negative,
                "auc": roc.auc,
                "ci_lower": roc.ci.lower,
                "ci_upper": roc.ci.upper,
                "cutoff": optimal.threshold if optimal is not None else np.nan,
                "sensitivity": optimal.sensitivity if optimal is not None else np.nan,
                "specificity": optimal.specificity if optimal is not None else np.nan,
                "youden": optimal.youden if optimal is not None else np.nan,
                "inverted": roc.inverted,
            }
        ]
    )


def format_roc_points(roc: RocResult) -> pd.DataFrame:
    """ROC curve points in curve order."""
    return pd.DataFrame(
        [
            {
                "threshold": pt.threshold,
                "sensitivity": pt.sensitivity,
                "specificity": pt.specificity,
                "fpr": pt.false_positive_rate,
            }
            for pt in roc.points
        ],
        columns=["threshold", "sensitivity", "specificity", "fpr"],
    )


def format_correlation_matrix(matrix: CorrelationMatrix, value: str = "r") -> pd.DataFrame:
    """Square DataFrame of ``r``, ``p`` or ``n`` indexed by marker on both axes.

    Raises:
        ValueError: If ``value`` is not one of r, p, n
    """
    if value not in ("r", "p", "n"):
        raise ValueError(f"value must be 'r', 'p' or 'n', got {value}")

    data = [
        [getattr(cell, value) if getattr(cell, value) is not None else np.nan for cell in row]
        for row in matrix.cells
    ]
    return pd.DataFrame(data, index=list(matrix.markers), columns=list(matrix.markers))


def format_correlation_pairs(matrix: CorrelationMatrix) -> pd.DataFrame:
    """Long table of the upper triangle: marker1, marker2, r, p_value, n, significance."""
    rows = []
    k = len(matrix.markers)
    for i in range(k):
        for j in range(i + 1, k):
            cell = matrix.cells[i][j]
            rows.append(
                {
                    "marker1": matrix.markers[i],
                    "marker2": matrix.markers[j],
                    "r": cell.r if cell.r is not None else np.nan,
                    "p_value": cell.p if cell.p is not None else np.nan,
                    "n": cell.n,
                    "significance": cell.significance or "",
                }
            )
    return pd.DataFrame(
        rows, columns=["marker1", "marker2", "r", "p_value", "n", "significance"]
    )


def format_survival_curves(report: SurvivalReport) -> pd.DataFrame:
    """Kaplan-Meier step points of every group, stacked."""
    rows = []
    for group, curve in report.curves.items():
        for pt in curve.points:
            rows.append(
                {
                    "group": group,
                    "time": pt.time,
                    "survival": pt.survival,
                    "at_risk": pt.at_risk,
                    "n_events": pt.n_events,
                    "n_censored": pt.n_censored,
                    "event": pt.event,
                    "censored": pt.censored,
                }
            )
    return pd.DataFrame(
        rows,
        columns=["group", "time", "survival", "at_risk", "n_events", "n_censored", "event", "censored"],
    )


def format_survival_summary(report: SurvivalReport) -> pd.DataFrame:
    """Per-group subjects, events and median survival, with the log-rank p-value."""
    lr = report.log_rank
    rows = []
    for group, curve in report.curves.items():
        median = curve.median_survival
        rows.append(
            {
                "group": group,
                "n": curve.n_subjects,
                "events": curve.n_events,
                "median_survival": median if median is not None else np.nan,
                "log_rank_chi2": lr.chi2 if lr else np.nan,
                "log_rank_p": lr.p_value if lr else np.nan,
            }
        )
    return pd.DataFrame(
        rows, columns=["group", "n", "events", "median_survival", "log_rank_chi2", "log_rank_p"]
    )
