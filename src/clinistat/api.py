"""Public API for running analyses on long-format sample tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from clinistat.config import AnalysisConfig, CorrelationConfig, SurvivalConfig
from clinistat.sampling import (
    filter_day_range,
    group_order,
    grouped_values,
    marker_order,
    marker_table,
    reduce_per_subject,
    validate_sample_frame,
)
from clinistat.stats.correlation import CorrelationMatrix, correlation_matrix
from clinistat.stats.descriptive import SummaryStatistics, summary_statistics
from clinistat.stats.normality import NormalityResult, normality_screen
from clinistat.stats.results import NoResult, TestResult
from clinistat.stats.roc import RocResult, roc_analysis
from clinistat.stats.survival import (
    LogRankResult,
    SurvivalCurve,
    SurvivalRecord,
    kaplan_meier,
    log_rank_test,
)
from clinistat.stats.tests import kruskal_wallis, mann_whitney_u, one_way_anova, welch_ttest

logger = logging.getLogger(__name__)

SURVIVAL_COLUMNS = ["subject_id", "group", "time", "status"]


@dataclass(frozen=True)
class ComparisonReport:
    """Everything computed for one marker across groups.

    Attributes:
        marker: Marker name (None for single-marker tables)
        groups: Group labels in analysis order
        n_samples: Rows used after day filtering and per-subject reduction
        summaries: group -> SummaryStatistics (NoResult for an empty group)
        normality: group -> NormalityResult
        tests: test kind -> TestResult or NoResult; Welch t and Mann-Whitney U
            for two groups, ANOVA and Kruskal-Wallis for more
        roc: RocResult/NoResult for two groups, None otherwise
    """

    marker: Optional[str]
    groups: Tuple[str, ...]
    n_samples: int
    summaries: Dict[str, Union[SummaryStatistics, NoResult]]
    normality: Dict[str, NormalityResult]
    tests: Dict[str, Union[TestResult, NoResult]]
    roc: Optional[Union[RocResult, NoResult]] = None

    @property
    def all_normal(self) -> bool:
        """True when every group passes the normality screen."""
        return all(res.is_normal for res in self.normality.values())

    @property
    def recommended_test(self) -> str:
        """Parametric test when all groups screen normal, rank test otherwise."""
        if len(self.groups) == 2:
            return "welch_t" if self.all_normal else "mann_whitney_u"
        return "anova" if self.all_normal else "kruskal_wallis"


@dataclass(frozen=True)
class SurvivalReport:
    curves: Dict[str, SurvivalCurve]
    log_rank: Union[LogRankResult, NoResult]


def _select_marker(frame: pd.DataFrame, marker: Optional[str]) -> pd.DataFrame:
    if "marker" not in frame.columns:
        return frame
    if marker is None:
        present = marker_order(frame)
        if len(present) > 1:
            raise ValueError(f"Table holds several markers {present}; choose one with marker=")
        return frame
    sub = frame.loc[frame["marker"].astype(str) == marker]
    if sub.empty:
        raise ValueError(f"Marker '{marker}' not found in table")
    return sub


def compare_groups(frame: pd.DataFrame, config: AnalysisConfig) -> ComparisonReport:
    """Compare one marker across groups.

    Args:
        frame: Long sample table (subject_id, group, value, optional day/marker)
        config: AnalysisConfig

    Returns:
        ComparisonReport

    Raises:
        ValueError: If required columns are missing, the marker is unknown, or
            fewer than two groups are available

    Example:
        >>> from clinistat.api import compare_groups
        >>> from clinistat.config import AnalysisConfig
        >>> report = compare_groups(df, AnalysisConfig(marker="CRP", sampling="last"))
        >>> report.tests["welch_t"].p_value
    """
    validate_sample_frame(frame)
    df = _select_marker(frame, config.marker)
    df = filter_day_range(df, config.day_min, config.day_max)
    df = reduce_per_subject(df, config.sampling, config.target_day)

    groups = group_order(df, config.groups)
    if len(groups) < 2:
        raise ValueError(f"At least 2 groups required, found {len(groups)}")

    logger.info(f"Comparing {config.marker or 'marker'} across {len(groups)} groups -> {groups}")
    logger.info(f"  Samples: {len(df)} (sampling={config.sampling})")

    values = grouped_values(df, groups)
    summaries = {g: summary_statistics(v) for g, v in values.items()}
    normality = {g: normality_screen(v) for g, v in values.items()}

    roc = None
    if len(groups) == 2:
        positive = config.positive_group or groups[0]
        if positive not in groups:
            raise ValueError(f"positive_group {positive!r} not among groups {groups}")
        negative = groups[1] if positive == groups[0] else groups[0]
        a, b = values[groups[0]], values[groups[1]]
        tests = {
            "welch_t": welch_ttest(a, b),
            "mann_whitney_u": mann_whitney_u(a, b),
        }
        roc = roc_analysis(values[positive], values[negative], positive, negative)
    else:
        ordered = [values[g] for g in groups]
        tests = {
            "anova": one_way_anova(ordered),
            "kruskal_wallis": kruskal_wallis(ordered),
        }

    for kind, res in tests.items():
        if not res:
            logger.warning(f"  {kind} skipped: {res.reason}")

    return ComparisonReport(
        marker=config.marker,
        groups=tuple(groups),
        n_samples=len(df),
        summaries=summaries,
        normality=normality,
        tests=tests,
        roc=roc,
    )


def run_correlation(frame: pd.DataFrame, config: CorrelationConfig) -> CorrelationMatrix:
    """Correlation matrix of all markers measured on the same subject and day.

    Raises:
        ValueError: If the table has no ``marker`` column or a marker is unknown
    """
    validate_sample_frame(frame, extra=["marker"])
    df = filter_day_range(frame, config.day_min, config.day_max)
    markers = marker_order(df, config.markers)

    logger.info(f"Correlating {len(markers)} markers ({config.method})")
    table = marker_table(df, markers)
    return correlation_matrix(table, markers=markers, method=config.method)


def survival_records(frame: pd.DataFrame) -> List[SurvivalRecord]:
    """Convert a (subject_id, group, time, status) table to SurvivalRecord list.

    Rows with a missing time or status are dropped with a warning.

    Raises:
        ValueError: On missing columns, negative times or status not in {0, 1}
    """
    missing = [c for c in SURVIVAL_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Survival table is missing columns: {missing}")

    df = frame.assign(
        time=pd.to_numeric(frame["time"], errors="coerce"),
        status=pd.to_numeric(frame["status"], errors="coerce"),
    )
    incomplete = df["time"].isna() | df["status"].isna()
    if incomplete.any():
        logger.warning(f"Dropping {int(incomplete.sum())} rows with missing time or status")
        df = df.loc[~incomplete]

    if (df["time"] < 0).any():
        raise ValueError("Survival times must be >= 0")
    if not df["status"].isin([0, 1]).all():
        raise ValueError("Status must be 0 (censored) or 1 (event)")

    return [
        SurvivalRecord(str(row.subject_id), str(row.group), float(row.time), int(row.status))
        for row in df.itertuples(index=False)
    ]


def run_survival(frame: pd.DataFrame, config: SurvivalConfig) -> SurvivalReport:
    """Kaplan-Meier curves per group, plus a log-rank test for two groups."""
    records = survival_records(frame)
    groups = config.groups
    if groups is not None:
        records = [rec for rec in records if rec.group in groups]

    curves = kaplan_meier(records)
    if groups is not None:
        curves = {g: curves[g] for g in groups if g in curves}

    logger.info(f"Kaplan-Meier curves for {len(curves)} groups -> {list(curves)}")

    if len(curves) == 2:
        first, second = list(curves)
        log_rank = log_rank_test(
            [rec for rec in records if rec.group == first],
            [rec for rec in records if rec.group == second],
        )
    else:
        log_rank = NoResult("log-rank test requires exactly 2 groups")

    return SurvivalReport(curves=curves, log_rank=log_rank)
