"""Biostatistical computation engine.

Pure functions that turn per-patient marker values into group comparisons,
diagnostic-accuracy metrics, correlation structures and survival curves:

- Special functions and distribution CDFs (no SciPy dependency)
- Descriptive statistics with Tukey-fence outliers and a normality screen
- Welch t-test, Mann-Whitney U, Kruskal-Wallis, one-way ANOVA
- ROC curve, trapezoidal AUC, Hanley-McNeil CI, Youden cutoff
- Pearson / Spearman correlation and correlation matrices
- Kaplan-Meier curves and an approximate log-rank test

Every operation returns an immutable record, or :class:`NoResult` when the data
are insufficient; nothing here raises for statistical preconditions.

Public API:
-----------
from clinistat.stats import welch_ttest, mann_whitney_u, roc_analysis

result = welch_ttest([10, 12, 11, 13, 12], [20, 22, 21, 23, 25])
if result:
    print(result.statistic, result.p_value, result.significance)
"""

from clinistat.stats.correlation import (
    CorrelationCell,
    CorrelationMatrix,
    CorrelationResult,
    correlation_matrix,
    pearson,
    spearman,
)
from clinistat.stats.descriptive import SummaryStatistics, summary_statistics
from clinistat.stats.normality import NormalityResult, normality_screen
from clinistat.stats.results import NoResult, TestResult, significance_marker
from clinistat.stats.roc import RocPoint, RocResult, roc_analysis, roc_curve
from clinistat.stats.survival import (
    LogRankResult,
    SurvivalCurve,
    SurvivalRecord,
    kaplan_meier,
    log_rank_test,
)
from clinistat.stats.tests import kruskal_wallis, mann_whitney_u, one_way_anova, welch_ttest

__all__ = [
    "CorrelationCell",
    "CorrelationMatrix",
    "CorrelationResult",
    "LogRankResult",
    "NoResult",
    "NormalityResult",
    "RocPoint",
    "RocResult",
    "SummaryStatistics",
    "SurvivalCurve",
    "SurvivalRecord",
    "TestResult",
    "correlation_matrix",
    "kaplan_meier",
    "kruskal_wallis",
    "log_rank_test",
    "mann_whitney_u",
    "normality_screen",
    "one_way_anova",
    "pearson",
    "roc_analysis",
    "roc_curve",
    "significance_marker",
    "spearman",
    "summary_statistics",
    "welch_ttest",
]
