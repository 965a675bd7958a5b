"""
clinistat: biostatistics for clinical marker data.

This package provides:
- Descriptive statistics with IQR-based outlier detection
- Welch t-test, Mann-Whitney U, Kruskal-Wallis and one-way ANOVA
- ROC analysis with Hanley-McNeil confidence intervals and Youden cutoffs
- Pearson / Spearman correlation matrices
- Kaplan-Meier survival curves and a log-rank test
- Per-subject sampling reduction and a Typer CLI
"""

__version__ = "0.1.0"

from clinistat.api import compare_groups, run_correlation, run_survival
from clinistat.config import AnalysisConfig, CorrelationConfig, SurvivalConfig

__all__ = [
    "__version__",
    "compare_groups",
    "run_correlation",
    "run_survival",
    "AnalysisConfig",
    "CorrelationConfig",
    "SurvivalConfig",
]
