"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer

from clinistat import __version__
from clinistat.api import compare_groups, run_correlation, run_survival
from clinistat.config import AnalysisConfig, CorrelationConfig, SurvivalConfig
from clinistat.io import load_table
from clinistat import reports

app = typer.Typer(
    name="clinistat",
    help="Biostatistics for clinical marker data.",
    add_completion=False,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_USER_ERRORS = (ValueError, FileNotFoundError, ImportError)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"clinistat {__version__}")
        raise typer.Exit()


def _echo_table(title: str, df: pd.DataFrame) -> None:
    typer.secho(f"\n{title}", bold=True)
    if df.empty:
        typer.echo("  (none)")
    else:
        typer.echo(df.to_string(index=False))


def _fail(e: Exception) -> None:
    typer.secho(f"\n✗ Analysis failed: {e}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """clinistat: group comparisons, ROC, correlation and survival for clinical markers."""
    pass


@app.command("compare")
def compare_cmd(
    data: Path = typer.Option(..., "--data", help="Long-format table (.csv or .parquet)."),
    marker: Optional[str] = typer.Option(None, "--marker", help="Marker to analyse"),
    groups: Optional[List[str]] = typer.Option(None, "--groups", help="Subset/order of groups"),
    sampling: str = typer.Option(
        "all", "--sampling", help="Per-subject reduction: all, first, last, nearest"
    ),
    target_day: Optional[float] = typer.Option(
        None, "--target-day", help="Reference day for --sampling nearest"
    ),
    day_min: Optional[float] = typer.Option(None, "--day-min", help="Inclusive lower day bound"),
    day_max: Optional[float] = typer.Option(None, "--day-max", help="Inclusive upper day bound"),
    positive_group: Optional[str] = typer.Option(
        None, "--positive-group", help="Group presumed positive for ROC"
    ),
):
    """
    Compare one marker across groups.

    Expects columns subject_id, group, value and optionally day and marker.
    Two groups get Welch's t-test, Mann–Whitney U and ROC analysis; three or
    more get one-way ANOVA and Kruskal–Wallis.

    Examples:
        clinistat compare --data samples.csv --marker CRP --sampling last

        clinistat compare \\
            --data samples.parquet \\
            --marker IL6 \\
            --groups control --groups sepsis \\
            --sampling nearest --target-day 7
    """
    try:
        config = AnalysisConfig(
            marker=marker,
            groups=list(groups) if groups else None,
            sampling=sampling,
            target_day=target_day,
            day_min=day_min,
            day_max=day_max,
            positive_group=positive_group,
        )
        df = load_table(data, columns=["subject_id", "group", "value"])
        report = compare_groups(df, config)
    except _USER_ERRORS as e:
        _fail(e)

    _echo_table("Descriptive statistics", reports.format_group_summary(report))
    _echo_table("Hypothesis tests", reports.format_test_results(report.tests))
    if report.roc is not None:
        if report.roc:
            _echo_table("ROC analysis", reports.format_roc(report.roc))
        else:
            typer.echo(f"\nROC analysis skipped: {report.roc.reason}")


@app.command("correlate")
def correlate_cmd(
    data: Path = typer.Option(..., "--data", help="Long-format table (.csv or .parquet)."),
    markers: Optional[List[str]] = typer.Option(None, "--markers", help="Subset/order of markers"),
    method: str = typer.Option("pearson", "--method", help="pearson or spearman"),
    day_min: Optional[float] = typer.Option(None, "--day-min", help="Inclusive lower day bound"),
    day_max: Optional[float] = typer.Option(None, "--day-max", help="Inclusive upper day bound"),
):
    """
    Correlation matrix across markers measured on the same subject and day.

    Expects columns subject_id, group, value, marker and optionally day.
    """
    try:
        config = CorrelationConfig(
            markers=list(markers) if markers else None,
            method=method,
            day_min=day_min,
            day_max=day_max,
        )
        df = load_table(data, columns=["subject_id", "group", "value", "marker"])
        matrix = run_correlation(df, config)
    except _USER_ERRORS as e:
        _fail(e)

    _echo_table(f"Correlation ({matrix.method}) r", reports.format_correlation_matrix(matrix, "r"))
    _echo_table("Pairs", reports.format_correlation_pairs(matrix))


@app.command("survival")
def survival_cmd(
    data: Path = typer.Option(..., "--data", help="Table with subject_id, group, time, status."),
    groups: Optional[List[str]] = typer.Option(None, "--groups", help="Subset/order of groups"),
    curves: bool = typer.Option(False, "--curves", help="Also print every curve step"),
):
    """
    Kaplan–Meier curves per group and a log-rank test for two groups.

    status is 1 for an event and 0 for censoring; time is elapsed time from the
    caller's anchor date.
    """
    try:
        config = SurvivalConfig(groups=list(groups) if groups else None)
        df = load_table(data, columns=["subject_id", "group", "time", "status"])
        report = run_survival(df, config)
    except _USER_ERRORS as e:
        _fail(e)

    _echo_table("Survival summary", reports.format_survival_summary(report))
    if not report.log_rank:
        typer.echo(f"\nLog-rank test skipped: {report.log_rank.reason}")
    if curves:
        _echo_table("Kaplan–Meier curves", reports.format_survival_curves(report))


if __name__ == "__main__":
    app()
