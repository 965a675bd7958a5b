"""Tests for ROC curve, AUC, Hanley-McNeil CI and Youden cutoff."""

import math

import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from clinistat.stats.results import NoResult
from clinistat.stats.roc import (
    RocPoint,
    roc_curve,
    trapezoidal_auc,
    hanley_mcneil_ci,
    optimal_cutoff,
    roc_analysis,
)


def test_youden_optimum_perfect_separation():
    res = roc_analysis([5, 6, 7, 9], [1, 2, 3, 4])

    assert res.auc == 1.0
    assert res.inverted is False
    assert res.optimal.sensitivity == 1.0
    assert res.optimal.specificity == 1.0
    assert res.optimal.threshold == 5.0
    assert res.youden == 1.0


def test_roc_curve_staircase_endpoints():
    points = roc_curve([5, 6, 7, 9], [1, 2, 3, 4])

    first, last = points[0], points[-1]
    assert math.isinf(first.threshold) and first.threshold > 0
    assert (first.false_positive_rate, first.sensitivity) == (0.0, 0.0)
    assert math.isinf(last.threshold) and last.threshold < 0
    assert (last.false_positive_rate, last.sensitivity) == (1.0, 1.0)
    # -inf, 8 distinct values, +inf
    assert len(points) == 10


def test_roc_curve_is_monotone():
    rng = np.random.default_rng(5)
    points = roc_curve(rng.normal(1, 1, 30), rng.normal(0, 1, 25))

    fpr = [pt.false_positive_rate for pt in points]
    tpr = [pt.sensitivity for pt in points]
    assert fpr == sorted(fpr)
    assert tpr == sorted(tpr)


def test_trapezoidal_auc_matches_sklearn_with_ties():
    pos = [0.3, 0.5, 0.5, 0.8, 1.2, 1.2]
    neg = [0.1, 0.5, 0.4, 0.8, 0.2]

    auc = trapezoidal_auc(roc_curve(pos, neg))
    ref = roc_auc_score([1] * len(pos) + [0] * len(neg), pos + neg)

    assert auc == pytest.approx(ref, abs=1e-12)


def test_auc_bounds_and_direction_correction():
    rng = np.random.default_rng(6)
    for _ in range(25):
        pos = rng.normal(rng.uniform(-2, 2), 1.0, int(rng.integers(2, 20)))
        neg = rng.normal(0.0, 1.0, int(rng.integers(2, 20)))

        raw = trapezoidal_auc(roc_curve(pos, neg))
        assert 0.0 <= raw <= 1.0

        res = roc_analysis(pos, neg)
        assert 0.5 <= res.auc <= 1.0
        assert 0.0 <= res.ci.lower <= res.auc <= res.ci.upper <= 1.0
        assert res.inverted == (raw < 0.5)


def test_direction_correction_swaps_labels():
    res = roc_analysis([1, 2, 3, 4], [5, 6, 7, 9], positive_label="disease", negative_label="control")

    assert res.inverted is True
    assert res.auc == 1.0
    assert res.positive_group == "control"
    assert res.negative_group == "disease"
    assert res.n_positive == 4


def test_roc_analysis_undersized_returns_no_result():
    res = roc_analysis([1.0], [2.0, 3.0])

    assert isinstance(res, NoResult)


def test_hanley_mcneil_ci_values():
    ci = hanley_mcneil_ci(0.5, 10, 10)
    q = 0.5 / 1.5
    se = math.sqrt((0.25 + 9 * (q - 0.25) * 2) / 100)

    assert ci.lower == pytest.approx(0.5 - 1.96 * se)
    assert ci.upper == pytest.approx(0.5 + 1.96 * se)


def test_hanley_mcneil_ci_small_groups_and_clamping():
    ci = hanley_mcneil_ci(0.8, 1, 10)
    assert (ci.lower, ci.upper) == (0.0, 1.0)

    ci = hanley_mcneil_ci(0.98, 3, 3)
    assert ci.upper == 1.0
    assert ci.lower >= 0.0


def test_optimal_cutoff_skips_boundary_thresholds():
    points = [
        RocPoint(math.inf, 0.0, 1.0),
        RocPoint(-math.inf, 1.0, 0.0),
    ]
    assert optimal_cutoff(points) is None

    points.insert(1, RocPoint(3.0, 0.8, 0.7))
    assert optimal_cutoff(points).threshold == 3.0
