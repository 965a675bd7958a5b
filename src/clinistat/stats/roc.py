"""Receiver-operating-characteristic analysis for a single marker.

Builds the empirical ROC staircase from two groups of raw values, integrates it
with the trapezoid rule, attaches a Hanley-McNeil confidence interval and picks
the Youden-optimal threshold. Group direction is not known in advance, so an
AUC below 0.5 triggers a swap of the positive and negative groups.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from clinistat.stats.descriptive import finite_values
from clinistat.stats.results import NoResult

logger = logging.getLogger(__name__)

CI_Z = 1.96
MIN_GROUP_SIZE = 2


@dataclass(frozen=True)
class RocPoint:
    """One operating point; values >= ``threshold`` are called positive."""

    threshold: float
    sensitivity: float
    specificity: float

    @property
    def false_positive_rate(self) -> float:
        return 1.0 - self.specificity

    @property
    def youden(self) -> float:
        return self.sensitivity + self.specificity - 1.0


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float


@dataclass(frozen=True)
class RocResult:
    """ROC analysis of one marker between two groups.

    Attributes:
        points: Curve points ordered by ascending FPR, then ascending TPR
        auc: Trapezoidal area under the curve, in [0, 1]
        ci: 95% Hanley-McNeil confidence interval for the AUC
        optimal: Youden-optimal operating point (None if only boundary points)
        inverted: True when the input groups were swapped to keep AUC >= 0.5
        positive_group: Label of the group treated as positive
        negative_group: Label of the group treated as negative
        n_positive: Size of the positive group
        n_negative: Size of the negative group
    """

    points: Tuple[RocPoint, ...]
    auc: float
    ci: ConfidenceInterval
    optimal: Optional[RocPoint]
    inverted: bool
    positive_group: str
    negative_group: str
    n_positive: int
    n_negative: int

    @property
    def youden(self) -> Optional[float]:
        return self.optimal.youden if self.optimal is not None else None


def roc_curve(positive: Iterable[float], negative: Iterable[float]) -> List[RocPoint]:
    """Compute the empirical ROC curve.

    Args:
        positive: Values of the positive (e.g. disease) group
        negative: Values of the negative (e.g. control) group

    Returns:
        Points for thresholds -inf, every distinct observed value, and +inf,
        sorted by ascending FPR with ties in ascending TPR so the staircase
        runs from (0, 0) to (1, 1)
    """
    pos = finite_values(positive)
    neg = finite_values(negative)
    n_pos, n_neg = len(pos), len(neg)

    thresholds = [-math.inf] + np.unique(np.concatenate([pos, neg])).tolist() + [math.inf]

    points = []
    for threshold in thresholds:
        tp = int(np.sum(pos >= threshold))
        fp = int(np.sum(neg >= threshold))
        sensitivity = tp / n_pos if n_pos else 0.0
        specificity = (n_neg - fp) / n_neg if n_neg else 0.0
        points.append(RocPoint(float(threshold), sensitivity, specificity))

    points.sort(key=lambda pt: (pt.false_positive_rate, pt.sensitivity))
    return points


def trapezoidal_auc(points: Sequence[RocPoint]) -> float:
    """Area under FPR-ordered ROC points by the trapezoid rule, clamped to [0, 1]."""
    area = 0.0
    for prev, cur in zip(points, points[1:]):
        width = cur.false_positive_rate - prev.false_positive_rate
        area += width * (cur.sensitivity + prev.sensitivity) / 2.0
    return min(1.0, max(0.0, area))


def hanley_mcneil_ci(
    auc: float, n_pos: int, n_neg: int, z: float = CI_Z
) -> ConfidenceInterval:
    """Hanley-McNeil (1982) confidence interval for an AUC.

    Args:
        auc: Area under the curve
        n_pos: Positive group size
        n_neg: Negative group size
        z: Normal quantile (1.96 for 95%)

    Returns:
        ConfidenceInterval clamped to [0, 1]; (0, 1) when either group has
        fewer than two members
    """
    if n_pos < MIN_GROUP_SIZE or n_neg < MIN_GROUP_SIZE:
        return ConfidenceInterval(0.0, 1.0)

    q1 = auc / (2.0 - auc)
    q2 = 2.0 * auc**2 / (1.0 + auc)
    variance = (
        auc * (1.0 - auc) + (n_pos - 1) * (q1 - auc**2) + (n_neg - 1) * (q2 - auc**2)
    ) / (n_pos * n_neg)
    se = math.sqrt(max(variance, 0.0))

    return ConfidenceInterval(max(0.0, auc - z * se), min(1.0, auc + z * se))


def optimal_cutoff(points: Sequence[RocPoint]) -> Optional[RocPoint]:
    """Return the point maximizing Youden's J, skipping the +/-inf thresholds.

    The first maximum in curve order wins.
    """
    best: Optional[RocPoint] = None
    for pt in points:
        if math.isinf(pt.threshold):
            continue
        if best is None or pt.youden > best.youden:
            best = pt
    return best


def roc_analysis(
    positive: Iterable[float],
    negative: Iterable[float],
    positive_label: str = "positive",
    negative_label: str = "negative",
) -> Union[RocResult, NoResult]:
    """Full ROC analysis with automatic direction correction.

    Args:
        positive: Values of the group presumed positive
        negative: Values of the group presumed negative
        positive_label: Display label of ``positive``
        negative_label: Display label of ``negative``

    Returns:
        RocResult, or NoResult when either group has fewer than two values
    """
    pos, neg = finite_values(positive), finite_values(negative)
    if len(pos) < MIN_GROUP_SIZE or len(neg) < MIN_GROUP_SIZE:
        logger.debug(f"roc_analysis: group size < {MIN_GROUP_SIZE} (pos={len(pos)}, neg={len(neg)})")
        return NoResult(f"group size < {MIN_GROUP_SIZE}")

    points = roc_curve(pos, neg)
    auc = trapezoidal_auc(points)
    inverted = False
    if auc < 0.5:
        pos, neg = neg, pos
        positive_label, negative_label = negative_label, positive_label
        points = roc_curve(pos, neg)
        auc = trapezoidal_auc(points)
        inverted = True

    return RocResult(
        points=tuple(points),
        auc=auc,
        ci=hanley_mcneil_ci(auc, len(pos), len(neg)),
        optimal=optimal_cutoff(points),
        inverted=inverted,
        positive_group=positive_label,
        negative_group=negative_label,
        n_positive=len(pos),
        n_negative=len(neg),
    )
