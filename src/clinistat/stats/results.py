"""Immutable result records shared by the statistical components."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

P_VALUE_FLOOR = 1e-4

# (upper bound, marker), checked in order
SIGNIFICANCE_LEVELS: Tuple[Tuple[float, str], ...] = (
    (0.001, "***"),
    (0.01, "**"),
    (0.05, "*"),
)
NOT_SIGNIFICANT = "n.s."


@dataclass(frozen=True)
class NoResult:
    """Sentinel returned when a statistic cannot be computed.

    Evaluates as false so callers can write ``if result:`` before reporting.

    Attributes:
        reason: Why the computation was skipped (e.g. "group size < 2")
    """

    reason: str

    def __bool__(self) -> bool:
        return False


def clamp_p_value(p: float) -> float:
    """Clamp a p-value into [P_VALUE_FLOOR, 1]; never claim certainty."""
    if math.isnan(p):
        return 1.0
    return min(1.0, max(P_VALUE_FLOOR, p))


def significance_marker(p: Optional[float]) -> str:
    """Map a p-value to ``***``, ``**``, ``*`` or ``n.s.``."""
    if p is None:
        return NOT_SIGNIFICANT
    for bound, marker in SIGNIFICANCE_LEVELS:
        if p < bound:
            return marker
    return NOT_SIGNIFICANT


@dataclass(frozen=True)
class TestResult:
    """Outcome of a two- or k-sample hypothesis test.

    Attributes:
        kind: One of "welch_t", "mann_whitney_u", "kruskal_wallis", "anova"
        statistic: t, U, H or F depending on ``kind``
        p_value: Two-sided p-value in [0.0001, 1]
        group_sizes: Number of values per group, in input order
        df: Degrees of freedom (Welch df, k-1 for Kruskal-Wallis, between df for ANOVA)
        df2: Within-group degrees of freedom (ANOVA only)
        z: Normal approximation score (Mann-Whitney U only)
        rank_sums: Pooled mid-rank sum per group (rank tests only)
        u1: U statistic of the first group (Mann-Whitney U only)
        u2: U statistic of the second group (Mann-Whitney U only)
    """

    __test__ = False  # not a pytest class

    kind: str
    statistic: float
    p_value: float
    group_sizes: Tuple[int, ...]
    df: Optional[float] = None
    df2: Optional[float] = None
    z: Optional[float] = None
    rank_sums: Optional[Tuple[float, ...]] = None
    u1: Optional[float] = None
    u2: Optional[float] = None

    @property
    def significance(self) -> str:
        return significance_marker(self.p_value)
