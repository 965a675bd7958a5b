"""Cumulative distribution functions for the chi-square, t and F distributions."""

from __future__ import annotations

from clinistat.stats.special import incomplete_beta, incomplete_gamma


def chi_square_cdf(x: float, df: float) -> float:
    """P(X <= x) for X ~ chi-square(df)."""
    if x <= 0:
        return 0.0
    return incomplete_gamma(df / 2.0, x / 2.0)


def t_distribution_cdf(t: float, df: float) -> float:
    """P(T <= t) for T ~ Student t(df).

    Uses P(|T| > |t|) = I_x(df/2, 1/2) with x = df / (df + t^2) and folds the
    tail onto the requested side.
    """
    tail = incomplete_beta(df / 2.0, 0.5, df / (df + t * t))
    if t >= 0:
        return 1.0 - 0.5 * tail
    return 0.5 * tail


def t_two_sided_p(t: float, df: float) -> float:
    """Two-sided tail probability P(|T| >= |t|)."""
    return 2.0 * (1.0 - t_distribution_cdf(abs(t), df))


def f_distribution_cdf(f: float, d1: float, d2: float) -> float:
    """P(F <= f) for F ~ F(d1, d2)."""
    if f <= 0:
        return 0.0
    return incomplete_beta(d1 / 2.0, d2 / 2.0, d1 * f / (d1 * f + d2))
