"""Statistical tests (parametric and nonparametric)."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Sequence, Union

import numpy as np

from clinistat.stats.descriptive import finite_values
from clinistat.stats.distributions import chi_square_cdf, f_distribution_cdf, t_two_sided_p
from clinistat.stats.ranks import mid_ranks
from clinistat.stats.results import NoResult, TestResult, clamp_p_value
from clinistat.stats.special import normal_cdf

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2


def _no_result(test: str, reason: str) -> NoResult:
    logger.debug(f"{test}: {reason}")
    return NoResult(reason)


def _non_empty_groups(groups: Sequence[Iterable[float]]) -> List[np.ndarray]:
    cleaned = [finite_values(g) for g in groups]
    return [g for g in cleaned if len(g) > 0]


def welch_ttest(a: Iterable[float], b: Iterable[float]) -> Union[TestResult, NoResult]:
    """Perform Welch's t-test (unequal variances).

    Args:
        a: First group values
        b: Second group values

    Returns:
        TestResult with ``statistic`` = t and ``df`` = Welch-Satterthwaite
        degrees of freedom, or NoResult when either group has fewer than two
        values or both groups are constant
    """
    x, y = finite_values(a), finite_values(b)
    n1, n2 = len(x), len(y)
    if n1 < MIN_GROUP_SIZE or n2 < MIN_GROUP_SIZE:
        return _no_result("welch_ttest", f"group size < {MIN_GROUP_SIZE} (n1={n1}, n2={n2})")

    v1 = float(np.var(x, ddof=1)) / n1
    v2 = float(np.var(y, ddof=1)) / n2
    se2 = v1 + v2
    if se2 <= 0.0:
        return _no_result("welch_ttest", "zero variance in both groups")

    t = (float(np.mean(x)) - float(np.mean(y))) / math.sqrt(se2)
    df = se2**2 / (v1**2 / (n1 - 1) + v2**2 / (n2 - 1))
    p = clamp_p_value(t_two_sided_p(t, df))

    return TestResult(kind="welch_t", statistic=t, p_value=p, group_sizes=(n1, n2), df=df)


def mann_whitney_u(a: Iterable[float], b: Iterable[float]) -> Union[TestResult, NoResult]:
    """Perform the Mann-Whitney U test with mid-rank tie handling.

    Args:
        a: First group values
        b: Second group values

    Returns:
        TestResult with ``statistic`` = min(U1, U2), the normal approximation
        ``z`` and the pooled ``rank_sums``, or NoResult when either group has
        fewer than two values

    Notes:
        Two-sided p = 2 * (1 - Phi(|z|)) without continuity correction.
    """
    x, y = finite_values(a), finite_values(b)
    n1, n2 = len(x), len(y)
    if n1 < MIN_GROUP_SIZE or n2 < MIN_GROUP_SIZE:
        return _no_result("mann_whitney_u", f"group size < {MIN_GROUP_SIZE} (n1={n1}, n2={n2})")

    ranks = mid_ranks(np.concatenate([x, y]))
    r1 = float(np.sum(ranks[:n1]))
    r2 = float(np.sum(ranks[n1:]))

    u1 = n1 * n2 + n1 * (n1 + 1) / 2.0 - r1
    u2 = n1 * n2 - u1
    u = min(u1, u2)

    mu = n1 * n2 / 2.0
    sigma = math.sqrt(n1 * n2 * (n1 + n2 + 1) / 12.0)
    z = (u - mu) / sigma
    p = clamp_p_value(2.0 * (1.0 - normal_cdf(abs(z))))

    return TestResult(
        kind="mann_whitney_u",
        statistic=u,
        p_value=p,
        group_sizes=(n1, n2),
        z=z,
        rank_sums=(r1, r2),
        u1=u1,
        u2=u2,
    )


def kruskal_wallis(groups: Sequence[Iterable[float]]) -> Union[TestResult, NoResult]:
    """Perform Kruskal-Wallis H test.

    Args:
        groups: Ordered list of group values; empty groups are ignored

    Returns:
        TestResult with ``statistic`` = H and ``df`` = k - 1, or NoResult when
        fewer than two non-empty groups remain
    """
    kept = _non_empty_groups(groups)
    k = len(kept)
    if k < 2:
        return _no_result("kruskal_wallis", f"fewer than 2 non-empty groups (k={k})")

    sizes = [len(g) for g in kept]
    n_total = sum(sizes)
    ranks = mid_ranks(np.concatenate(kept))

    rank_sums = []
    start = 0
    for size in sizes:
        rank_sums.append(float(np.sum(ranks[start : start + size])))
        start += size

    h = 12.0 / (n_total * (n_total + 1)) * sum(
        r**2 / size for r, size in zip(rank_sums, sizes)
    ) - 3.0 * (n_total + 1)
    # mid-ranks with every value tied produce a tiny negative H from rounding
    h = max(h, 0.0)
    df = k - 1
    p = clamp_p_value(1.0 - chi_square_cdf(h, df))

    return TestResult(
        kind="kruskal_wallis",
        statistic=h,
        p_value=p,
        group_sizes=tuple(sizes),
        df=float(df),
        rank_sums=tuple(rank_sums),
    )


def one_way_anova(groups: Sequence[Iterable[float]]) -> Union[TestResult, NoResult]:
    """Perform one-way ANOVA.

    Args:
        groups: Ordered list of group values; empty groups are ignored

    Returns:
        TestResult with ``statistic`` = F, ``df`` = k - 1 and ``df2`` = N - k,
        or NoResult for fewer than two groups, no within-group degrees of
        freedom, or zero within-group variance
    """
    kept = _non_empty_groups(groups)
    k = len(kept)
    if k < 2:
        return _no_result("one_way_anova", f"fewer than 2 non-empty groups (k={k})")

    sizes = [len(g) for g in kept]
    n_total = sum(sizes)
    df_between = k - 1
    df_within = n_total - k
    if df_within <= 0:
        return _no_result("one_way_anova", "no within-group degrees of freedom")

    grand_mean = float(np.mean(np.concatenate(kept)))
    ssb = sum(len(g) * (float(np.mean(g)) - grand_mean) ** 2 for g in kept)
    ssw = sum(float(np.sum((g - np.mean(g)) ** 2)) for g in kept)
    if ssw <= 0.0:
        return _no_result("one_way_anova", "zero within-group variance")

    f = (ssb / df_between) / (ssw / df_within)
    p = clamp_p_value(1.0 - f_distribution_cdf(f, df_between, df_within))

    return TestResult(
        kind="anova",
        statistic=f,
        p_value=p,
        group_sizes=tuple(sizes),
        df=float(df_between),
        df2=float(df_within),
    )
