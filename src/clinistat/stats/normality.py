"""Approximate normality screen based on sample skewness and kurtosis."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from clinistat.stats.descriptive import finite_values

MIN_SCREEN_N = 3
MAX_SCREEN_N = 50
LARGE_SAMPLE_N = 30
NORMALITY_ALPHA = 0.05

METHOD_JARQUE_BERA = "Jarque-Bera approximation"
METHOD_SAMPLE_SIZE = "sample-size heuristic"


@dataclass(frozen=True)
class NormalityResult:
    """Outcome of :func:`normality_screen`.

    Attributes:
        n: Number of finite values screened
        is_normal: Whether the sample is treated as approximately normal
        p_value: Approximate p-value, None when no test statistic was formed
        statistic: Jarque-Bera-like statistic, None when not computed
        skewness: Sample skewness from central moments
        kurtosis: Excess kurtosis from central moments
        method: Which branch produced the flag
        approximate: Always True; this is a screen, not Shapiro-Wilk
    """

    n: int
    is_normal: bool
    p_value: Optional[float] = None
    statistic: Optional[float] = None
    skewness: Optional[float] = None
    kurtosis: Optional[float] = None
    method: str = METHOD_JARQUE_BERA
    approximate: bool = True


def normality_screen(values: Iterable[float]) -> NormalityResult:
    """Screen a sample for gross departures from normality.

    Args:
        values: Numeric values; non-finite entries are ignored

    Returns:
        NormalityResult

    Notes:
        - n < 3 or n > 50: no statistic; ``is_normal = n >= 30`` (large samples
          are handed to parametric tests on central-limit grounds)
        - 3 <= n <= 50: JB = (n/6)(skew^2 + kurt^2/4), p ~= exp(-JB/2),
          ``is_normal = p > 0.05``
        - The exp(-JB/2) tail is the chi-square(2) survival function; the
          screen is a heuristic and is not a validated Shapiro-Wilk test.
        - Constant samples are reported as not normal with no p-value.
    """
    x = finite_values(values)
    n = len(x)

    if n < MIN_SCREEN_N or n > MAX_SCREEN_N:
        return NormalityResult(n=n, is_normal=n >= LARGE_SAMPLE_N, method=METHOD_SAMPLE_SIZE)

    centered = x - np.mean(x)
    m2 = float(np.mean(centered**2))
    if m2 <= 0.0:
        return NormalityResult(n=n, is_normal=False)

    m3 = float(np.mean(centered**3))
    m4 = float(np.mean(centered**4))
    skew = m3 / m2**1.5
    kurt = m4 / m2**2 - 3.0

    jb = (n / 6.0) * (skew**2 + kurt**2 / 4.0)
    p = math.exp(-jb / 2.0)

    return NormalityResult(
        n=n,
        is_normal=p > NORMALITY_ALPHA,
        p_value=p,
        statistic=jb,
        skewness=skew,
        kurtosis=kurt,
    )
