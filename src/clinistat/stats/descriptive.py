"""Descriptive statistics with Tukey-fence outlier detection."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Tuple, Union

import numpy as np

from clinistat.stats.results import NoResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummaryStatistics:
    """Per-group descriptive summary.

    Attributes:
        n: Number of finite values
        mean: Arithmetic mean
        sd: Sample standard deviation (n-1 denominator; 0 when n == 1)
        se: Standard error of the mean
        median: Median (mean of the two middle values for even n)
        q1: Value at sorted index floor(0.25 * n)
        q3: Value at sorted index floor(0.75 * n)
        iqr: q3 - q1
        min: Smallest value
        max: Largest value
        whisker_low: max(min, q1 - 1.5 * iqr)
        whisker_high: min(max, q3 + 1.5 * iqr)
        outliers: Values outside the whiskers, in input order
    """

    n: int
    mean: float
    sd: float
    se: float
    median: float
    q1: float
    q3: float
    iqr: float
    min: float
    max: float
    whisker_low: float
    whisker_high: float
    outliers: Tuple[float, ...]


def finite_values(values: Iterable[float]) -> np.ndarray:
    """Return the finite entries of ``values`` as a new float array."""
    x = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
    return x[np.isfinite(x)]


def summary_statistics(values: Iterable[float]) -> Union[SummaryStatistics, NoResult]:
    """Compute n, mean, sd, quartiles, Tukey whiskers and outliers.

    Args:
        values: Numeric values; non-finite entries are ignored

    Returns:
        SummaryStatistics, or NoResult for empty input

    Notes:
        Quartiles are index-based (no interpolation), which keeps them equal to
        observed values as shown on box plots.
    """
    x = finite_values(values)
    n = len(x)
    if n == 0:
        logger.debug("summary_statistics: no finite values")
        return NoResult("no values")

    ordered = np.sort(x)
    mean = float(np.mean(x))
    sd = float(np.std(x, ddof=1)) if n > 1 else 0.0
    se = sd / math.sqrt(n)

    mid = n // 2
    if n % 2 == 0:
        median = float((ordered[mid - 1] + ordered[mid]) / 2.0)
    else:
        median = float(ordered[mid])

    q1 = float(ordered[int(math.floor(n * 0.25))])
    q3 = float(ordered[int(math.floor(n * 0.75))])
    iqr = q3 - q1
    lo, hi = float(ordered[0]), float(ordered[-1])
    whisker_low = max(lo, q1 - 1.5 * iqr)
    whisker_high = min(hi, q3 + 1.5 * iqr)
    outliers = tuple(float(v) for v in x if v < whisker_low or v > whisker_high)

    return SummaryStatistics(
        n=n,
        mean=mean,
        sd=sd,
        se=se,
        median=median,
        q1=q1,
        q3=q3,
        iqr=iqr,
        min=lo,
        max=hi,
        whisker_low=whisker_low,
        whisker_high=whisker_high,
        outliers=outliers,
    )
