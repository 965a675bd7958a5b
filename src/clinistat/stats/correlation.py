"""Pearson and Spearman correlation, single pairs and full marker matrices."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from clinistat.stats.distributions import t_two_sided_p
from clinistat.stats.ranks import mid_ranks
from clinistat.stats.results import NoResult, P_VALUE_FLOOR, clamp_p_value, significance_marker

logger = logging.getLogger(__name__)

MIN_PAIRS = 3
METHODS = ("pearson", "spearman")


@dataclass(frozen=True)
class CorrelationResult:
    method: str
    r: float
    p_value: float
    n: int

    @property
    def significance(self) -> str:
        return significance_marker(self.p_value)


@dataclass(frozen=True)
class CorrelationCell:
    """One matrix cell; ``r`` and ``p`` are None when not computable."""

    r: Optional[float]
    p: Optional[float]
    n: int

    @property
    def significance(self) -> Optional[str]:
        return significance_marker(self.p) if self.p is not None else None


@dataclass(frozen=True)
class CorrelationMatrix:
    """Symmetric correlation matrix indexed by marker name.

    Attributes:
        markers: Marker names in row/column order
        method: "pearson" or "spearman"
        cells: Square tuple of CorrelationCell, ``cells[i][j]`` for markers i, j
    """

    markers: Tuple[str, ...]
    method: str
    cells: Tuple[Tuple[CorrelationCell, ...], ...]

    def cell(self, row: str, col: str) -> CorrelationCell:
        return self.cells[self.markers.index(row)][self.markers.index(col)]


def _paired_finite(x: Iterable[float], y: Iterable[float]) -> Tuple[np.ndarray, np.ndarray]:
    a = np.asarray(list(x), dtype=float)
    b = np.asarray(list(y), dtype=float)
    if len(a) != len(b):
        raise ValueError(f"Paired sequences must have equal length, got {len(a)} and {len(b)}")
    mask = np.isfinite(a) & np.isfinite(b)
    return a[mask], b[mask]


def _pearson_r(a: np.ndarray, b: np.ndarray) -> Optional[float]:
    da = a - np.mean(a)
    db = b - np.mean(b)
    denom = math.sqrt(float(np.sum(da**2)) * float(np.sum(db**2)))
    if denom == 0.0:
        return None
    r = float(np.sum(da * db)) / denom
    return min(1.0, max(-1.0, r))


def _r_p_value(r: float, n: int) -> float:
    if 1.0 - r * r <= 0.0:
        return P_VALUE_FLOOR
    t = r * math.sqrt((n - 2) / (1.0 - r * r))
    return clamp_p_value(t_two_sided_p(t, n - 2))


def pearson(
    x: Iterable[float], y: Iterable[float], method: str = "pearson"
) -> Union[CorrelationResult, NoResult]:
    """Pearson product-moment correlation with a two-sided t-test p-value.

    Args:
        x: First sequence
        y: Second sequence, paired with ``x`` by position
        method: Label recorded on the result

    Returns:
        CorrelationResult, or NoResult for fewer than three complete pairs or
        a constant sequence

    Raises:
        ValueError: If ``x`` and ``y`` differ in length
    """
    a, b = _paired_finite(x, y)
    n = len(a)
    if n < MIN_PAIRS:
        logger.debug(f"{method}: fewer than {MIN_PAIRS} pairs (n={n})")
        return NoResult(f"fewer than {MIN_PAIRS} pairs")

    r = _pearson_r(a, b)
    if r is None:
        logger.debug(f"{method}: zero variance")
        return NoResult("zero variance")

    return CorrelationResult(method=method, r=r, p_value=_r_p_value(r, n), n=n)


def spearman(x: Iterable[float], y: Iterable[float]) -> Union[CorrelationResult, NoResult]:
    """Spearman's rho: Pearson correlation of mid-ranks.

    Raises:
        ValueError: If ``x`` and ``y`` differ in length
    """
    a, b = _paired_finite(x, y)
    if len(a) < MIN_PAIRS:
        return pearson(a, b, method="spearman")
    return pearson(mid_ranks(a), mid_ranks(b), method="spearman")


def correlation_matrix(
    table: pd.DataFrame,
    markers: Optional[Sequence[str]] = None,
    method: str = "pearson",
) -> CorrelationMatrix:
    """Pairwise correlation matrix over a wide marker table.

    Args:
        table: One row per observation key (subject + timepoint), one column
            per marker; missing measurements are NaN
        markers: Marker columns in the desired order (default: column order)
        method: "pearson" or "spearman"

    Returns:
        CorrelationMatrix; each pair uses only rows where both markers are
        present, cells with fewer than three pairs hold ``r = p = None``

    Raises:
        ValueError: On an unknown method or a marker missing from ``table``
    """
    if method not in METHODS:
        raise ValueError(f"method must be one of {list(METHODS)}, got {method}")

    order = list(markers) if markers is not None else [str(c) for c in table.columns]
    missing = [m for m in order if m not in table.columns]
    if missing:
        raise ValueError(f"Markers not found in table: {missing}")

    compute = spearman if method == "spearman" else pearson
    columns = {m: pd.to_numeric(table[m], errors="coerce").to_numpy(dtype=float) for m in order}

    k = len(order)
    grid: List[List[Optional[CorrelationCell]]] = [[None] * k for _ in range(k)]
    for i, mi in enumerate(order):
        grid[i][i] = CorrelationCell(r=1.0, p=0.0, n=int(np.isfinite(columns[mi]).sum()))
        for j in range(i + 1, k):
            xi, xj = columns[mi], columns[order[j]]
            mask = np.isfinite(xi) & np.isfinite(xj)
            n = int(mask.sum())
            result = compute(xi[mask], xj[mask])
            if result:
                cell = CorrelationCell(r=result.r, p=result.p_value, n=n)
            else:
                cell = CorrelationCell(r=None, p=None, n=n)
            grid[i][j] = cell
            grid[j][i] = cell

    return CorrelationMatrix(
        markers=tuple(order),
        method=method,
        cells=tuple(tuple(row) for row in grid),
    )
