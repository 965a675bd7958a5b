"""Mid-rank assignment shared by the rank-based tests and Spearman's rho."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def mid_ranks(values: Sequence[float]) -> np.ndarray:
    """Rank values from 1..n, giving tied values the mean of their positions.

    Args:
        values: Values to rank (not modified)

    Returns:
        Array of float ranks aligned with ``values``

    Example:
        >>> mid_ranks([10.0, 20.0, 20.0, 30.0]).tolist()
        [1.0, 2.5, 2.5, 4.0]
    """
    x = np.asarray(values, dtype=float)
    n = len(x)
    order = np.argsort(x, kind="mergesort")
    ranks = np.empty(n, dtype=float)

    i = 0
    while i < n:
        j = i
        while j + 1 < n and x[order[j + 1]] == x[order[i]]:
            j += 1
        # positions i..j (0-based) share rank mean(i+1 .. j+1)
        ranks[order[i : j + 1]] = (i + j) / 2.0 + 1.0
        i = j + 1

    return ranks
