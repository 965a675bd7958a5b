"""Sample records and per-subject reduction ahead of the statistical tests.

Measurements arrive as a long table, one row per (subject, group, day, marker,
value). Repeated measurements of the same subject violate the independence
assumed by the two-sample tests, so callers may reduce each subject to a single
value (first, last, or nearest a target day) before grouping.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from clinistat.config import SAMPLING_MODES

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ["subject_id", "group", "day", "value", "marker"]
REQUIRED_COLUMNS = ["subject_id", "group", "value"]


@dataclass(frozen=True)
class Sample:
    """One measurement of one marker for one subject at one timepoint.

    ``day`` is None when the sample has no reference date.
    """

    subject_id: str
    group: str
    day: Optional[float]
    value: float
    marker: Optional[str] = None


def samples_to_frame(samples: Iterable[Sample]) -> pd.DataFrame:
    """Build the long sample table from Sample records."""
    rows = [asdict(s) for s in samples]
    frame = pd.DataFrame(rows, columns=SAMPLE_COLUMNS)
    frame["day"] = pd.to_numeric(frame["day"], errors="coerce")
    frame["value"] = pd.to_numeric(frame["value"], errors="coerce")
    return frame


def validate_sample_frame(frame: pd.DataFrame, extra: Sequence[str] = ()) -> None:
    """Check that the long sample table carries the required columns.

    Raises:
        ValueError: If a required column is missing
    """
    missing = [c for c in list(REQUIRED_COLUMNS) + list(extra) if c not in frame.columns]
    if missing:
        raise ValueError(f"Sample table is missing columns: {missing}")


def _day_column(frame: pd.DataFrame) -> pd.Series:
    if "day" not in frame.columns:
        return pd.Series(np.nan, index=frame.index, dtype=float)
    return pd.to_numeric(frame["day"], errors="coerce")


def filter_day_range(
    frame: pd.DataFrame, day_min: Optional[float] = None, day_max: Optional[float] = None
) -> pd.DataFrame:
    """Keep samples whose day lies in the inclusive range [day_min, day_max].

    Samples without a day are dropped whenever a bound is given; with no bounds
    the frame is returned unchanged.
    """
    if day_min is None and day_max is None:
        return frame

    day = _day_column(frame)
    mask = day.notna()
    if day_min is not None:
        mask &= day >= day_min
    if day_max is not None:
        mask &= day <= day_max

    logger.debug(f"Day filter [{day_min}, {day_max}] kept {int(mask.sum())}/{len(frame)} samples")
    return frame.loc[mask]


def reduce_per_subject(
    frame: pd.DataFrame, mode: str = "all", target_day: Optional[float] = None
) -> pd.DataFrame:
    """Reduce repeated measurements to one row per subject.

    Args:
        frame: Long sample table
        mode: "all" (no reduction), "first", "last" or "nearest"
        target_day: Reference day for "nearest"

    Returns:
        Reduced table in the original row order

    Notes:
        - Rows are unique per (subject_id, group) and per marker when a
          ``marker`` column is present.
        - first/last order by day; undated samples are used only when a
          subject has no dated sample.
        - nearest drops undated samples and breaks distance ties by input order.

    Raises:
        ValueError: On an unknown mode, or "nearest" without ``target_day``
    """
    if mode not in SAMPLING_MODES:
        raise ValueError(f"mode must be one of {SAMPLING_MODES}, got {mode}")
    if mode == "all":
        return frame
    if mode == "nearest" and target_day is None:
        raise ValueError("mode='nearest' requires target_day")

    validate_sample_frame(frame)
    keys = ["subject_id", "group"] + (["marker"] if "marker" in frame.columns else [])

    work = frame.reset_index(drop=True)
    day = _day_column(work)

    if mode == "nearest":
        work = work.assign(_distance=(day - target_day).abs()).loc[day.notna()]
        work = work.sort_values("_distance", kind="mergesort")
        reduced = work.groupby(keys, sort=False, dropna=False).head(1).drop(columns="_distance")
    else:
        work = work.assign(_day=day)
        if mode == "first":
            work = work.sort_values("_day", kind="mergesort", na_position="last")
            reduced = work.groupby(keys, sort=False, dropna=False).head(1)
        else:
            work = work.sort_values("_day", kind="mergesort", na_position="first")
            reduced = work.groupby(keys, sort=False, dropna=False).tail(1)
        reduced = reduced.drop(columns="_day")

    logger.debug(f"Sampling mode '{mode}' reduced {len(frame)} rows to {len(reduced)}")
    return reduced.sort_index()


def group_order(frame: pd.DataFrame, groups: Optional[Sequence[str]] = None) -> List[str]:
    """Explicit group order: ``groups`` if given, else order of first appearance."""
    if groups is not None:
        return [str(g) for g in groups]
    return [str(g) for g in pd.unique(frame["group"].dropna().astype(str))]


def grouped_values(
    frame: pd.DataFrame, groups: Optional[Sequence[str]] = None
) -> Dict[str, List[float]]:
    """Ordered mapping group -> finite values.

    Groups listed in ``groups`` but absent from ``frame`` map to an empty list.
    """
    validate_sample_frame(frame)
    labels = frame["group"].astype(str)
    values = pd.to_numeric(frame["value"], errors="coerce")

    out: Dict[str, List[float]] = {}
    for g in group_order(frame, groups):
        v = values[labels == g]
        out[g] = [float(x) for x in v[np.isfinite(v)]]
    return out


def marker_order(frame: pd.DataFrame, markers: Optional[Sequence[str]] = None) -> List[str]:
    if markers is not None:
        return [str(m) for m in markers]
    return [str(m) for m in pd.unique(frame["marker"].dropna().astype(str))]


def marker_table(frame: pd.DataFrame, markers: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Pivot a long multi-marker table to one row per (subject_id, day).

    Args:
        frame: Long sample table with a ``marker`` column
        markers: Optional subset/order of markers (default: order of appearance)

    Returns:
        Wide DataFrame indexed by (subject_id, day), one column per marker,
        NaN where a marker was not measured; duplicate measurements at the same
        key keep the first value
    """
    validate_sample_frame(frame, extra=["marker"])
    order = marker_order(frame, markers)

    work = frame.assign(day=_day_column(frame), marker=frame["marker"].astype(str))
    work = work.loc[work["marker"].isin(order)]
    wide = (
        work.groupby(["subject_id", "day", "marker"], sort=False, dropna=False)["value"]
        .first()
        .unstack("marker")
    )
    return wide.reindex(columns=order)
