"""Configuration dataclasses for the analysis runners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

SAMPLING_MODES = ["all", "first", "last", "nearest"]
CORRELATION_METHODS = ["pearson", "spearman"]


def _check_day_range(day_min: Optional[float], day_max: Optional[float]) -> None:
    if day_min is not None and day_max is not None and day_min > day_max:
        raise ValueError(f"day_min must be <= day_max, got {day_min} > {day_max}")


@dataclass
class AnalysisConfig:
    """Configuration for a single-marker group comparison.

    Attributes:
        marker: Marker to analyse (None when the frame holds a single marker)
        groups: Optional subset/order of groups to include (None = all, in
            order of first appearance)
        sampling: Per-subject reduction: all, first, last or nearest
        target_day: Reference day for ``sampling="nearest"``
        day_min: Inclusive lower bound on sample day (None = unbounded)
        day_max: Inclusive upper bound on sample day (None = unbounded)
        positive_group: Group presumed positive for ROC (default: first group)
    """

    marker: Optional[str] = None
    groups: Optional[List[str]] = None
    sampling: str = "all"
    target_day: Optional[float] = None
    day_min: Optional[float] = None
    day_max: Optional[float] = None
    positive_group: Optional[str] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.sampling not in SAMPLING_MODES:
            raise ValueError(f"sampling must be one of {SAMPLING_MODES}, got {self.sampling}")

        if self.sampling == "nearest" and self.target_day is None:
            raise ValueError("sampling='nearest' requires target_day")

        _check_day_range(self.day_min, self.day_max)

        if self.groups is not None and len(self.groups) < 2:
            raise ValueError(f"At least 2 groups required, got {self.groups}")

        if (
            self.positive_group is not None
            and self.groups is not None
            and self.positive_group not in self.groups
        ):
            raise ValueError(f"positive_group {self.positive_group!r} is not in groups {self.groups}")


@dataclass
class CorrelationConfig:
    """Configuration for a marker correlation matrix.

    Attributes:
        markers: Optional subset/order of markers (None = order of appearance)
        method: pearson or spearman
        day_min: Inclusive lower bound on sample day
        day_max: Inclusive upper bound on sample day
    """

    markers: Optional[List[str]] = None
    method: str = "pearson"
    day_min: Optional[float] = None
    day_max: Optional[float] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.method not in CORRELATION_METHODS:
            raise ValueError(f"method must be one of {CORRELATION_METHODS}, got {self.method}")

        _check_day_range(self.day_min, self.day_max)


@dataclass
class SurvivalConfig:
    """Configuration for Kaplan-Meier analysis.

    Attributes:
        groups: Optional subset/order of groups (None = order of appearance)
    """

    groups: Optional[List[str]] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.groups is not None and len(self.groups) == 0:
            raise ValueError("groups must not be empty")
