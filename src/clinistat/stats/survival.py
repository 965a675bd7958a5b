"""Kaplan-Meier survival curves and an approximate two-group log-rank test."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from clinistat.stats.results import NoResult, clamp_p_value, significance_marker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurvivalRecord:
    """Follow-up of one subject.

    Attributes:
        subject_id: Subject identifier
        group: Group label
        time: Elapsed time from the anchor date (>= 0)
        status: 1 if the event occurred at ``time``, 0 if censored
    """

    subject_id: str
    group: str
    time: float
    status: int


@dataclass(frozen=True)
class SurvivalPoint:
    """Step of a Kaplan-Meier curve.

    ``at_risk`` is the number of subjects still under observation just before
    ``time``.
    """

    time: float
    survival: float
    at_risk: int
    event: bool = False
    censored: bool = False
    n_events: int = 0
    n_censored: int = 0


@dataclass(frozen=True)
class SurvivalCurve:
    group: str
    points: Tuple[SurvivalPoint, ...]
    n_subjects: int
    n_events: int

    @property
    def median_survival(self) -> Optional[float]:
        """First time at which survival drops to 0.5 or below."""
        for pt in self.points:
            if pt.survival <= 0.5:
                return pt.time
        return None


@dataclass(frozen=True)
class LogRankResult:
    """Two-group log-rank comparison.

    ``p_value`` is the approximation exp(-chi2 / 2), not the exact
    chi-square(1) tail; ``approximate`` records that.
    """

    chi2: float
    p_value: float
    observed: Tuple[float, float]
    expected: Tuple[float, float]
    df: int = 1
    approximate: bool = True

    @property
    def significance(self) -> str:
        return significance_marker(self.p_value)


def _curve(group: str, records: Sequence[SurvivalRecord]) -> SurvivalCurve:
    ordered = sorted(records, key=lambda rec: rec.time)
    at_risk = len(ordered)
    survival = 1.0
    points = [SurvivalPoint(time=0.0, survival=1.0, at_risk=at_risk)]

    i = 0
    while i < len(ordered):
        time = ordered[i].time
        d = c = 0
        while i < len(ordered) and ordered[i].time == time:
            if ordered[i].status == 1:
                d += 1
            else:
                c += 1
            i += 1

        if d > 0:
            survival *= (at_risk - d) / at_risk
        points.append(
            SurvivalPoint(
                time=float(time),
                survival=survival,
                at_risk=at_risk,
                event=d > 0,
                censored=c > 0,
                n_events=d,
                n_censored=c,
            )
        )
        at_risk -= d + c

    return SurvivalCurve(
        group=group,
        points=tuple(points),
        n_subjects=len(ordered),
        n_events=sum(1 for rec in ordered if rec.status == 1),
    )


def kaplan_meier(records: Iterable[SurvivalRecord]) -> Dict[str, SurvivalCurve]:
    """Estimate one Kaplan-Meier curve per group.

    Args:
        records: Survival records of any number of groups

    Returns:
        Mapping group -> SurvivalCurve in order of first appearance

    Notes:
        - Simultaneous events are folded into a single step
          ``S *= (at_risk - d) / at_risk``; subjects censored at an event time
          are still counted at risk for that step.
        - Every curve starts with the point (0, 1.0, at_risk=N). Events at
          time 0 add a second point at time 0 carrying the first step, so a
          curve may hold two points at t = 0.
    """
    by_group: Dict[str, List[SurvivalRecord]] = {}
    for rec in records:
        by_group.setdefault(rec.group, []).append(rec)
    return {group: _curve(group, recs) for group, recs in by_group.items()}


def log_rank_test(
    group_a: Sequence[SurvivalRecord], group_b: Sequence[SurvivalRecord]
) -> Union[LogRankResult, NoResult]:
    """Compare two survival distributions with the log-rank statistic.

    Args:
        group_a: Records of the first group
        group_b: Records of the second group

    Returns:
        LogRankResult, or NoResult when the hypergeometric variance is zero
        (no events, or no risk set shared by both groups)

    Notes:
        p-value = 1 - (1 - exp(-chi2/2)), a simplified tail kept for
        consistency with previously reported results; it is not the exact
        chi-square(1) survival function.
    """
    event_times = sorted({rec.time for rec in list(group_a) + list(group_b) if rec.status == 1})

    o1 = e1 = o2 = e2 = v = 0.0
    for t in event_times:
        n1 = sum(1 for rec in group_a if rec.time >= t)
        n2 = sum(1 for rec in group_b if rec.time >= t)
        d1 = sum(1 for rec in group_a if rec.time == t and rec.status == 1)
        d2 = sum(1 for rec in group_b if rec.time == t and rec.status == 1)
        n = n1 + n2
        d = d1 + d2
        if n == 0:
            continue
        o1 += d1
        o2 += d2
        e1 += d * n1 / n
        e2 += d * n2 / n
        if n > 1:
            v += n1 * n2 * d * (n - d) / (n * n * (n - 1))

    if v <= 0.0:
        logger.debug("log_rank_test: zero variance")
        return NoResult("zero variance")

    chi2 = (o1 - e1) ** 2 / v
    p = clamp_p_value(1.0 - (1.0 - math.exp(-chi2 / 2.0)))

    return LogRankResult(chi2=chi2, p_value=p, observed=(o1, o2), expected=(e1, e2))
