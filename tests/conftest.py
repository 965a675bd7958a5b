"""Pytest configuration and fixtures."""

import pytest
import numpy as np
import pandas as pd


@pytest.fixture
def two_group_samples():
    """Long sample table: one marker, two groups, three visits per subject."""
    rng = np.random.default_rng(42)
    rows = []
    for group, center in (("control", 10.0), ("sepsis", 14.0)):
        for s in range(12):
            for day in (0, 3, 7):
                rows.append(
                    {
                        "subject_id": f"{group[:3]}-{s:02d}",
                        "group": group,
                        "day": float(day),
                        "value": float(rng.normal(center + 0.2 * day, 1.5)),
                        "marker": "CRP",
                    }
                )
    return pd.DataFrame(rows)


@pytest.fixture
def three_group_samples():
    """Single-marker table with three groups and no day column."""
    rng = np.random.default_rng(7)
    rows = []
    for group, center in (("A", 0.0), ("B", 1.0), ("C", 3.0)):
        for s in range(15):
            rows.append(
                {
                    "subject_id": f"{group}{s}",
                    "group": group,
                    "value": float(rng.normal(center, 1.0)),
                }
            )
    return pd.DataFrame(rows)


@pytest.fixture
def multi_marker_samples():
    """Three markers per subject-day; IL6 tracks CRP, PCT is measured once."""
    rng = np.random.default_rng(3)
    rows = []
    for s in range(10):
        for day in (1.0, 2.0):
            crp = float(rng.normal(50, 10))
            rows.append({"subject_id": f"p{s}", "group": "g", "day": day, "marker": "CRP", "value": crp})
            rows.append(
                {"subject_id": f"p{s}", "group": "g", "day": day, "marker": "IL6", "value": 2 * crp + float(rng.normal(0, 1))}
            )
    rows.append({"subject_id": "p0", "group": "g", "day": 1.0, "marker": "PCT", "value": 0.4})
    rows.append({"subject_id": "p1", "group": "g", "day": 1.0, "marker": "PCT", "value": 0.9})
    return pd.DataFrame(rows)


@pytest.fixture
def survival_frame():
    """Two arms with well separated event times."""
    return pd.DataFrame(
        {
            "subject_id": [f"s{i}" for i in range(8)],
            "group": ["early"] * 4 + ["late"] * 4,
            "time": [2, 3, 3, 8, 10, 12, 15, 20],
            "status": [1, 1, 1, 0, 1, 0, 1, 0],
        }
    )
