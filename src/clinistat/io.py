"""Table loading for the command-line runners (CSV or Parquet)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

logger = logging.getLogger(__name__)


def validate_parquet_available() -> None:
    """
    Check if PyArrow is available for Parquet input.

    Raises
    ------
    ImportError
        If PyArrow is not installed
    """
    try:
        import pyarrow  # noqa: F401
    except ImportError as e:
        raise ImportError(
            "PyArrow is required for Parquet support but is not installed.\n"
            "Install with: pip install clinistat[parquet] or pip install pyarrow"
        ) from e


def load_table(path: Path, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Load a long-format table from a CSV or Parquet file.

    Parameters
    ----------
    path : Path
        Path to a .csv or .parquet file
    columns : List[str], optional
        Columns that must be present

    Returns
    -------
    pd.DataFrame
        Loaded data

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the extension is unsupported or required columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    suffix = path.suffix.lower()
    logger.info(f"Loading table from {path}")

    if suffix == ".csv":
        df = pd.read_csv(path)
    elif suffix in (".parquet", ".pq"):
        validate_parquet_available()
        df = pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported file type '{suffix}' (expected .csv or .parquet)")

    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"Required columns not found in {path.name}: {missing}")

    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")
    return df
