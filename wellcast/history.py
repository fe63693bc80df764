"""
History plumbing: stored records → ordered daily TrendDataPoints.

The forecaster consumes one row per day in ascending order; this module
does the conversion, daily aggregation, and file loading that produce it.
"""

import json
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

import pandas as pd

from wellcast.models import TrendDataPoint


REQUIRED_COLUMNS = {"date", "stressScore", "fatigueScore"}

AGGREGATION_POLICIES = ("latest", "mean")


# ---------------------------------------------------------------------------
# Record conversion
# ---------------------------------------------------------------------------

def _to_rows(records: Iterable[Mapping], time_key: str, metrics_key: str) -> List[dict]:
    rows = []
    for record in records:
        metrics = record.get(metrics_key)
        if not metrics:
            continue
        rows.append({
            "date": str(record[time_key]),
            "stressScore": metrics["stressScore"],
            "fatigueScore": metrics["fatigueScore"],
        })
    return rows


def recordings_to_trend_data(recordings: Iterable[Mapping]) -> List[TrendDataPoint]:
    """Recordings with metrics → one point each, keyed by the createdAt day."""
    return [TrendDataPoint.from_dict(r) for r in _to_rows(recordings, "createdAt", "metrics")]


def sessions_to_trend_data(sessions: Iterable[Mapping]) -> List[TrendDataPoint]:
    """Check-in sessions with acoustic metrics → one point each, keyed by the startedAt day."""
    return [
        TrendDataPoint.from_dict(r)
        for r in _to_rows(sessions, "startedAt", "acousticMetrics")
    ]


# ---------------------------------------------------------------------------
# Daily aggregation
# ---------------------------------------------------------------------------

def _frame(rows: List[dict]) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    df["date"] = df["date"].astype(str)
    df["timestamp"] = pd.to_datetime(df["date"], utc=True, format="mixed")
    # Calendar day as recorded, not shifted to UTC
    df["day"] = pd.to_datetime(df["date"].str[:10], format="%Y-%m-%d").dt.date
    # Stable sort keeps input order for identical timestamps
    df.sort_values("timestamp", inplace=True, kind="mergesort")
    df.reset_index(drop=True, inplace=True)
    return df


def aggregate_daily(
    records: Iterable[Union[Mapping, TrendDataPoint]],
    policy: str = "latest",
    window_days: Optional[int] = None,
) -> List[TrendDataPoint]:
    """
    Collapse any number of scored events into one ascending row per day.

    policy="latest" keeps the last event of each day, "mean" averages them.
    window_days keeps only the trailing N days present. Missing days are not filled.
    """
    if policy not in AGGREGATION_POLICIES:
        raise ValueError(f"Unknown aggregation policy: {policy!r}")

    rows = [r.to_dict() if isinstance(r, TrendDataPoint) else dict(r) for r in records]
    if not rows:
        return []

    df = _frame(rows)
    grouped = df.groupby("day", sort=True)[["stressScore", "fatigueScore"]]
    daily = grouped.last() if policy == "latest" else grouped.mean()

    if window_days is not None:
        daily = daily.tail(window_days)

    return [
        TrendDataPoint(day, float(row.stressScore), float(row.fatigueScore))
        for day, row in daily.iterrows()
    ]


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------

def load_trend_data(filepath: Union[str, Path]) -> List[dict]:
    """Load and validate a JSON list of dated stress/fatigue records."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not data:
        raise ValueError("Data file is empty")
    if not isinstance(data, list):
        raise ValueError("Data file must contain a JSON list of records")

    missing = REQUIRED_COLUMNS - set(pd.DataFrame(data).columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    return data
