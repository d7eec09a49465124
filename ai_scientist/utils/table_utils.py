# ai_scientist/utils/table_utils.py
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd


def cell(row: Sequence[str], index: int) -> str:
    """Positional cell lookup; a ragged row reads as empty past its end"""
    if index < len(row):
        value = row[index]
        return value if value is not None else ''
    return ''


def column_values(rows: Sequence[Sequence[str]], index: int) -> List[str]:
    """All cells of one column, empty string where a row is too short"""
    return [cell(row, index) for row in rows]


def non_empty(values: Iterable[str]) -> List[str]:
    return [v for v in values if v]


def coerce_numeric(values: Iterable[Optional[str]]) -> pd.Series:
    """Parse strings as floats; unparsable and non-finite values become NaN"""
    series = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="coerce")
    series = series.astype("float64")
    return series.where(np.isfinite(series))


def to_number(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    parsed = coerce_numeric([value]).iloc[0]
    return None if pd.isna(parsed) else float(parsed)


def missing_percent(missing: int, total: int) -> float:
    """Percentage rounded to one decimal; an empty denominator counts as nothing missing"""
    if total <= 0:
        return 0.0
    return round(missing / total * 100, 1)
