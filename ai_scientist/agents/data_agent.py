# ai_scientist/agents/data_agent.py
import re
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ai_scientist.config import ProfilingConfig, get_config
from ai_scientist.schemas import ColumnProfile
from ai_scientist.utils.logging_config import log_execution_time
from ai_scientist.utils.table_utils import (
    coerce_numeric,
    column_values,
    missing_percent,
    non_empty,
)

logger = logging.getLogger(__name__)

DATE_PATTERNS = (
    re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}"),
    re.compile(r"^[0-9]{2}/[0-9]{2}/[0-9]{4}"),
)


def _split_line(line: str) -> List[str]:
    """Split one line on commas outside double quotes; quotes are dropped"""
    values: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            values.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    values.append(''.join(current).strip())
    return values


def parse_csv(content: str) -> Tuple[List[str], List[List[str]]]:
    """
    Parse raw comma-delimited text into headers and rows.

    Rows are returned as-is: no padding or truncation to the header length.
    """
    text = content.strip()
    if not text:
        return [], []

    lines = [line.rstrip('\r') for line in text.split('\n')]
    headers = _split_line(lines[0])
    rows = [_split_line(line) for line in lines[1:]]

    logger.debug(f"Parsed {len(rows)} rows with {len(headers)} headers")
    return headers, rows


def infer_column_type(values: Sequence[str], config: Optional[ProfilingConfig] = None) -> str:
    """Classify a column as numeric, datetime, categorical or text (first match wins)"""
    config = config or get_config().profiling
    present = non_empty(values)
    if not present:
        return 'text'

    total = len(present)

    numeric_count = int(coerce_numeric(present).notna().sum())
    if numeric_count / total > config.NUMERIC_RATIO:
        return 'numeric'

    date_count = sum(1 for v in present if any(p.match(v) for p in DATE_PATTERNS))
    if date_count / total > config.DATETIME_RATIO:
        return 'datetime'

    distinct = len(set(present))
    if distinct / total < config.CATEGORICAL_UNIQUE_RATIO or distinct <= config.CATEGORICAL_MAX_DISTINCT:
        return 'categorical'

    return 'text'


def compute_column_stats(values: Sequence[str], column_type: str,
                         config: Optional[ProfilingConfig] = None) -> Dict[str, Any]:
    """Type-dependent summary statistics for one column"""
    config = config or get_config().profiling
    present = non_empty(values)

    if column_type == 'numeric':
        numbers = coerce_numeric(present).dropna()
        if numbers.empty:
            return {}
        return {
            'mean': round(float(numbers.mean()), 2),
            # population standard deviation
            'std': round(float(numbers.std(ddof=0)), 2),
            'min': float(numbers.min()),
            'max': float(numbers.max()),
        }

    if column_type == 'categorical':
        # Counter keeps first-seen order, so ties resolve to the earliest value
        freq = Counter(present)
        if not freq:
            return {}
        mode = max(freq, key=freq.get)
        categories = tuple(list(freq)[:config.MAX_CATEGORIES])
        return {'mode': mode, 'categories': categories}

    return {}


def profile_column(name: str, values: Sequence[str],
                   config: Optional[ProfilingConfig] = None) -> ColumnProfile:
    """Build the full profile of a single column"""
    config = config or get_config().profiling
    missing_count = sum(1 for v in values if not v)
    column_type = infer_column_type(values, config)
    stats = compute_column_stats(values, column_type, config)

    return ColumnProfile(
        name=name,
        type=column_type,
        missing_count=missing_count,
        missing_percent=missing_percent(missing_count, len(values)),
        unique_count=len(set(non_empty(values))),
        **stats,
    )


@log_execution_time
def profile_table(headers: Sequence[str], rows: Sequence[Sequence[str]],
                  config: Optional[ProfilingConfig] = None) -> Tuple[ColumnProfile, ...]:
    """Profile every column positionally, duplicates included"""
    return tuple(
        profile_column(name, column_values(rows, idx), config)
        for idx, name in enumerate(headers)
    )


def overall_missing_percent(columns: Sequence[ColumnProfile], row_count: int) -> float:
    total_cells = row_count * len(columns)
    missing_cells = sum(c.missing_count for c in columns)
    return missing_percent(missing_cells, total_cells)


class DataIngestionAgent:
    """Agent responsible for table parsing and per-column profiling"""

    def __init__(self, config: Optional[ProfilingConfig] = None):
        self.config = config or get_config().profiling

    def parse(self, content: str) -> Tuple[List[str], List[List[str]]]:
        return parse_csv(content)

    def profile(self, state: dict) -> dict:
        """Profile all columns and compute overall missingness"""
        if 'headers' not in state or 'rows' not in state:
            raise ValueError("data_profiling requires 'headers' and 'rows' in state")

        headers = state['headers']
        rows = state['rows']
        logger.info(f"Profiling {len(headers)} columns over {len(rows)} rows")

        columns = profile_table(headers, rows, self.config)
        missing_overall = overall_missing_percent(columns, len(rows))

        type_counts = Counter(c.type for c in columns)
        logger.info(f"Column types: {dict(type_counts)}; overall missing: {missing_overall}%")

        return {
            'columns': columns,
            'missing_overall': missing_overall,
            'current_step': 'data_profiling',
            'execution_log': [
                f"Profiled {len(columns)} columns: {len(rows)} rows, {missing_overall}% missing overall"
            ],
        }
