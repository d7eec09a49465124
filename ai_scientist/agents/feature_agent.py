# ai_scientist/agents/feature_agent.py
import math
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ai_scientist.config import Config, get_config
from ai_scientist.schemas import CleaningSummary, ColumnProfile, CorrelationCell, Imputation
from ai_scientist.utils.logging_config import log_execution_time
from ai_scientist.utils.table_utils import coerce_numeric, column_values

logger = logging.getLogger(__name__)

TRANSFORMATIONS = (
    "Standardization applied to numeric features",
    "One-hot encoding for categorical variables",
    "Outlier capping at 1.5*IQR",
)


def compute_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0 when there are no pairs or either side is constant"""
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.size == 0:
        return 0.0

    dx = x_arr - x_arr.mean()
    dy = y_arr - y_arr.mean()
    den_x = float(np.sum(dx * dx))
    den_y = float(np.sum(dy * dy))
    if den_x == 0 or den_y == 0:
        return 0.0

    r = float(np.sum(dx * dy)) / math.sqrt(den_x * den_y)
    return max(-1.0, min(1.0, r))


def correlation_columns(columns: Sequence[ColumnProfile], target_column: str,
                        limit: Optional[int] = None) -> List[Tuple[int, ColumnProfile]]:
    """Numeric, non-target columns in header order with their positions, capped to ``limit``"""
    eligible = [
        (idx, column) for idx, column in enumerate(columns)
        if column.type == 'numeric' and column.name != target_column
    ]
    return eligible if limit is None else eligible[:limit]


@log_execution_time
def build_correlation_matrix(rows: Sequence[Sequence[str]], columns: Sequence[ColumnProfile],
                             target_column: str, limit: int = 8) -> Tuple[CorrelationCell, ...]:
    """Symmetric pairwise-complete correlation matrix over the eligible numeric columns"""
    selected = correlation_columns(columns, target_column, limit)
    parsed = {idx: coerce_numeric(column_values(rows, idx)) for idx, _ in selected}

    cells: List[CorrelationCell] = []
    for i, (idx_i, col_i) in enumerate(selected):
        for idx_j, col_j in selected[i:]:
            pairs = pd.concat([parsed[idx_i], parsed[idx_j]], axis=1, ignore_index=True).dropna()
            value = round(compute_correlation(pairs[0].to_numpy(), pairs[1].to_numpy()), 2)
            cells.append(CorrelationCell(x=col_i.name, y=col_j.name, value=value))
            if idx_i != idx_j:
                cells.append(CorrelationCell(x=col_j.name, y=col_i.name, value=value))

    return tuple(cells)


def summarize_cleaning(columns: Sequence[ColumnProfile], row_count: int,
                       config: Optional[Config] = None) -> CleaningSummary:
    """Planned cleaning actions derived from the column profiles"""
    gate = (config or get_config()).quality_gate
    drop_threshold = gate.DROP_COLUMN_MISSING_PERCENTAGE

    imputations = tuple(
        Imputation(
            column=c.name,
            method='median' if c.type == 'numeric' else 'mode',
            count=c.missing_count,
        )
        for c in columns
        if c.missing_count > 0 and c.missing_percent <= drop_threshold
    )

    return CleaningSummary(
        rows_removed=math.floor(row_count * gate.ROW_REMOVAL_FRACTION),
        cols_removed=sum(1 for c in columns if c.missing_percent > drop_threshold),
        imputations=imputations,
        transformations=TRANSFORMATIONS,
    )


class FeatureEngineeringAgent:
    """Agent responsible for correlation analysis and the cleaning plan"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    def compute_correlations(self, state: dict) -> dict:
        """Correlation matrix over numeric feature columns"""
        if 'columns' not in state:
            raise ValueError("correlation_analysis requires 'columns' in state")

        limit = self.config.profiling.MAX_CORRELATION_COLUMNS
        matrix = build_correlation_matrix(state['rows'], state['columns'], state['target_column'], limit)
        feature_count = len(correlation_columns(state['columns'], state['target_column'], limit))
        logger.info(f"Correlation matrix computed over {feature_count} numeric features ({len(matrix)} cells)")

        return {
            'correlation_matrix': matrix,
            'current_step': 'correlation_analysis',
            'execution_log': [f"Correlation analysis: {feature_count} numeric features"],
        }

    def clean_data(self, state: dict) -> dict:
        """Plan imputations and removals; the raw table itself is never modified"""
        summary = summarize_cleaning(state['columns'], len(state['rows']), self.config)

        logger.info(
            f"Cleaning plan: {summary.rows_removed} rows removed, {summary.cols_removed} columns removed, "
            f"{len(summary.imputations)} imputations"
        )

        return {
            'cleaning_summary': summary,
            'current_step': 'data_cleaning',
            'execution_log': [f"Cleaning plan: {len(summary.imputations)} columns to impute"],
        }
