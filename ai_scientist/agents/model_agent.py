# ai_scientist/agents/model_agent.py
"""
Model benchmark simulator.

No model is trained here. The scoreboard is a declared fixture keyed only on
whether the task is classification (categorical target) or regression; it does
not vary with the data beyond that branch.
"""
import logging
from typing import Dict, Optional, Sequence, Tuple

from ai_scientist.config import ProfilingConfig, get_config
from ai_scientist.schemas import (
    ColumnProfile,
    FinalModel,
    LabelValue,
    ModelCandidate,
    TestMetric,
)
from ai_scientist.agents.feature_agent import correlation_columns

logger = logging.getLogger(__name__)

# (name, hyperparams, (classification value, regression value), status, reason, training time)
_CANDIDATE_FIXTURE = (
    (
        None,  # baseline name depends on task type
        "C=1.0, penalty=l2",
        (0.72, 0.68),
        "accepted",
        "Baseline model, interpretable",
        0.3,
    ),
    (
        "Random Forest",
        "n_estimators=100, max_depth=10",
        (0.84, 0.79),
        "accepted",
        "Strong ensemble performance, handles non-linearity",
        2.1,
    ),
    (
        "XGBoost",
        "learning_rate=0.1, max_depth=6, n_estimators=200",
        (0.87, 0.82),
        "accepted",
        "Best validation performance",
        4.5,
    ),
    (
        "Neural Network",
        "hidden_layers=[64,32], dropout=0.3",
        (0.81, 0.75),
        "rejected",
        "Insufficient data for deep learning; XGBoost outperforms on tabular data",
        15.2,
    ),
)

_BASELINE_NAMES = {
    'classification': "Logistic Regression",
    'regression': "Linear Regression",
}

_VALIDATION_METRIC = {
    'classification': "ROC-AUC",
    'regression': "R²",
}

# (metric name, value, confidence interval)
_TEST_METRICS: Dict[str, Tuple[Tuple[str, float, str], ...]] = {
    'classification': (
        ("ROC-AUC", 0.85, "±0.03"),
        ("F1-Score", 0.79, "±0.02"),
        ("Precision", 0.81, "±0.02"),
    ),
    'regression': (
        ("R²", 0.80, "±0.03"),
        ("RMSE", 0.42, "±0.02"),
        ("MAE", 0.31, "±0.02"),
    ),
}


def determine_task_type(target_profile: Optional[ColumnProfile]) -> str:
    """Categorical targets are classification, everything else regression"""
    if target_profile is not None and target_profile.type == 'categorical':
        return 'classification'
    return 'regression'


def get_model_candidates(task_type: str) -> Tuple[ModelCandidate, ...]:
    """The four-candidate benchmark scoreboard for a task type"""
    if task_type not in _VALIDATION_METRIC:
        raise ValueError(f"Unknown task type: {task_type}")

    value_index = 0 if task_type == 'classification' else 1
    candidates = []
    for name, hyperparams, values, status, reason, training_time in _CANDIDATE_FIXTURE:
        candidates.append(ModelCandidate(
            name=name or _BASELINE_NAMES[task_type],
            hyperparams=hyperparams,
            metric_name=_VALIDATION_METRIC[task_type],
            metric_value=values[value_index],
            status=status,
            reason=reason,
            training_time=training_time,
        ))
    return tuple(candidates)


def select_champion(candidates: Sequence[ModelCandidate]) -> ModelCandidate:
    """Highest validation score among accepted candidates"""
    accepted = [c for c in candidates if c.status == 'accepted']
    if not accepted:
        raise ValueError("No accepted model candidates to choose from")
    return max(accepted, key=lambda c: c.metric_value)


def feature_importances(columns: Sequence[ColumnProfile], target_column: str,
                        limit: int = 5) -> Tuple[LabelValue, ...]:
    """Synthetic, strictly decreasing importances for the leading numeric features"""
    leading = correlation_columns(columns, target_column)[:limit]
    importances = [
        LabelValue(label=column.name, value=round(0.8 - i * 0.15, 2))
        for i, (_, column) in enumerate(leading)
    ]
    return tuple(sorted(importances, key=lambda item: item.value, reverse=True))


class ModelBenchmarkAgent:
    """Agent producing the simulated benchmark and the champion model"""

    def __init__(self, config: Optional[ProfilingConfig] = None):
        self.config = config or get_config().profiling

    def benchmark_models(self, state: dict) -> dict:
        """Attach the fixture scoreboard for the detected task type"""
        quality = state.get('data_quality')
        if quality is None:
            raise ValueError("model_benchmark requires 'data_quality' in state")

        target_profile = next(
            (c for c in state['columns'] if c.name == state['target_column']), None
        )
        task_type = determine_task_type(target_profile)
        candidates = get_model_candidates(task_type)
        logger.info(f"Detected task type: {task_type}; {len(candidates)} candidates benchmarked")

        return {
            'task_type': task_type,
            'models': candidates,
            'current_step': 'model_benchmark',
            'execution_log': [f"Benchmarked {len(candidates)} {task_type} candidates"],
        }

    def evaluate_models(self, state: dict) -> dict:
        """Pick the champion and attach its test metrics and feature importances"""
        task_type = state['task_type']
        champion = select_champion(state['models'])

        final_model = FinalModel(
            name=champion.name,
            test_metrics=tuple(
                TestMetric(name=name, value=value, ci=ci)
                for name, value, ci in _TEST_METRICS[task_type]
            ),
            feature_importance=feature_importances(
                state['columns'], state['target_column'], self.config.MAX_FEATURE_IMPORTANCES
            ),
        )
        logger.info(f"Champion model: {final_model.name}")

        return {
            'final_model': final_model,
            'current_step': 'model_selection',
            'execution_log': [f"Selected champion model: {final_model.name}"],
        }
