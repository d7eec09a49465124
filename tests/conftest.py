# tests/conftest.py
import numpy as np
import pytest

from ai_scientist.agents.data_agent import overall_missing_percent, profile_table
from ai_scientist.agents.quality_agent import DataQualityAgent
from ai_scientist.config import reload_config

LOAN_HEADERS = ['age', 'income', 'education', 'employed', 'credit_score', 'default']
EDUCATION_LEVELS = ['High School', 'Bachelor', 'Master', 'PhD']


def make_loan_rows(n_rows, default_labels=None):
    """Deterministic loan-style rows; ``default`` alternates Yes/No unless labels are given"""
    rows = []
    for i in range(n_rows):
        default = default_labels[i] if default_labels is not None else ('Yes' if i % 2 == 0 else 'No')
        rows.append([
            str(20 + i % 40),
            str(30000 + i * 100),
            EDUCATION_LEVELS[i % 4],
            'Yes' if i % 3 else 'No',
            str(600 + (i * 7) % 200),
            default,
        ])
    return rows


def make_random_numeric_rows(n_rows, n_cols, seed=42):
    rng = np.random.RandomState(seed)
    values = rng.normal(50, 10, size=(n_rows, n_cols))
    return [[f"{v:.3f}" for v in row] for row in values]


def gate_state(headers, rows, target_column):
    """Pipeline state as it looks when the quality gate runs"""
    columns = profile_table(headers, rows)
    return {
        'headers': headers,
        'rows': rows,
        'target_column': target_column,
        'columns': columns,
        'missing_overall': overall_missing_percent(columns, len(rows)),
        'correlation_matrix': (),
    }


def run_gate(headers, rows, target_column):
    return DataQualityAgent().validate(gate_state(headers, rows, target_column))['data_quality']


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Every test starts from default configuration without credentials"""
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    return reload_config()


@pytest.fixture
def loan_table():
    """250 complete rows with a balanced categorical target: passes the gate cleanly"""
    return list(LOAN_HEADERS), make_loan_rows(250)


@pytest.fixture
def small_loan_table():
    """100 rows: large enough to continue, small enough to warn"""
    return list(LOAN_HEADERS), make_loan_rows(100)


@pytest.fixture
def tiny_loan_table():
    """30 rows: below the minimum dataset size"""
    return list(LOAN_HEADERS), make_loan_rows(30)
