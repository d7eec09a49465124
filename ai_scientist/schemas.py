# ai_scientist/schemas.py
"""
Immutable report and chat models.

Every model is frozen and serializes to camelCase JSON (``by_alias=True``) while
accepting either camelCase or snake_case on input.
"""
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ColumnType = Literal["numeric", "categorical", "datetime", "text"]
Verdict = Literal["PASS", "WARN", "FAIL"]
RiskLevel = Literal["Low", "Medium", "High"]
Intent = Literal[
    "distribution",
    "relationship",
    "model_performance",
    "data_quality",
    "preview",
    "fallback",
    "assistant",
]


class FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ColumnProfile(FrozenModel):
    """Per-column profile; numeric and categorical fields are filled by type"""
    name: str
    type: ColumnType
    missing_count: int = Field(ge=0)
    missing_percent: float = Field(ge=0, le=100)
    unique_count: int = Field(ge=0)
    # numeric
    mean: Optional[float] = None
    std: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    # categorical
    mode: Optional[str] = None
    categories: Optional[Tuple[str, ...]] = None


class CorrelationCell(FrozenModel):
    x: str
    y: str
    value: float = Field(ge=-1, le=1)


class LabelValue(FrozenModel):
    label: str
    value: Union[int, float]


class ScatterPoint(FrozenModel):
    x: float
    y: float
    label: str


class DatasetSize(FrozenModel):
    rows: int
    cols: int


class ClassBalance(FrozenModel):
    balanced: bool
    ratio: float


class TargetInfo(FrozenModel):
    name: str
    type: str
    valid: bool
    distribution: Tuple[LabelValue, ...] = ()
    leakage_risk: Literal["LOW", "MEDIUM", "HIGH"] = "LOW"


class QualityVerdict(FrozenModel):
    """Data-quality section of the report: gate verdict plus the profiles it judged"""
    verdict: Verdict
    reasons: Tuple[str, ...]
    dataset_size: DatasetSize
    missing_overall: float = Field(ge=0, le=100)
    target_info: TargetInfo
    columns: Tuple[ColumnProfile, ...]
    correlation_matrix: Tuple[CorrelationCell, ...]
    class_balance: Optional[ClassBalance] = None


class Imputation(FrozenModel):
    column: str
    method: Literal["median", "mode"]
    count: int


class CleaningSummary(FrozenModel):
    rows_removed: int
    cols_removed: int
    imputations: Tuple[Imputation, ...]
    transformations: Tuple[str, ...]


class ModelCandidate(FrozenModel):
    name: str
    hyperparams: str
    metric_name: str
    metric_value: float
    status: Literal["accepted", "rejected"]
    reason: str
    training_time: float


class TestMetric(FrozenModel):
    __test__ = False  # not a pytest class

    name: str
    value: float
    ci: Optional[str] = None


class FinalModel(FrozenModel):
    name: str
    test_metrics: Tuple[TestMetric, ...]
    feature_importance: Tuple[LabelValue, ...] = ()


class TrustScoreBreakdown(FrozenModel):
    data_quality: int = Field(ge=0, le=100)
    performance: int = Field(ge=0, le=100)
    stability: int = Field(ge=0, le=100)
    fairness: int = Field(ge=0, le=100)
    explainability: int = Field(ge=0, le=100)
    total: int = Field(ge=0, le=100)


class Limitation(FrozenModel):
    risk: str
    mitigation: str


class AnalysisReport(FrozenModel):
    """Complete readiness report; everything after ``data_quality`` is absent when the gate fails"""
    automation_status: Literal["Completed", "Stopped"]
    phase: int
    data_quality: QualityVerdict
    data_cleaning_summary: Optional[CleaningSummary] = None
    models: Optional[Tuple[ModelCandidate, ...]] = None
    final_model: Optional[FinalModel] = None
    trust_score: Optional[TrustScoreBreakdown] = None
    risk_level: Optional[RiskLevel] = None
    risk_justification: Optional[str] = None
    deployment_recommendation: Optional[str] = None
    deployment_next_steps: Optional[Tuple[str, ...]] = None
    limitations: Optional[Tuple[Limitation, ...]] = None
    summary: Optional[str] = None


# Chart payloads: one variant per chart kind so label/value and x/y/label
# points can never be mixed in the same chart.

class BarChart(FrozenModel):
    type: Literal["bar"] = "bar"
    title: str
    data: Tuple[LabelValue, ...]


class PieChart(FrozenModel):
    type: Literal["pie"] = "pie"
    title: str
    data: Tuple[LabelValue, ...]


class RadarChart(FrozenModel):
    type: Literal["radar"] = "radar"
    title: str
    data: Tuple[LabelValue, ...]


class ScatterChart(FrozenModel):
    type: Literal["scatter"] = "scatter"
    title: str
    data: Tuple[ScatterPoint, ...]


Chart = Annotated[
    Union[BarChart, PieChart, RadarChart, ScatterChart],
    Field(discriminator="type"),
]


class ChatExchange(FrozenModel):
    question: str
    answer: str
    chart: Optional[Chart] = None
    intent: Intent = "fallback"
