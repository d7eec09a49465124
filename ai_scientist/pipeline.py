# ai_scientist/pipeline.py
import operator
import logging
from typing import Annotated, List, Optional, Sequence, Tuple, TypedDict

from langgraph.graph import END, StateGraph

from ai_scientist.config import Config, get_config
from ai_scientist.schemas import (
    AnalysisReport,
    CleaningSummary,
    ColumnProfile,
    CorrelationCell,
    FinalModel,
    ModelCandidate,
    QualityVerdict,
    TrustScoreBreakdown,
)
from ai_scientist.utils.logging_config import PipelineLogger, get_logger

logger = logging.getLogger(__name__)


class PipelineState(TypedDict, total=False):
    """State shared across all agents"""
    # Input
    headers: List[str]
    rows: List[List[str]]
    target_column: str

    # Profiling and quality
    columns: Tuple[ColumnProfile, ...]
    missing_overall: float
    correlation_matrix: Tuple[CorrelationCell, ...]
    data_quality: QualityVerdict

    # Benchmark and scoring
    cleaning_summary: CleaningSummary
    task_type: str
    models: Tuple[ModelCandidate, ...]
    final_model: FinalModel
    trust_score: TrustScoreBreakdown
    risk_level: str
    deployment_recommendation: str

    # Output
    report: AnalysisReport

    # Workflow
    current_step: str
    next_action: str
    execution_log: Annotated[List[str], operator.add]


def _traced(step_name: str, node):
    """Wrap a node so each invocation is logged as a pipeline step"""
    step_logger = get_logger("pipeline")

    def run(state: PipelineState) -> dict:
        with PipelineLogger(step_name, step_logger) as step:
            update = node(state)
            for entry in update.get("execution_log", []):
                step.log_progress(entry)
            return update

    run.__name__ = step_name
    return run


class AnalysisPipeline:
    """
    Readiness analysis workflow.

    profiling -> correlation -> quality gate -> (halt | cleaning -> benchmark ->
    champion selection -> trust scoring -> report assembly)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self.graph = self._build_graph()
        # No checkpointer: every run is independent and nothing is persisted
        self.compiled_graph = self.graph.compile()

    def _build_graph(self) -> StateGraph:
        """Build the LangGraph workflow"""
        from ai_scientist.agents.data_agent import DataIngestionAgent
        from ai_scientist.agents.deployment_agent import DeploymentAgent
        from ai_scientist.agents.feature_agent import FeatureEngineeringAgent
        from ai_scientist.agents.model_agent import ModelBenchmarkAgent
        from ai_scientist.agents.quality_agent import DataQualityAgent, QualityGate
        from ai_scientist.agents.report_agent import ReportAgent

        data_agent = DataIngestionAgent(self.config.profiling)
        feature_agent = FeatureEngineeringAgent(self.config)
        quality_agent = DataQualityAgent(QualityGate(config=self.config.quality_gate))
        model_agent = ModelBenchmarkAgent(self.config.profiling)
        deployment_agent = DeploymentAgent()
        report_agent = ReportAgent(deployment_agent)

        workflow = StateGraph(PipelineState)

        workflow.add_node("data_profiling", _traced("data_profiling", data_agent.profile))
        workflow.add_node("correlation_analysis", _traced("correlation_analysis", feature_agent.compute_correlations))
        workflow.add_node("quality_gate", _traced("quality_gate", quality_agent.validate))
        workflow.add_node("halt", _traced("halt", report_agent.halt))
        workflow.add_node("data_cleaning", _traced("data_cleaning", feature_agent.clean_data))
        workflow.add_node("model_benchmark", _traced("model_benchmark", model_agent.benchmark_models))
        workflow.add_node("model_selection", _traced("model_selection", model_agent.evaluate_models))
        workflow.add_node("trust_scoring", _traced("trust_scoring", deployment_agent.score_trust))
        workflow.add_node("report_assembly", _traced("report_assembly", report_agent.assemble))

        workflow.set_entry_point("data_profiling")
        workflow.add_edge("data_profiling", "correlation_analysis")
        workflow.add_edge("correlation_analysis", "quality_gate")

        # FAIL stops the run with a quality-only report
        workflow.add_conditional_edges(
            "quality_gate",
            self._route_after_validation,
            {
                "proceed": "data_cleaning",
                "halt": "halt",
            }
        )

        workflow.add_edge("halt", END)
        workflow.add_edge("data_cleaning", "model_benchmark")
        workflow.add_edge("model_benchmark", "model_selection")
        workflow.add_edge("model_selection", "trust_scoring")
        workflow.add_edge("trust_scoring", "report_assembly")
        workflow.add_edge("report_assembly", END)

        return workflow

    @staticmethod
    def _route_after_validation(state: PipelineState) -> str:
        """Route based on the quality gate verdict"""
        quality = state.get("data_quality")
        if quality is None or quality.verdict == "FAIL":
            return "halt"
        return "proceed"

    def run(self, headers: Sequence[str], rows: Sequence[Sequence[str]], target_column: str) -> PipelineState:
        """Execute the workflow and return the final state"""
        initial_state = PipelineState(
            headers=list(headers),
            rows=[list(row) for row in rows],
            target_column=target_column,
            current_step="initialization",
            next_action="data_profiling",
            execution_log=[f"Analysis started for target '{target_column}'"],
        )

        logger.info(f"Starting analysis: {len(headers)} columns, {len(rows)} rows, target '{target_column}'")
        final_state = self.compiled_graph.invoke(initial_state)
        logger.info(f"Analysis finished at step '{final_state.get('current_step')}'")
        return final_state

    def analyze(self, headers: Sequence[str], rows: Sequence[Sequence[str]], target_column: str) -> AnalysisReport:
        """Run the workflow and return only the report"""
        return self.run(headers, rows, target_column)["report"]


def analyze(headers: Sequence[str], rows: Sequence[Sequence[str]], target_column: str,
            config: Optional[Config] = None) -> AnalysisReport:
    """Produce the readiness report for a table; no state survives the call"""
    return AnalysisPipeline(config).analyze(headers, rows, target_column)


def analyze_csv(content: str, target_column: str, config: Optional[Config] = None) -> AnalysisReport:
    """Parse raw CSV text and analyze it"""
    from ai_scientist.agents.data_agent import parse_csv

    headers, rows = parse_csv(content)
    return analyze(headers, rows, target_column, config)
