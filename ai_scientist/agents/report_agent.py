# ai_scientist/agents/report_agent.py
import logging
from typing import Optional

from jinja2 import Template

from ai_scientist.agents.deployment_agent import DeploymentAgent, risk_justification
from ai_scientist.schemas import AnalysisReport

logger = logging.getLogger(__name__)

STOPPED_PHASE = 1
COMPLETED_PHASE = 6

SUMMARY_TEMPLATE = Template(
    "Analysis completed successfully with {{ model.name }} selected as the final model achieving "
    "{{ '%.2f' | format(metric.value) }} {{ metric.name }} on the test set. "
    "Data quality {{ 'passed' if verdict == 'PASS' else 'passed with warnings' }} with "
    "{{ missing_overall }}% missing values handled through imputation. "
    "Trust score of {{ trust.total }}/100 indicates {{ risk_level | lower }} deployment risk. "
    "Recommended: {{ recommendation | lower }} and scheduled retraining."
)


class ReportAgent:
    """Assembles the immutable analysis report from pipeline state"""

    def __init__(self, deployment_agent: Optional[DeploymentAgent] = None):
        self.deployment_agent = deployment_agent or DeploymentAgent()

    def halt(self, state: dict) -> dict:
        """Minimal report carrying only the data-quality section"""
        quality = state['data_quality']
        report = AnalysisReport(
            automation_status='Stopped',
            phase=STOPPED_PHASE,
            data_quality=quality,
        )
        logger.warning(f"Analysis stopped at quality gate: {len(quality.reasons)} reasons")

        return {
            'report': report,
            'current_step': 'halted',
            'next_action': 'completed',
            'execution_log': ["Pipeline stopped: quality gate FAIL"],
        }

    def assemble(self, state: dict) -> dict:
        """Full report for PASS/WARN runs"""
        quality = state['data_quality']
        final_model = state['final_model']
        trust_score = state['trust_score']
        risk_level = state['risk_level']
        recommendation = state['deployment_recommendation']
        next_steps, limitations = self.deployment_agent.deployment_plan()

        summary = SUMMARY_TEMPLATE.render(
            model=final_model,
            metric=final_model.test_metrics[0],
            verdict=quality.verdict,
            missing_overall=quality.missing_overall,
            trust=trust_score,
            risk_level=risk_level,
            recommendation=recommendation,
        )

        report = AnalysisReport(
            automation_status='Completed',
            phase=COMPLETED_PHASE,
            data_quality=quality,
            data_cleaning_summary=state['cleaning_summary'],
            models=state['models'],
            final_model=final_model,
            trust_score=trust_score,
            risk_level=risk_level,
            risk_justification=risk_justification(risk_level),
            deployment_recommendation=recommendation,
            deployment_next_steps=next_steps,
            limitations=limitations,
            summary=summary,
        )
        logger.info(f"Report assembled: {final_model.name}, trust {trust_score.total}/100")

        return {
            'report': report,
            'current_step': 'report_assembly',
            'next_action': 'completed',
            'execution_log': ["Report assembled"],
        }
