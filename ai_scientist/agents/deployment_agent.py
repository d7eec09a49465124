# ai_scientist/agents/deployment_agent.py
"""
Trust scoring and deployment recommendation.

Only the data-quality sub-score depends on the run (the gate verdict); the other
four sub-scores are fixed constants of the benchmark simulation.
"""
import logging
from typing import Tuple

from ai_scientist.schemas import Limitation, TrustScoreBreakdown

logger = logging.getLogger(__name__)

PASS_DATA_QUALITY_SCORE = 85
WARN_DATA_QUALITY_SCORE = 65
PERFORMANCE_SCORE = 82
STABILITY_SCORE = 78
FAIRNESS_SCORE = 75
EXPLAINABILITY_SCORE = 80

LOW_RISK_THRESHOLD = 75
MEDIUM_RISK_THRESHOLD = 60

DEPLOY_WITH_MONITORING = "Deploy with monitoring"
DEPLOY_TO_PILOT = "Deploy to limited pilot"

DEPLOYMENT_NEXT_STEPS = (
    "Set up prediction drift monitoring",
    "Implement feature drift detection",
    "Schedule monthly retraining evaluation",
    "Configure alerting for performance degradation",
)

LIMITATIONS = (
    Limitation(risk="Data drift may degrade performance", mitigation="Implement continuous monitoring"),
    Limitation(risk="Class imbalance affects minority class recall", mitigation="Use SMOTE or class weights"),
    Limitation(risk="Feature importance may shift over time", mitigation="Track feature drift metrics"),
    Limitation(risk="Cold start for new categories", mitigation="Fallback to baseline predictions"),
    Limitation(risk="Latency under high load", mitigation="Implement model caching and batching"),
)

_RISK_JUSTIFICATIONS = {
    'Low': "Model demonstrates stable performance across validation folds with adequate data quality.",
    'Medium': "Moderate concerns around data quality or model stability require monitoring.",
    'High': "Moderate concerns around data quality or model stability require monitoring.",
}


def compute_trust_score(verdict: str) -> TrustScoreBreakdown:
    """Five-dimension trust breakdown; total is the rounded mean"""
    data_quality = PASS_DATA_QUALITY_SCORE if verdict == 'PASS' else WARN_DATA_QUALITY_SCORE
    scores = (data_quality, PERFORMANCE_SCORE, STABILITY_SCORE, FAIRNESS_SCORE, EXPLAINABILITY_SCORE)

    return TrustScoreBreakdown(
        data_quality=data_quality,
        performance=PERFORMANCE_SCORE,
        stability=STABILITY_SCORE,
        fairness=FAIRNESS_SCORE,
        explainability=EXPLAINABILITY_SCORE,
        total=round(sum(scores) / len(scores)),
    )


def risk_level_for(total: int) -> str:
    if total >= LOW_RISK_THRESHOLD:
        return 'Low'
    if total >= MEDIUM_RISK_THRESHOLD:
        return 'Medium'
    return 'High'


def deployment_recommendation(total: int) -> str:
    return DEPLOY_WITH_MONITORING if total >= LOW_RISK_THRESHOLD else DEPLOY_TO_PILOT


def risk_justification(risk_level: str) -> str:
    return _RISK_JUSTIFICATIONS[risk_level]


class DeploymentAgent:
    """Agent responsible for the trust score and deployment decision"""

    def score_trust(self, state: dict) -> dict:
        quality = state.get('data_quality')
        if quality is None:
            raise ValueError("trust_scoring requires 'data_quality' in state")

        trust_score = compute_trust_score(quality.verdict)
        risk_level = risk_level_for(trust_score.total)
        recommendation = deployment_recommendation(trust_score.total)

        logger.info(f"Trust score {trust_score.total}/100 ({risk_level} risk): {recommendation}")

        return {
            'trust_score': trust_score,
            'risk_level': risk_level,
            'deployment_recommendation': recommendation,
            'current_step': 'trust_scoring',
            'execution_log': [f"Trust score: {trust_score.total}/100, {risk_level} risk"],
        }

    def deployment_plan(self) -> Tuple[Tuple[str, ...], Tuple[Limitation, ...]]:
        """Fixed next steps and limitation/mitigation pairs"""
        return DEPLOYMENT_NEXT_STEPS, LIMITATIONS
