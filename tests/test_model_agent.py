# tests/test_model_agent.py
import pytest

from ai_scientist.agents.data_agent import profile_column, profile_table
from ai_scientist.agents.deployment_agent import (
    DEPLOY_TO_PILOT,
    DEPLOY_WITH_MONITORING,
    DEPLOYMENT_NEXT_STEPS,
    LIMITATIONS,
    DeploymentAgent,
    compute_trust_score,
    deployment_recommendation,
    risk_justification,
    risk_level_for,
)
from ai_scientist.agents.model_agent import (
    ModelBenchmarkAgent,
    determine_task_type,
    feature_importances,
    get_model_candidates,
    select_champion,
)
from ai_scientist.agents.quality_agent import DataQualityAgent
from tests.conftest import gate_state


class TestModelBenchmark:

    def test_classification_scoreboard(self):
        candidates = get_model_candidates('classification')

        assert [c.name for c in candidates] == [
            'Logistic Regression', 'Random Forest', 'XGBoost', 'Neural Network'
        ]
        assert [c.metric_value for c in candidates] == [0.72, 0.84, 0.87, 0.81]
        assert all(c.metric_name == 'ROC-AUC' for c in candidates)
        assert [c.status for c in candidates] == ['accepted', 'accepted', 'accepted', 'rejected']

    def test_regression_scoreboard(self):
        candidates = get_model_candidates('regression')

        assert candidates[0].name == 'Linear Regression'
        assert [c.metric_value for c in candidates] == [0.68, 0.79, 0.82, 0.75]
        assert all(c.metric_name == 'R²' for c in candidates)

    def test_unknown_task_type(self):
        with pytest.raises(ValueError):
            get_model_candidates('clustering')

    def test_champion_is_best_accepted(self):
        for task_type in ('classification', 'regression'):
            champion = select_champion(get_model_candidates(task_type))
            assert champion.name == 'XGBoost'
            assert champion.status == 'accepted'

    def test_rejected_candidates_never_win(self):
        candidates = get_model_candidates('classification')
        boosted = tuple(
            c.model_copy(update={'metric_value': 0.99}) if c.status == 'rejected' else c
            for c in candidates
        )
        assert select_champion(boosted).name == 'XGBoost'

    def test_no_accepted_candidates(self):
        rejected = tuple(c.model_copy(update={'status': 'rejected'}) for c in get_model_candidates('regression'))
        with pytest.raises(ValueError):
            select_champion(rejected)

    def test_task_type_follows_target(self):
        assert determine_task_type(profile_column('y', ['a', 'b', 'a'])) == 'classification'
        assert determine_task_type(profile_column('y', ['1', '2', '3'])) == 'regression'
        assert determine_task_type(None) == 'regression'


class TestFeatureImportance:

    def test_decreasing_importances(self, loan_table):
        headers, rows = loan_table
        importances = feature_importances(profile_table(headers, rows), 'default')

        assert [(i.label, i.value) for i in importances] == [
            ('age', 0.8), ('income', 0.65), ('credit_score', 0.5)
        ]

    def test_capped_at_five(self):
        headers = [f"f{i}" for i in range(7)] + ['y']
        rows = [[str(i * (j + 1)) for j in range(7)] + ['k'] for i in range(30)]

        importances = feature_importances(profile_table(headers, rows), 'y')

        assert [i.value for i in importances] == [0.8, 0.65, 0.5, 0.35, 0.2]
        values = [i.value for i in importances]
        assert values == sorted(values, reverse=True)

    def test_target_never_listed(self, loan_table):
        headers, rows = loan_table
        importances = feature_importances(profile_table(headers, rows), 'income')
        assert 'income' not in [i.label for i in importances]


class TestModelBenchmarkAgent:

    @pytest.fixture
    def validated_state(self, loan_table):
        headers, rows = loan_table
        state = gate_state(headers, rows, 'default')
        state.update(DataQualityAgent().validate(state))
        return state

    def test_benchmark_node(self, validated_state):
        result = ModelBenchmarkAgent().benchmark_models(validated_state)

        assert result['task_type'] == 'classification'
        assert len(result['models']) == 4

    def test_evaluate_node(self, validated_state):
        agent = ModelBenchmarkAgent()
        validated_state.update(agent.benchmark_models(validated_state))

        final_model = agent.evaluate_models(validated_state)['final_model']

        assert final_model.name == 'XGBoost'
        assert [(m.name, m.value, m.ci) for m in final_model.test_metrics] == [
            ('ROC-AUC', 0.85, '±0.03'), ('F1-Score', 0.79, '±0.02'), ('Precision', 0.81, '±0.02')
        ]

    def test_regression_test_metrics(self, loan_table):
        headers, rows = loan_table
        state = gate_state(headers, rows, 'income')
        state.update(DataQualityAgent().validate(state))
        agent = ModelBenchmarkAgent()
        state.update(agent.benchmark_models(state))

        final_model = agent.evaluate_models(state)['final_model']

        assert [m.name for m in final_model.test_metrics] == ['R²', 'RMSE', 'MAE']

    def test_benchmark_requires_verdict(self, loan_table):
        headers, rows = loan_table
        with pytest.raises(ValueError):
            ModelBenchmarkAgent().benchmark_models(gate_state(headers, rows, 'default'))


class TestTrustScore:

    def test_pass_score(self):
        score = compute_trust_score('PASS')

        assert score.data_quality == 85
        assert (score.performance, score.stability, score.fairness, score.explainability) == (82, 78, 75, 80)
        assert score.total == 80

    def test_warn_score(self):
        score = compute_trust_score('WARN')

        assert score.data_quality == 65
        assert score.total == 76

    def test_total_is_rounded_mean(self):
        for verdict in ('PASS', 'WARN'):
            s = compute_trust_score(verdict)
            mean = (s.data_quality + s.performance + s.stability + s.fairness + s.explainability) / 5
            assert s.total == round(mean)

    @pytest.mark.parametrize("total,level", [(100, 'Low'), (75, 'Low'), (74, 'Medium'), (60, 'Medium'), (59, 'High')])
    def test_risk_levels(self, total, level):
        assert risk_level_for(total) == level

    def test_recommendation(self):
        assert deployment_recommendation(80) == DEPLOY_WITH_MONITORING
        assert deployment_recommendation(74) == DEPLOY_TO_PILOT

    def test_justification_by_level(self):
        assert "stable performance" in risk_justification('Low')
        assert "Moderate concerns" in risk_justification('Medium')

    def test_score_trust_node(self):
        class Quality:
            verdict = 'WARN'

        result = DeploymentAgent().score_trust({'data_quality': Quality()})

        assert result['trust_score'].total == 76
        assert result['risk_level'] == 'Low'
        assert result['deployment_recommendation'] == DEPLOY_WITH_MONITORING

    def test_deployment_plan(self):
        next_steps, limitations = DeploymentAgent().deployment_plan()

        assert next_steps == DEPLOYMENT_NEXT_STEPS
        assert len(next_steps) == 4
        assert limitations == LIMITATIONS
        assert len(limitations) == 5
