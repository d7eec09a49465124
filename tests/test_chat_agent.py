# tests/test_chat_agent.py
import pytest

from ai_scientist import analyze, process_query
from ai_scientist.agents.chat_agent import (
    FALLBACK_MESSAGE,
    NOT_BENCHMARKED_MESSAGE,
    ChatAgent,
    IntentRule,
)
from ai_scientist.schemas import ChatExchange


@pytest.fixture
def survey_table():
    """Small table with gaps: income has 5 distinct values and 4 blanks"""
    headers = ['age', 'income', 'default']
    incomes = ['30k', '40k', '50k', '30k', '', '60k', '70k', '30k', '', '40k', '', '50k', '']
    rows = [[str(25 + i), income, 'Yes' if i % 2 else 'No'] for i, income in enumerate(incomes)]
    return headers, rows


@pytest.fixture
def completed_report(loan_table):
    headers, rows = loan_table
    return analyze(headers, rows, 'default')


class TestIntentRouting:

    def test_distribution_question(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("Show me the distribution of income", None, headers, rows)

        assert exchange.intent == 'distribution'
        assert exchange.chart.type == 'bar'
        assert exchange.chart.title == 'income Distribution'
        assert len(exchange.chart.data) <= 10
        assert sum(item.value for item in exchange.chart.data) == 9
        assert exchange.chart.data[0].label == '30k'
        assert "9 valid entries with 5 unique categories" in exchange.answer

    def test_distribution_capped_at_ten_bars(self):
        headers = ['city']
        rows = [[f"city_{i}"] for i in range(15)]

        exchange = process_query("how many of each city?", None, headers, rows)

        assert len(exchange.chart.data) == 10

    def test_relationship_question(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("What is the relationship between age and income?", None, headers, rows)

        assert exchange.intent == 'relationship'
        assert exchange.chart.type == 'scatter'
        assert exchange.chart.title == 'age vs income'
        # income values such as '30k' are not numeric
        assert exchange.chart.data == ()

    def test_relationship_scatter_points(self):
        headers = ['height', 'weight']
        rows = [[str(150 + i), str(50 + i)] for i in range(120)]
        rows[5][1] = 'n/a'

        exchange = process_query("height vs weight", None, headers, rows)

        assert exchange.intent == 'relationship'
        assert exchange.chart.title == 'height vs weight'
        # first 100 rows, minus the one that does not parse
        assert len(exchange.chart.data) == 99
        assert exchange.chart.data[0].label == 'Row 0'
        assert 'Row 5' not in [point.label for point in exchange.chart.data]
        assert (exchange.chart.data[0].x, exchange.chart.data[0].y) == (150.0, 50.0)

    def test_relationship_needs_two_columns(self):
        headers = ['height', 'weight']
        rows = [['150', '50']]

        exchange = process_query("is there a correlation with height?", None, headers, rows)

        assert exchange.intent == 'fallback'

    def test_model_performance_without_report(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("Which model performs best?", None, headers, rows)

        assert exchange.intent == 'model_performance'
        assert exchange.answer == NOT_BENCHMARKED_MESSAGE
        assert exchange.chart is None

    def test_model_performance_with_stopped_report(self, tiny_loan_table):
        headers, rows = tiny_loan_table
        report = analyze(headers, rows, 'default')

        exchange = process_query("What is the model accuracy?", report, headers, rows)

        assert exchange.answer == NOT_BENCHMARKED_MESSAGE

    def test_model_performance_with_report(self, loan_table, completed_report):
        headers, rows = loan_table
        exchange = process_query("Which model performs best?", completed_report, headers, rows)

        assert exchange.intent == 'model_performance'
        assert exchange.chart.title == 'Model Benchmarks'
        assert [(item.label, item.value) for item in exchange.chart.data] == [
            ('Logistic Regression', 0.72), ('Random Forest', 0.84), ('XGBoost', 0.87), ('Neural Network', 0.81)
        ]
        assert "**XGBoost**" in exchange.answer

    def test_data_quality_with_report(self, loan_table, completed_report):
        headers, rows = loan_table
        exchange = process_query("Are there missing values?", completed_report, headers, rows)

        assert exchange.intent == 'data_quality'
        assert exchange.chart.type == 'pie'
        assert exchange.chart.title == 'Missing Data Concentration'
        assert len(exchange.chart.data) == 5
        assert "100.0%" in exchange.answer

    def test_data_quality_estimate_without_report(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("Are there missing values?", None, headers, rows)

        assert exchange.chart.title == 'Missing Data Estimation'
        assert exchange.chart.data[0].label == 'income'
        # 4 of 13 rows
        assert exchange.chart.data[0].value == 31
        assert all(isinstance(item.value, int) for item in exchange.chart.data)

    def test_preview(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("give me a quick preview", None, headers, rows)

        assert exchange.intent == 'preview'
        assert "**13** rows and **3** columns" in exchange.answer
        assert "age, income, default" in exchange.answer
        assert exchange.chart is None

    def test_unrecognized_question_falls_back(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("Tell me a joke about statistics", None, headers, rows)

        assert exchange.intent == 'fallback'
        assert exchange.answer == FALLBACK_MESSAGE
        assert exchange.chart is None

    def test_unmet_distribution_falls_through(self, survey_table):
        headers, rows = survey_table

        assert process_query("show me something interesting", None, headers, rows).intent == 'fallback'
        assert process_query("chart the data", None, headers, rows).intent == 'preview'

    def test_earlier_rule_wins(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("How many rows have missing income?", None, headers, rows)

        assert exchange.intent == 'distribution'

    def test_column_match_is_case_insensitive(self, survey_table):
        headers, rows = survey_table
        exchange = process_query("DISTRIBUTION OF INCOME", None, headers, rows)

        assert exchange.chart.title == 'income Distribution'

    def test_empty_header_never_matches(self):
        headers = ['', 'score']
        rows = [['a', '1'], ['b', '2']]

        exchange = process_query("show me the distribution", None, headers, rows)

        assert exchange.intent == 'fallback'

    def test_custom_rules(self, survey_table):
        headers, rows = survey_table
        rules = (
            IntentRule('greeting', ('hello',), lambda ctx: ChatExchange(question=ctx.question, answer='hi')),
        )

        assert process_query("hello", None, headers, rows, rules=rules).answer == 'hi'
        assert process_query("show me income", None, headers, rows, rules=rules).intent == 'fallback'


class TestChatAgent:

    class RecordingAssistant:
        def __init__(self):
            self.questions = []

        def ask(self, question, report, headers, rows):
            self.questions.append(question)
            return ChatExchange(question=question, answer='from assistant', intent='assistant')

    def test_local_answer_not_delegated(self, survey_table):
        headers, rows = survey_table
        assistant = self.RecordingAssistant()

        exchange = ChatAgent(assistant).respond("Show me the distribution of income", None, headers, rows)

        assert exchange.intent == 'distribution'
        assert assistant.questions == []

    def test_fallback_delegated(self, survey_table):
        headers, rows = survey_table
        assistant = self.RecordingAssistant()

        exchange = ChatAgent(assistant).respond("Tell me a joke", None, headers, rows)

        assert exchange.intent == 'assistant'
        assert assistant.questions == ["Tell me a joke"]

    def test_delegation_disabled(self, survey_table):
        headers, rows = survey_table
        assistant = self.RecordingAssistant()

        exchange = ChatAgent(assistant).respond("Tell me a joke", None, headers, rows, use_assistant=False)

        assert exchange.answer == FALLBACK_MESSAGE
        assert assistant.questions == []

    def test_without_assistant(self, survey_table):
        headers, rows = survey_table
        assert ChatAgent().respond("Tell me a joke", None, headers, rows).intent == 'fallback'
