# ai_scientist/agents/chat_agent.py
"""
Intent-routed query engine for conversational data exploration.

Questions are matched against an ordered list of ``IntentRule`` entries; the
first rule whose keywords match *and* whose handler produces an answer wins. A
handler returns ``None`` when its requirements are unmet (e.g. no column named
in the question) and evaluation falls through to the next rule.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ai_scientist.schemas import (
    AnalysisReport,
    BarChart,
    ChatExchange,
    LabelValue,
    PieChart,
    ScatterChart,
    ScatterPoint,
)
from ai_scientist.utils.table_utils import cell, column_values, non_empty, to_number

logger = logging.getLogger(__name__)

MAX_DISTRIBUTION_BARS = 10
MAX_SCATTER_ROWS = 100
MAX_MISSING_SLICES = 5

NOT_BENCHMARKED_MESSAGE = (
    "I haven't run the model benchmarking yet. Please select a target variable and "
    "initialize the full assessment to see model performance metrics."
)

FALLBACK_MESSAGE = (
    "I'm ready to assist with your data investigation. You can ask about feature distributions, "
    "correlations, missing values, or model performance. For example: 'Show me the distribution "
    "of income' or 'What is the relationship between age and credit_score?'."
)


@dataclass(frozen=True)
class QueryContext:
    question: str
    normalized: str
    report: Optional[AnalysisReport]
    headers: Tuple[str, ...]
    rows: Sequence[Sequence[str]]

    def mentioned_columns(self) -> List[str]:
        """Headers appearing in the question, in header order"""
        return [h for h in self.headers if h and h.lower() in self.normalized]


Handler = Callable[[QueryContext], Optional[ChatExchange]]


@dataclass(frozen=True)
class IntentRule:
    name: str
    keywords: Tuple[str, ...]
    handler: Handler

    def matches(self, normalized: str) -> bool:
        return any(keyword in normalized for keyword in self.keywords)


def answer_distribution(ctx: QueryContext) -> Optional[ChatExchange]:
    mentioned = ctx.mentioned_columns()
    if not mentioned:
        return None

    column = mentioned[0]
    values = non_empty(column_values(ctx.rows, ctx.headers.index(column)))
    freq = Counter(values)
    data = tuple(
        LabelValue(label=label, value=count)
        for label, count in freq.most_common(MAX_DISTRIBUTION_BARS)
    )

    return ChatExchange(
        question=ctx.question,
        answer=(
            f"I've analyzed the distribution of **{column}**. This feature contains "
            f"{len(values)} valid entries with {len(freq)} unique categories."
        ),
        chart=BarChart(title=f"{column} Distribution", data=data),
        intent='distribution',
    )


def answer_relationship(ctx: QueryContext) -> Optional[ChatExchange]:
    mentioned = ctx.mentioned_columns()
    if len(mentioned) < 2:
        return None

    first, second = mentioned[0], mentioned[1]
    idx_x = ctx.headers.index(first)
    idx_y = ctx.headers.index(second)

    points = []
    for i, row in enumerate(ctx.rows[:MAX_SCATTER_ROWS]):
        x = to_number(cell(row, idx_x))
        y = to_number(cell(row, idx_y))
        if x is None or y is None:
            continue
        points.append(ScatterPoint(x=x, y=y, label=f"Row {i}"))

    return ChatExchange(
        question=ctx.question,
        answer=(
            f"Analyzing the relationship between **{first}** and **{second}**. Linear correlation "
            f"analysis suggests a potential dependency based on the first {MAX_SCATTER_ROWS} records."
        ),
        chart=ScatterChart(title=f"{first} vs {second}", data=tuple(points)),
        intent='relationship',
    )


def answer_model_performance(ctx: QueryContext) -> Optional[ChatExchange]:
    report = ctx.report
    if report is None or not report.models:
        return ChatExchange(question=ctx.question, answer=NOT_BENCHMARKED_MESSAGE, intent='model_performance')

    data = tuple(LabelValue(label=m.name, value=m.metric_value) for m in report.models)
    champion = report.final_model.name if report.final_model else data[0].label

    return ChatExchange(
        question=ctx.question,
        answer=(
            f"The **{champion}** model is currently the top performer. Here is the benchmark "
            f"across all tested architectures."
        ),
        chart=BarChart(title="Model Benchmarks", data=data),
        intent='model_performance',
    )


def answer_data_quality(ctx: QueryContext) -> Optional[ChatExchange]:
    report = ctx.report
    if report is not None:
        quality = report.data_quality
        ranked = sorted(quality.columns, key=lambda c: c.missing_percent, reverse=True)
        data = tuple(LabelValue(label=c.name, value=c.missing_percent) for c in ranked[:MAX_MISSING_SLICES])
        integrity = round(100 - quality.missing_overall, 1)

        return ChatExchange(
            question=ctx.question,
            answer=(
                f"I've identified the columns with the highest missing data density. "
                f"Overall dataset integrity is {integrity}%."
            ),
            chart=PieChart(title="Missing Data Concentration", data=data),
            intent='data_quality',
        )

    # No report yet: estimate straight from the raw table
    row_count = len(ctx.rows)
    estimates = []
    for idx, header in enumerate(ctx.headers):
        missing = sum(1 for row in ctx.rows if not cell(row, idx))
        value = round(missing / row_count * 100) if row_count else 0
        estimates.append(LabelValue(label=header, value=value))
    estimates.sort(key=lambda item: item.value, reverse=True)

    return ChatExchange(
        question=ctx.question,
        answer="Initial data quality scan shows potential gaps. Here are the top columns with missing values.",
        chart=PieChart(title="Missing Data Estimation", data=tuple(estimates[:MAX_MISSING_SLICES])),
        intent='data_quality',
    )


def answer_preview(ctx: QueryContext) -> Optional[ChatExchange]:
    return ChatExchange(
        question=ctx.question,
        answer=(
            f"This dataset contains **{len(ctx.rows)}** rows and **{len(ctx.headers)}** columns. "
            f"The headers are: {', '.join(ctx.headers)}."
        ),
        intent='preview',
    )


INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule('distribution', ("distribution", "show me", "how many", "chart"), answer_distribution),
    IntentRule('relationship', ("correlation", "relate", "relationship", "versus", " vs "), answer_relationship),
    IntentRule('model_performance', ("model", "performance", "accuracy", "predict"), answer_model_performance),
    IntentRule('data_quality', ("missing", "null", "clean", "quality"), answer_data_quality),
    IntentRule('preview', ("preview", "rows", "data"), answer_preview),
)


def fallback_exchange(question: str) -> ChatExchange:
    return ChatExchange(question=question, answer=FALLBACK_MESSAGE, intent='fallback')


def process_query(question: str, report: Optional[AnalysisReport], headers: Sequence[str],
                  rows: Sequence[Sequence[str]],
                  rules: Sequence[IntentRule] = INTENT_RULES) -> ChatExchange:
    """Answer a free-text question locally using the first matching intent rule"""
    ctx = QueryContext(
        question=question,
        normalized=question.lower(),
        report=report,
        headers=tuple(headers),
        rows=rows,
    )

    for rule in rules:
        if not rule.matches(ctx.normalized):
            continue
        exchange = rule.handler(ctx)
        if exchange is not None:
            logger.debug(f"Query routed to {rule.name}")
            return exchange
        logger.debug(f"Intent {rule.name} matched but requirements unmet; falling through")

    return fallback_exchange(question)


class ChatAgent:
    """
    Conversational front end.

    Answers locally whenever an intent rule applies; questions that end in the
    fallback are handed to the external text-generation service when one is
    configured.
    """

    def __init__(self, assistant=None):
        self.assistant = assistant

    def respond(self, question: str, report: Optional[AnalysisReport], headers: Sequence[str],
                rows: Sequence[Sequence[str]], use_assistant: bool = True) -> ChatExchange:
        exchange = process_query(question, report, headers, rows)
        if exchange.intent != 'fallback' or not use_assistant or self.assistant is None:
            return exchange

        logger.info("No local intent matched; delegating to text-generation service")
        return self.assistant.ask(question, report, headers, rows)
