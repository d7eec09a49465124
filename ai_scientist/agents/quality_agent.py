# ai_scientist/agents/quality_agent.py
"""
Quality gate.

The gate is a forward-only state machine (PASS -> WARN -> FAIL). Rules are an
ordered list of ``QualityRule`` entries; each may raise the verdict and append a
reason, none may lower it. A FAIL verdict stops the analysis pipeline.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ai_scientist.config import QualityGateConfig, get_config
from ai_scientist.schemas import (
    ClassBalance,
    ColumnProfile,
    DatasetSize,
    LabelValue,
    QualityVerdict,
    TargetInfo,
)
from ai_scientist.utils.table_utils import column_values, non_empty

logger = logging.getLogger(__name__)

SEVERITY: Dict[str, int] = {'PASS': 0, 'WARN': 1, 'FAIL': 2}

AFFIRMATIVE_REASONS = (
    "Dataset size adequate for ML modeling",
    "Missing data within acceptable limits",
    "Target variable properly defined",
)


def escalate(current: str, proposed: str) -> str:
    """Return the more severe of two verdicts"""
    return proposed if SEVERITY[proposed] > SEVERITY[current] else current


@dataclass(frozen=True)
class GateContext:
    """Everything the rules are allowed to look at"""
    row_count: int
    target_column: str
    target_present: bool
    target_profile: Optional[ColumnProfile]
    columns: Tuple[ColumnProfile, ...]
    missing_overall: float
    class_balance: Optional[ClassBalance]


@dataclass(frozen=True)
class RuleOutcome:
    severity: str
    reason: str


RuleCheck = Callable[[GateContext, QualityGateConfig], Optional[RuleOutcome]]


@dataclass(frozen=True)
class QualityRule:
    name: str
    check: RuleCheck


@dataclass(frozen=True)
class GateResult:
    verdict: str
    reasons: Tuple[str, ...]
    fired: Tuple[str, ...]
    # verdict after each rule, in evaluation order
    trail: Tuple[str, ...]


def check_dataset_size(ctx: GateContext, config: QualityGateConfig) -> Optional[RuleOutcome]:
    if ctx.row_count < config.MIN_ROWS:
        return RuleOutcome('FAIL', f"Dataset too small: {ctx.row_count} rows (minimum {config.MIN_ROWS} recommended)")
    if ctx.row_count < config.RECOMMENDED_ROWS:
        return RuleOutcome('WARN', f"Small dataset: {ctx.row_count} rows may limit model complexity")
    return None


def check_target_presence(ctx: GateContext, config: QualityGateConfig) -> Optional[RuleOutcome]:
    if not ctx.target_present:
        return RuleOutcome('FAIL', f'Target column "{ctx.target_column}" not found in dataset')
    return None


def check_overall_missing(ctx: GateContext, config: QualityGateConfig) -> Optional[RuleOutcome]:
    if ctx.missing_overall > config.CRITICAL_MISSING_PERCENTAGE:
        return RuleOutcome('FAIL', f"Critical missing data: {ctx.missing_overall}% overall")
    if ctx.missing_overall > config.MODERATE_MISSING_PERCENTAGE:
        return RuleOutcome('WARN', f"Moderate missing data: {ctx.missing_overall}% overall")
    return None


def check_column_missing(ctx: GateContext, config: QualityGateConfig) -> Optional[RuleOutcome]:
    offending = [c.name for c in ctx.columns if c.missing_percent > config.COLUMN_MISSING_PERCENTAGE]
    if offending:
        threshold = f"{config.COLUMN_MISSING_PERCENTAGE:g}"
        return RuleOutcome('WARN', f"Columns with >{threshold}% missing: {', '.join(offending)}")
    return None


def check_class_balance(ctx: GateContext, config: QualityGateConfig) -> Optional[RuleOutcome]:
    if ctx.class_balance is None:
        return None
    ratio = ctx.class_balance.ratio
    if ratio > config.SEVERE_IMBALANCE_RATIO:
        return RuleOutcome('WARN', f"Severe class imbalance: {ratio}:1 ratio")
    if ratio > config.MODERATE_IMBALANCE_RATIO:
        return RuleOutcome('WARN', f"Moderate class imbalance: {ratio}:1 ratio")
    return None


DEFAULT_RULES: Tuple[QualityRule, ...] = (
    QualityRule('dataset_size', check_dataset_size),
    QualityRule('target_presence', check_target_presence),
    QualityRule('overall_missing', check_overall_missing),
    QualityRule('column_missing', check_column_missing),
    QualityRule('class_balance', check_class_balance),
)


class QualityGate:
    """Evaluates an ordered rule list against a gate context"""

    def __init__(self, rules: Sequence[QualityRule] = DEFAULT_RULES,
                 config: Optional[QualityGateConfig] = None):
        self.rules = tuple(rules)
        self.config = config or get_config().quality_gate

    def evaluate(self, ctx: GateContext) -> GateResult:
        verdict = 'PASS'
        reasons: List[str] = []
        fired: List[str] = []
        trail: List[str] = []

        for rule in self.rules:
            outcome = rule.check(ctx, self.config)
            if outcome is not None:
                verdict = escalate(verdict, outcome.severity)
                reasons.append(outcome.reason)
                fired.append(rule.name)
                logger.debug(f"Rule {rule.name} fired ({outcome.severity}): {outcome.reason}")
            trail.append(verdict)

        if not reasons:
            reasons.extend(AFFIRMATIVE_REASONS)

        return GateResult(verdict=verdict, reasons=tuple(reasons), fired=tuple(fired), trail=tuple(trail))


def target_distribution(values: Sequence[str], limit: int = 10) -> Tuple[LabelValue, ...]:
    """Most frequent target values, ties kept in first-seen order"""
    freq = Counter(non_empty(values))
    return tuple(LabelValue(label=label, value=count) for label, count in freq.most_common(limit))


def compute_class_balance(values: Sequence[str], balanced_ratio: float = 3.0) -> Optional[ClassBalance]:
    """Majority/minority ratio over all classes; None for fewer than two classes"""
    freq = Counter(non_empty(values))
    if len(freq) < 2:
        return None
    counts = freq.values()
    ratio = round(max(counts) / max(min(counts), 1), 1)
    return ClassBalance(balanced=ratio <= balanced_ratio, ratio=ratio)


class DataQualityAgent:
    """Agent responsible for the PASS/WARN/FAIL readiness verdict"""

    def __init__(self, gate: Optional[QualityGate] = None):
        self.gate = gate or QualityGate()

    def build_context(self, headers: Sequence[str], rows: Sequence[Sequence[str]], target_column: str,
                      columns: Sequence[ColumnProfile], missing_overall: float) -> GateContext:
        target_present = target_column in headers
        target_profile = next((c for c in columns if c.name == target_column), None)

        class_balance = None
        if target_present and target_profile is not None and target_profile.type == 'categorical':
            target_values = column_values(rows, list(headers).index(target_column))
            class_balance = compute_class_balance(
                target_values, self.gate.config.MODERATE_IMBALANCE_RATIO
            )

        return GateContext(
            row_count=len(rows),
            target_column=target_column,
            target_present=target_present,
            target_profile=target_profile,
            columns=tuple(columns),
            missing_overall=missing_overall,
            class_balance=class_balance,
        )

    def validate(self, state: dict) -> dict:
        """Run the quality gate and decide whether the pipeline may continue"""
        if 'columns' not in state or 'missing_overall' not in state:
            raise ValueError("quality_gate requires 'columns' and 'missing_overall' in state")

        headers = state['headers']
        rows = state['rows']
        target_column = state['target_column']
        columns = state['columns']

        ctx = self.build_context(headers, rows, target_column, columns, state['missing_overall'])
        result = self.gate.evaluate(ctx)

        distribution: Tuple[LabelValue, ...] = ()
        if ctx.target_present:
            distribution = target_distribution(column_values(rows, list(headers).index(target_column)))

        quality = QualityVerdict(
            verdict=result.verdict,
            reasons=result.reasons,
            dataset_size=DatasetSize(rows=len(rows), cols=len(headers)),
            missing_overall=ctx.missing_overall,
            target_info=TargetInfo(
                name=target_column,
                type=ctx.target_profile.type if ctx.target_profile else 'unknown',
                valid=ctx.target_present,
                distribution=distribution,
                leakage_risk='LOW',
            ),
            columns=tuple(columns),
            correlation_matrix=tuple(state.get('correlation_matrix', ())),
            class_balance=ctx.class_balance,
        )

        if result.verdict == 'FAIL':
            logger.warning(f"Quality gate FAIL: {'; '.join(result.reasons)}")
        else:
            logger.info(f"Quality gate {result.verdict} ({len(result.fired)} rules fired)")

        return {
            'data_quality': quality,
            'current_step': 'quality_gate',
            'next_action': 'halt' if result.verdict == 'FAIL' else 'proceed',
            'execution_log': [f"Quality gate verdict: {result.verdict}"],
        }
