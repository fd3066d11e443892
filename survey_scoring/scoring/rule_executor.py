# survey_scoring/scoring/rule_executor.py
"""
Rule Executor
-------------
Produces the value of one ScoringRule from the raw answers and the scores
computed so far.

    sum        Σ item values; optional formula sees the total as `sum`
    average    Σ item values / len(questions); formula sees `average`
    computed   formula over the score map
    threshold  input score (optionally transformed by formula) -> band label,
               "Unknown" when no band matches or the input is a label,
               or the working value itself when no bands are defined
    flag       condition over the score map -> bool

Unknown rule kinds score to None.
"""
from typing import Callable, Dict, List, Optional

import structlog

from survey_scoring.core.exceptions import RuleEvaluationError
from survey_scoring.models.enumerations import DiagnosticKind, RuleType
from survey_scoring.models.scores import (
    RawAnswers,
    ScoreMap,
    ScoreValue,
    ScoringDiagnostic,
)
from survey_scoring.models.survey import ScoringRule, SurveySchema
from survey_scoring.scoring.expression import evaluate_arithmetic, evaluate_condition
from survey_scoring.scoring.item_resolver import resolve_item_value

logger = structlog.get_logger(__name__)

DEFAULT_UNKNOWN_LABEL = "Unknown"


class RuleExecutor:
    """Evaluate single rules for one response."""

    def __init__(
        self,
        schema: SurveySchema,
        answers: RawAnswers,
        unknown_label: str = DEFAULT_UNKNOWN_LABEL,
    ):
        self.schema = schema
        self.answers = answers
        self.unknown_label = unknown_label
        self._handlers: Dict[str, Callable[..., ScoreValue]] = {
            RuleType.SUM.value: self._sum,
            RuleType.AVERAGE.value: self._average,
            RuleType.COMPUTED.value: self._computed,
            RuleType.THRESHOLD.value: self._threshold,
            RuleType.FLAG.value: self._flag,
        }

    def execute(
        self,
        name: str,
        rule: ScoringRule,
        scores: ScoreMap,
        diagnostics: Optional[List[ScoringDiagnostic]] = None,
    ) -> ScoreValue:
        """
        Args:
            name: Rule name (for diagnostics and error messages).
            rule: The rule to evaluate.
            scores: Scores of every rule already evaluated. Read only.
            diagnostics: Optional sink for non-fatal problems.

        Returns:
            float, str label, bool, or None.

        Raises:
            RuleEvaluationError: if the rule cannot produce a value at all.
        """
        handler = self._handlers.get(rule.type)
        if handler is None:
            logger.warning("unknown_rule_type", rule=name, rule_type=rule.type)
            if diagnostics is not None:
                diagnostics.append(
                    ScoringDiagnostic(
                        rule=name,
                        kind=DiagnosticKind.UNKNOWN_RULE_TYPE,
                        message=f"Unknown rule type '{rule.type}'",
                    )
                )
            return None
        try:
            return handler(name, rule, scores, diagnostics)
        except (ArithmeticError, ValueError, TypeError) as e:
            raise RuleEvaluationError(name, str(e)) from e

    # ------------------------------------------------------------------
    # Rule kinds
    # ------------------------------------------------------------------

    def _item_total(self, rule: ScoringRule) -> float:
        return sum(
            resolve_item_value(question_id, self.answers, self.schema)
            for question_id in rule.questions or []
        )

    def _sum(self, name, rule, scores, diagnostics) -> float:
        if rule.questions is None:
            return 0.0
        total = self._item_total(rule)
        if rule.formula:
            return evaluate_arithmetic(
                rule.formula, scores, {"sum": total}, diagnostics, name
            )
        return total

    def _average(self, name, rule, scores, diagnostics) -> float:
        if not rule.questions:
            return 0.0
        avg = self._item_total(rule) / len(rule.questions)
        if rule.formula:
            return evaluate_arithmetic(
                rule.formula, scores, {"average": avg}, diagnostics, name
            )
        return avg

    def _computed(self, name, rule, scores, diagnostics) -> float:
        if not rule.formula:
            return 0.0
        return evaluate_arithmetic(rule.formula, scores, None, diagnostics, name)

    def _threshold(self, name, rule, scores, diagnostics) -> ScoreValue:
        if not rule.input:
            return None
        value = scores.get(rule.input)
        if value is None:
            return None

        if rule.formula:
            value = evaluate_arithmetic(
                rule.formula, scores, {rule.input: value}, diagnostics, name
            )

        # No bands: pass the working value through
        if rule.thresholds is None:
            return value

        # A label never falls inside a numeric band
        if isinstance(value, str):
            return self.unknown_label
        for band in rule.thresholds:
            if band.contains(value):
                return band.label
        return self.unknown_label

    def _flag(self, name, rule, scores, diagnostics) -> bool:
        if not rule.condition:
            return False
        return evaluate_condition(rule.condition, scores, None, diagnostics, name)


def execute_rule(
    rule: ScoringRule,
    answers: RawAnswers,
    scores: ScoreMap,
    schema: SurveySchema,
    diagnostics: Optional[List[ScoringDiagnostic]] = None,
    name: str = "",
) -> ScoreValue:
    """Evaluate one rule without building an engine."""
    return RuleExecutor(schema, answers).execute(name, rule, scores, diagnostics)
