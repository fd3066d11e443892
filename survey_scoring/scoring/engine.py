"""
Scoring Engine
survey_scoring/scoring/engine.py

Full pass for one questionnaire response:

  1. order_rules()           -> evaluation order (cycles broken, reported)
  2. RuleExecutor.execute()  -> one value per rule, against the scores so far
  3. per-rule isolation      -> any exception scores that rule to None
  4. ScoringResult           -> scores + order + diagnostics

A fresh score map is built on every call and nothing is shared between
calls, so responses can be scored concurrently without locking.

Usage:
    scores = score_response(schema, {"q1": 2, "q2": "3", "q3": 4})
    # {"total": 9.0, "severity": "High", ...}
"""

from typing import Any, List, Mapping, Optional, Union

import structlog

from survey_scoring.config import get_settings
from survey_scoring.models.enumerations import DiagnosticKind
from survey_scoring.models.scores import (
    RawAnswers,
    ScoreMap,
    ScoringDiagnostic,
    ScoringResult,
)
from survey_scoring.models.survey import SurveySchema
from survey_scoring.scoring.dependencies import plan_evaluation
from survey_scoring.scoring.rule_executor import RuleExecutor

logger = structlog.get_logger(__name__)

SchemaLike = Union[SurveySchema, Mapping[str, Any]]


def _as_schema(schema: SchemaLike) -> SurveySchema:
    if isinstance(schema, SurveySchema):
        return schema
    return SurveySchema.model_validate(schema)


class ScoringEngine:
    """Compute every rule of a schema for one set of raw answers."""

    def __init__(
        self,
        schema: SchemaLike,
        answers: Optional[RawAnswers] = None,
        unknown_label: Optional[str] = None,
        log_rule_failures: Optional[bool] = None,
    ):
        settings = get_settings()
        self.schema = _as_schema(schema)
        self.answers: RawAnswers = answers or {}
        self.unknown_label = unknown_label or settings.UNKNOWN_BAND_LABEL
        self.log_rule_failures = (
            settings.LOG_RULE_FAILURES if log_rule_failures is None else log_rule_failures
        )

    def compute(self) -> ScoringResult:
        """
        Run the scoring pass.

        Returns:
            ScoringResult whose `scores` has one key per rule. Never raises
            for rule-level problems; the worst case is every score None.
        """
        rules = self.schema.scoring_rules
        diagnostics: List[ScoringDiagnostic] = []
        order, back_edges = plan_evaluation(rules)

        for rule_name, dependency in back_edges:
            logger.warning("dependency_cycle", rule=rule_name, dependency=dependency)
            diagnostics.append(
                ScoringDiagnostic(
                    rule=rule_name,
                    kind=DiagnosticKind.DEPENDENCY_CYCLE,
                    message=f"Cycle through '{dependency}'; "
                            f"'{rule_name}' is evaluated before it",
                )
            )

        executor = RuleExecutor(self.schema, self.answers, self.unknown_label)
        scores: ScoreMap = {}
        for name in order:
            try:
                scores[name] = executor.execute(name, rules[name], scores, diagnostics)
            except Exception as e:
                if self.log_rule_failures:
                    logger.warning("rule_failed", rule=name, error=str(e))
                diagnostics.append(
                    ScoringDiagnostic(
                        rule=name,
                        kind=DiagnosticKind.RULE_FAILED,
                        message=str(e),
                    )
                )
                scores[name] = None

        logger.debug(
            "scores_computed",
            rule_count=len(order),
            failed=sum(1 for v in scores.values() if v is None),
            diagnostics=len(diagnostics),
        )
        return ScoringResult(scores=scores, order=order, diagnostics=diagnostics)


def score_response(schema: SchemaLike, answers: RawAnswers) -> ScoreMap:
    """Score one response and return only the score map."""
    return ScoringEngine(schema, answers).compute().scores
