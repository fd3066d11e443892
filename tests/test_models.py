# tests/test_models.py

"""
Model Validation Tests - survey schema pydantic models and enumerations
"""

import pytest
from pydantic import ValidationError

from survey_scoring.models.enumerations import DiagnosticKind, QuestionType, RuleType
from survey_scoring.models.scores import ScoringDiagnostic, ScoringResult
from survey_scoring.models.survey import (
    Question,
    ScoringRule,
    SurveySchema,
    ThresholdBand,
)


# ENUMERATION TESTS


class TestEnumerations:
    """Tests for the string enumerations."""

    def test_rule_types(self):
        expected = ["sum", "average", "computed", "threshold", "flag"]
        assert [t.value for t in RuleType] == expected

    def test_question_types(self):
        expected = ["likert", "numeric", "choice", "text"]
        assert [t.value for t in QuestionType] == expected

    def test_diagnostic_kinds(self):
        assert DiagnosticKind("dependency_cycle") is DiagnosticKind.DEPENDENCY_CYCLE


# QUESTION TESTS


class TestQuestion:
    """Tests for Question and its option range."""

    def test_numeric_option_range(self, likert_options):
        question = Question(id="q1", options=likert_options)
        assert question.option_range == (1.0, 5.0)

    def test_numeric_string_options(self):
        question = Question(
            id="q1",
            options=[{"value": "0", "label": "No"}, {"value": " 3 ", "label": "Yes"}],
        )
        assert question.option_range == (0.0, 3.0)

    def test_non_numeric_options_have_no_range(self):
        question = Question(
            id="q1",
            type="choice",
            options=[{"value": 1, "label": "One"}, {"value": "other", "label": "Other"}],
        )
        assert question.option_range is None

    def test_missing_options_have_no_range(self):
        assert Question(id="q1").option_range is None
        assert Question(id="q1", options=[]).option_range is None

    def test_reverse_score_defaults_false(self):
        assert Question(id="q1").reverse_score is False

    def test_invalid_question_type(self):
        with pytest.raises(ValidationError):
            Question(id="q1", type="slider")

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Question(id="")

    def test_question_is_frozen(self):
        question = Question(id="q1")
        with pytest.raises(ValidationError):
            question.reverse_score = True


# RULE TESTS


class TestScoringRule:
    """Tests for ScoringRule and ThresholdBand."""

    def test_unknown_type_still_loads(self):
        rule = ScoringRule(type="mean", questions=["q1"])
        assert rule.type == "mean"

    def test_type_required(self):
        with pytest.raises(ValidationError):
            ScoringRule(questions=["q1"])

    def test_band_is_inclusive(self):
        band = ThresholdBand(min=0, max=4, label="Low")
        assert band.contains(0)
        assert band.contains(4)
        assert not band.contains(4.01)
        assert not band.contains(-0.01)

    @pytest.mark.parametrize("rule, expected", [
        (ScoringRule(type="sum", questions=["q1", "q2"]), "Sum of responses to 2 questions"),
        (ScoringRule(type="average", questions=["q1"]), "Average of responses to 1 questions"),
        (ScoringRule(type="computed", formula="a + b"), "Computed from formula: a + b"),
        (ScoringRule(type="threshold", input="total"), "Categorical score based on total value"),
        (ScoringRule(type="flag", condition="total > 3"), "Boolean flag based on condition: total > 3"),
        (ScoringRule(type="custom"), "Custom scoring rule"),
    ])
    def test_describe(self, rule, expected):
        assert rule.describe() == expected

    def test_describe_prefers_description(self):
        rule = ScoringRule(type="sum", questions=["q1"], description="Total anxiety")
        assert rule.describe() == "Total anxiety"


# SCHEMA TESTS


class TestSurveySchema:
    """Tests for SurveySchema."""

    def test_rule_order_preserved(self, basic_schema):
        assert basic_schema.rule_names == [
            "total_score", "mean_score", "severity", "high_risk", "item_four", "item_five",
        ]

    def test_get_question(self, basic_schema):
        assert basic_schema.get_question("q4").reverse_score is True
        assert basic_schema.get_question("missing") is None

    def test_empty_schema(self):
        schema = SurveySchema()
        assert schema.questions == []
        assert schema.scoring_rules == {}

    def test_metadata_parsed(self):
        schema = SurveySchema.model_validate({
            "questions": [],
            "scoring_rules": {},
            "metadata": {
                "category": "Anxiety",
                "validated": True,
                "norms": {"total_score": {"mean": 5.2, "sd": 4.1, "sample_size": 2000}},
                "psychometric_properties": {
                    "reliability": {"cronbach_alpha": 0.89, "test_retest": 0.83},
                    "validity": "Convergent with BAI",
                },
            },
        })
        assert schema.metadata.norms["total_score"].sample_size == 2000
        assert schema.metadata.psychometric_properties.reliability.cronbach_alpha == 0.89

    def test_negative_norm_sd_rejected(self):
        with pytest.raises(ValidationError):
            SurveySchema.model_validate({
                "metadata": {"norms": {"total": {"sd": -1}}},
            })


# RESULT TESTS


class TestScoringResult:

    def test_failed_rules(self):
        result = ScoringResult(scores={"a": 1.0, "b": None, "c": "Low"}, order=["a", "b", "c"])
        assert result.failed_rules == ["b"]

    def test_diagnostic_to_dict(self):
        diagnostic = ScoringDiagnostic(
            rule="total", kind=DiagnosticKind.EXPRESSION_ERROR,
            message="Division by zero", expression="a / 0",
        )
        assert diagnostic.to_dict() == {
            "rule": "total",
            "kind": "expression_error",
            "message": "Division by zero",
            "expression": "a / 0",
        }
