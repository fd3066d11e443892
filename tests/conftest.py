# tests/conftest.py

"""
Pytest Fixtures - Shared schemas and answer sets for scoring tests

SCHEMA REFERENCE (basic_schema):
- Questions:  q1..q3 Likert 1-5, q4 Likert 1-5 reverse scored, q5 Likert 0-3
- Rules:      total_score (sum q1-q3), mean_score (average q1-q3),
              severity (threshold on total_score), high_risk (flag),
              item_four (sum q4), item_five (sum q5)
"""

import pytest

from survey_scoring.models.survey import ScoringRule, SurveySchema


# =============================================================================
# QUESTION FIXTURES
# =============================================================================

@pytest.fixture
def likert_options():
    """Five-point frequency scale valued 1..5."""
    return [
        {"value": 1, "label": "Never"},
        {"value": 2, "label": "Rarely"},
        {"value": 3, "label": "Sometimes"},
        {"value": 4, "label": "Often"},
        {"value": 5, "label": "Always"},
    ]


@pytest.fixture
def phq_options():
    """Four-point PHQ-style scale valued 0..3."""
    return [
        {"value": 0, "label": "Not at all"},
        {"value": 1, "label": "Several days"},
        {"value": 2, "label": "More than half the days"},
        {"value": 3, "label": "Nearly every day"},
    ]


@pytest.fixture
def questions(likert_options, phq_options):
    return [
        {"id": "q1", "text": "I feel calm", "type": "likert", "options": likert_options},
        {"id": "q2", "text": "I feel rested", "type": "likert", "options": likert_options},
        {"id": "q3", "text": "I feel focused", "type": "likert", "options": likert_options},
        {"id": "q4", "text": "I feel tense", "type": "likert",
         "options": likert_options, "reverse_score": True},
        {"id": "q5", "text": "Trouble sleeping", "type": "likert", "options": phq_options},
    ]


# =============================================================================
# SCHEMA FIXTURES
# =============================================================================

@pytest.fixture
def basic_rules():
    return {
        "total_score": {"type": "sum", "questions": ["q1", "q2", "q3"]},
        "mean_score": {"type": "average", "questions": ["q1", "q2", "q3"]},
        "severity": {
            "type": "threshold",
            "input": "total_score",
            "thresholds": [
                {"min": 0, "max": 4, "label": "Low"},
                {"min": 5, "max": 9, "label": "High"},
            ],
        },
        "high_risk": {"type": "flag", "condition": "total_score >= 10"},
        "item_four": {"type": "sum", "questions": ["q4"]},
        "item_five": {"type": "sum", "questions": ["q5"]},
    }


@pytest.fixture
def basic_schema(questions, basic_rules):
    """Validated schema covering every rule kind."""
    return SurveySchema.model_validate(
        {"questions": questions, "scoring_rules": basic_rules}
    )


@pytest.fixture
def basic_answers():
    """Q1=2, Q2=3, Q3=4 -> sum 9, average 3."""
    return {"q1": 2, "q2": "3", "q3": 4, "q4": 1, "q5": 2}


@pytest.fixture
def make_schema(questions):
    """Build a schema from a rule mapping, reusing the standard questions."""
    def _make(rules, question_list=None):
        return SurveySchema.model_validate({
            "questions": questions if question_list is None else question_list,
            "scoring_rules": rules,
        })
    return _make


@pytest.fixture
def computed_rule():
    """Factory for computed rules."""
    def _make(formula):
        return ScoringRule(type="computed", formula=formula)
    return _make
