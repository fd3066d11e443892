"""
Survey Scoring Engine

Converts raw questionnaire answers into derived scores according to a
declarative rule schema.
"""

__version__ = "1.0.0"

from survey_scoring.models.scores import ScoringResult
from survey_scoring.models.survey import SurveySchema
from survey_scoring.scoring.engine import ScoringEngine, score_response

__all__ = [
    "ScoringEngine",
    "ScoringResult",
    "SurveySchema",
    "score_response",
]
