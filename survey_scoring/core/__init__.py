"""
Core Package - Survey Scoring Engine
survey_scoring/core/__init__.py

Core infrastructure: exceptions, logging setup.
"""

from survey_scoring.core.exceptions import (
    ExpressionError,
    ExpressionSyntaxError,
    RuleEvaluationError,
    SchemaLoadError,
    ScoringException,
    UnknownIdentifierError,
)
from survey_scoring.core.logging_config import configure_logging

__all__ = [
    # Logging
    "configure_logging",
    # Exceptions
    "ExpressionError",
    "ExpressionSyntaxError",
    "RuleEvaluationError",
    "SchemaLoadError",
    "ScoringException",
    "UnknownIdentifierError",
]
