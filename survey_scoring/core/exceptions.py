"""
Custom Exceptions - Survey Scoring Engine
survey_scoring/core/exceptions.py

Exception classes for expression evaluation and rule scoring.
"""

from typing import Optional


class ScoringException(Exception):
    """Base exception for scoring operations."""

    pass


class ExpressionError(ScoringException):
    """Expression could not be tokenized, parsed or evaluated."""

    def __init__(self, expression: str, message: str):
        self.expression = expression
        self.message = message
        super().__init__(f"{message} in expression {expression!r}")


class ExpressionSyntaxError(ExpressionError):
    """Malformed token stream."""

    def __init__(self, expression: str, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(expression, message)


class UnknownIdentifierError(ExpressionError):
    """Identifier does not resolve to a numeric score."""

    def __init__(self, expression: str, name: str):
        self.name = name
        super().__init__(expression, f"Unknown identifier '{name}'")


class RuleEvaluationError(ScoringException):
    """A single rule could not produce a value."""

    def __init__(self, rule_name: str, message: str):
        self.rule_name = rule_name
        self.message = message
        super().__init__(f"Rule '{rule_name}': {message}")


class SchemaLoadError(ScoringException):
    """Schema or answers document could not be loaded."""

    def __init__(self, path: str, message: str = "Invalid document"):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
