"""
models/ - survey schema and score types

Modules:
    enumerations.py  - QuestionType, RuleType, DiagnosticKind
    survey.py        - Question, ScoringRule, SurveySchema (pydantic, frozen)
    scores.py        - ScoreMap aliases, ScoringDiagnostic, ScoringResult
"""
