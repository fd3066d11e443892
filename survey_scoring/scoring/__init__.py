"""
scoring/ - Survey Scoring Engine

Modules:
    utils.py           - Decimal utilities (rounding, statistics)
    item_resolver.py   - Item Value Resolver (missing -> 0, reverse scoring)
    expression.py      - Safe expression tokenizer / parser / evaluator
    dependencies.py    - Dependency Extractor + Rule Graph Orderer
    rule_executor.py   - Rule Executor (sum, average, computed, threshold, flag)
    engine.py          - Scoring Orchestrator (ScoringEngine, score_response)
    analytics.py       - Score statistics across many responses
"""

from survey_scoring.scoring.engine import ScoringEngine, score_response

__all__ = ["ScoringEngine", "score_response"]
