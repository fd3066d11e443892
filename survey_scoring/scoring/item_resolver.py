"""
Item Value Resolver
survey_scoring/scoring/item_resolver.py

Maps a question id to the numeric value used by sum/average rules.

Policy:
    missing / None / non-numeric answer  -> 0  (partial questionnaires still score)
    reverse_score with numeric options   -> max + min - raw
    reverse_score without numeric options -> raw value, unmodified
"""

import math
from typing import Any, Optional

from survey_scoring.models.scores import RawAnswers
from survey_scoring.models.survey import SurveySchema


def to_number(raw: Any) -> Optional[float]:
    """Parse a raw answer as a finite float, or None if it is not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def resolve_item_value(question_id: str, answers: RawAnswers, schema: SurveySchema) -> float:
    """
    Numeric value of one answered item.

    Args:
        question_id: Question identifier (answer key).
        answers: Raw answers keyed by question id.
        schema: Schema holding the question definition (for reverse scoring).

    Returns:
        The item value; 0.0 when the answer is absent or not numeric.

    Examples:
        Likert 1..5 with reverse_score: raw 1 -> 5, raw 3 -> 3, raw 5 -> 1.
    """
    value = to_number(answers.get(question_id))
    if value is None:
        return 0.0

    question = schema.get_question(question_id)
    if question is not None and question.reverse_score:
        option_range = question.option_range
        if option_range is not None:
            low, high = option_range
            value = high + low - value

    return value
