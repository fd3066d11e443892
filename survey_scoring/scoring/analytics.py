"""
scoring/analytics.py

Summary statistics over many computed score maps (one per response), for
monitoring how an instrument's scores are distributed.

Per numeric score:
    count, average, median, min, max,
    standard_deviation (population), coefficient_of_variation

Across all maps:
    flagged_responses  number of True values (flag rules that fired)
    high_variability   scores whose CV exceeds the configured threshold

Booleans, labels and None values never enter the numeric statistics.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import structlog

from survey_scoring.config import get_settings
from survey_scoring.models.scores import ScoreMap
from survey_scoring.scoring.utils import coefficient_of_variation, mean, median, std_dev

logger = structlog.get_logger(__name__)


@dataclass
class ScoreStatistics:
    """Distribution of one numeric score across responses."""
    score_name: str
    count: int
    average: Decimal
    median: Decimal
    min: Decimal
    max: Decimal
    standard_deviation: Decimal
    coefficient_of_variation: Decimal


@dataclass
class ScoreSummary:
    """Output of summarize_scores()."""
    response_count: int
    statistics: Dict[str, ScoreStatistics] = field(default_factory=dict)
    flagged_responses: int = 0
    high_variability: List[str] = field(default_factory=list)


def summarize_scores(
    score_maps: Iterable[ScoreMap],
    cv_threshold: Optional[float] = None,
) -> ScoreSummary:
    """
    Args:
        score_maps: Score maps as returned by score_response().
        cv_threshold: CV above which a score is listed in high_variability
                      (defaults to settings.HIGH_VARIABILITY_CV).

    Returns:
        ScoreSummary; scores with no numeric value anywhere are omitted.
    """
    threshold = Decimal(str(
        get_settings().HIGH_VARIABILITY_CV if cv_threshold is None else cv_threshold
    ))

    values: Dict[str, List[Decimal]] = {}
    flagged = 0
    responses = 0
    for score_map in score_maps:
        responses += 1
        for name, value in score_map.items():
            if value is True:
                flagged += 1
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                if math.isfinite(value):
                    values.setdefault(name, []).append(Decimal(str(value)))

    summary = ScoreSummary(response_count=responses, flagged_responses=flagged)
    for name, series in values.items():
        avg = mean(series)
        std = std_dev(series, avg)
        cv = coefficient_of_variation(std, avg)
        summary.statistics[name] = ScoreStatistics(
            score_name=name,
            count=len(series),
            average=avg,
            median=median(series),
            min=min(series),
            max=max(series),
            standard_deviation=std,
            coefficient_of_variation=cv,
        )
        if cv > threshold:
            summary.high_variability.append(name)

    logger.info(
        "scores_summarized",
        response_count=responses,
        score_count=len(summary.statistics),
        flagged_responses=flagged,
        high_variability=summary.high_variability,
    )
    return summary
