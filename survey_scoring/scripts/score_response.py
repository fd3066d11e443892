"""
Score one questionnaire response from JSON files and print the score map.

The schema file may hold a bare schema ({"questions": ..., "scoring_rules": ...})
or an instrument document with the schema under a top-level "schema" key.

Usage:
    python -m survey_scoring.scripts.score_response schema.json answers.json
    python -m survey_scoring.scripts.score_response schema.json answers.json --diagnostics
    python -m survey_scoring.scripts.score_response schema.json answers.json --log-level DEBUG
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from survey_scoring.config import get_settings
from survey_scoring.core.exceptions import SchemaLoadError
from survey_scoring.core.logging_config import configure_logging
from survey_scoring.models.survey import SurveySchema
from survey_scoring.scoring.engine import ScoringEngine

logger = structlog.get_logger(__name__)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SchemaLoadError(str(path), f"Cannot read file: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise SchemaLoadError(str(path), f"Invalid JSON: {e.msg} (line {e.lineno})") from e


def load_schema(path: Path) -> SurveySchema:
    """Load a schema or instrument document."""
    data = _read_json(path)
    if isinstance(data, dict) and isinstance(data.get("schema"), dict):
        data = data["schema"]
    if not isinstance(data, dict):
        raise SchemaLoadError(str(path), "Schema must be a JSON object")
    try:
        return SurveySchema.model_validate(data)
    except ValidationError as e:
        raise SchemaLoadError(str(path), f"Invalid schema: {e.error_count()} error(s)\n{e}") from e


def load_answers(path: Path) -> Dict[str, Any]:
    """Load raw answers keyed by question id."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise SchemaLoadError(str(path), "Answers must be a JSON object")
    return data


def _round_scores(scores: Dict[str, Any], places: Optional[int]) -> Dict[str, Any]:
    if places is None:
        return scores
    return {
        name: round(value, places)
        if isinstance(value, float) else value
        for name, value in scores.items()
    }


def main(argv: Optional[list] = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Score a questionnaire response")
    parser.add_argument("schema", type=Path, help="Schema or instrument JSON file")
    parser.add_argument("answers", type=Path, help="Raw answers JSON file")
    parser.add_argument("--diagnostics", action="store_true",
                        help="Include evaluation order and diagnostics in the output")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings, level=args.log_level)

    try:
        schema = load_schema(args.schema)
        answers = load_answers(args.answers)
    except SchemaLoadError as e:
        logger.error("load_failed", path=e.path, error=e.message)
        return 1

    result = ScoringEngine(schema, answers).compute()
    scores = _round_scores(result.scores, settings.SCORE_PRECISION)

    if args.diagnostics:
        output: Any = {
            "scores": scores,
            "order": result.order,
            "diagnostics": [d.to_dict() for d in result.diagnostics],
        }
    else:
        output = scores

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
