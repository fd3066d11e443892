from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Tuple, Union

from survey_scoring.models.enumerations import QuestionType


class QuestionOption(BaseModel):
    """
    One selectable answer of a question.
    """

    model_config = ConfigDict(frozen=True)

    value: Union[float, str] = Field(
        ...,
        description="Stored value of the option (numeric for scored items)"
    )

    label: str = Field(
        default="",
        description="Text shown to the respondent"
    )


class Question(BaseModel):
    """
    A questionnaire item.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique question identifier, used as the answer key"
    )

    text: str = Field(
        default="",
        description="Question wording"
    )

    type: QuestionType = Field(
        default=QuestionType.LIKERT,
        description="Response type (likert, numeric, choice, text)"
    )

    options: Optional[List[QuestionOption]] = Field(
        default=None,
        description="Ordered answer options"
    )

    reverse_score: bool = Field(
        default=False,
        description="Mirror the answer within the option range before scoring"
    )

    dimension: Optional[str] = None
    subscale: Optional[str] = None
    timeframe: Optional[str] = None

    @property
    def option_range(self) -> Optional[Tuple[float, float]]:
        """(min, max) of the option values, or None unless every value is numeric."""
        if not self.options:
            return None
        values = []
        for option in self.options:
            if isinstance(option.value, bool):
                return None
            if isinstance(option.value, (int, float)):
                values.append(float(option.value))
                continue
            try:
                values.append(float(option.value.strip()))
            except ValueError:
                return None
        return min(values), max(values)


class ThresholdBand(BaseModel):
    """
    Closed interval [min, max] mapped to a categorical label.
    """

    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    label: str

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class ScoringRule(BaseModel):
    """
    A named computation over answers and/or other scores.

    `type` is kept as a free string: rule kinds the engine does not know
    still load and score to null.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(
        ...,
        description="Rule kind (sum, average, computed, threshold, flag)"
    )

    questions: Optional[List[str]] = Field(
        default=None,
        description="Question ids aggregated by sum/average rules"
    )

    input: Optional[str] = Field(
        default=None,
        description="Name of the score a threshold rule reads"
    )

    formula: Optional[str] = Field(
        default=None,
        description="Arithmetic expression over other score names"
    )

    condition: Optional[str] = Field(
        default=None,
        description="Boolean expression evaluated by flag rules"
    )

    thresholds: Optional[List[ThresholdBand]] = Field(
        default=None,
        description="Ordered bands; the first band containing the value wins"
    )

    message: Optional[str] = None
    description: Optional[str] = None

    def describe(self) -> str:
        """Short human-readable summary of what the rule computes."""
        if self.description:
            return self.description
        if self.type == "sum":
            return f"Sum of responses to {len(self.questions or [])} questions"
        if self.type == "average":
            return f"Average of responses to {len(self.questions or [])} questions"
        if self.type == "computed":
            return f"Computed from formula: {self.formula}"
        if self.type == "threshold":
            return f"Categorical score based on {self.input} value"
        if self.type == "flag":
            return f"Boolean flag based on condition: {self.condition}"
        return "Custom scoring rule"


class ScoreNorm(BaseModel):
    """Reference population statistics for one score."""

    model_config = ConfigDict(frozen=True)

    mean: Optional[float] = None
    sd: Optional[float] = Field(default=None, ge=0)
    sample_size: Optional[int] = Field(default=None, ge=0)
    reference: Optional[str] = None


class Reliability(BaseModel):
    model_config = ConfigDict(frozen=True)

    cronbach_alpha: Optional[float] = Field(default=None, le=1)
    test_retest: Optional[float] = Field(default=None, ge=-1, le=1)


class PsychometricProperties(BaseModel):
    model_config = ConfigDict(frozen=True)

    reliability: Optional[Reliability] = None
    validity: Optional[str] = None


class SchemaMetadata(BaseModel):
    """
    Descriptive information about a published instrument.
    Not read by the scoring engine.
    """

    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    license: Optional[str] = None
    validated: Optional[bool] = None
    population: Optional[str] = None
    administration_time: Optional[str] = None
    norms: Optional[Dict[str, ScoreNorm]] = None
    psychometric_properties: Optional[PsychometricProperties] = None


class SurveySchema(BaseModel):
    """
    Questions plus the ordered mapping of rule name -> ScoringRule.
    Frozen: a schema cannot change during a scoring pass.
    """

    model_config = ConfigDict(frozen=True)

    questions: List[Question] = Field(default_factory=list)

    scoring_rules: Dict[str, ScoringRule] = Field(default_factory=dict)

    metadata: Optional[SchemaMetadata] = None

    def get_question(self, question_id: str) -> Optional[Question]:
        """First question with the given id, or None."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def rule_names(self) -> List[str]:
        return list(self.scoring_rules)
