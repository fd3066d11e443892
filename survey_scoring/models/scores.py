from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from survey_scoring.models.enumerations import DiagnosticKind

ScoreValue = Union[float, str, bool, None]
ScoreMap = Dict[str, ScoreValue]
RawAnswers = Mapping[str, Any]


@dataclass(frozen=True)
class ScoringDiagnostic:
    """A non-fatal problem noticed while scoring one rule."""
    rule: Optional[str]
    kind: DiagnosticKind
    message: str
    expression: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule,
            "kind": self.kind.value,
            "message": self.message,
            "expression": self.expression,
        }


@dataclass
class ScoringResult:
    """Output of ScoringEngine.compute()."""
    scores: ScoreMap                  # One entry per rule, in evaluation order
    order: List[str]                  # Evaluation order used
    diagnostics: List[ScoringDiagnostic] = field(default_factory=list)

    @property
    def failed_rules(self) -> List[str]:
        """Rules that scored to null."""
        return [name for name, value in self.scores.items() if value is None]
