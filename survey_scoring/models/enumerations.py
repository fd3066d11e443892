from enum import Enum

class QuestionType(str, Enum):
    LIKERT = "likert"      # Ordinal agreement / frequency scale
    NUMERIC = "numeric"    # Free numeric entry
    CHOICE = "choice"      # Single choice with valued options
    TEXT = "text"          # Free text, never scored

class RuleType(str, Enum):
    SUM = "sum"
    AVERAGE = "average"
    COMPUTED = "computed"    # Pure formula over other scores
    THRESHOLD = "threshold"  # Band an input score into labels
    FLAG = "flag"            # Boolean condition over other scores

class DiagnosticKind(str, Enum):
    EXPRESSION_ERROR = "expression_error"
    UNKNOWN_RULE_TYPE = "unknown_rule_type"
    RULE_FAILED = "rule_failed"
    DEPENDENCY_CYCLE = "dependency_cycle"
