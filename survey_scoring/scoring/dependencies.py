"""
Dependency Extraction and Rule Ordering
survey_scoring/scoring/dependencies.py

extract_dependencies(rule, rule_names)
    Rule names a rule reads, from (a) `input`, (b) names in `formula`,
    (c) names in `condition`. Names come from the expression tokenizer, so
    matching is whole-word: a rule `sum` is never found inside `summary`.

order_rules(rules)
    Depth-first topological order over the rule mapping, visiting rules in
    schema order. Each rule carries an explicit VisitState. An edge into a
    rule that is still IN_PROGRESS closes a cycle; that edge is dropped and
    the walk continues, so a cyclic schema still yields every rule exactly
    once. Edges to names that are not rules are ignored.

find_cycles(rules)
    The edges dropped by order_rules, as (rule, dependency) pairs.
"""

import re
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

from survey_scoring.core.exceptions import ExpressionSyntaxError
from survey_scoring.models.survey import ScoringRule
from survey_scoring.scoring.expression import expression_identifiers


class VisitState(Enum):
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


def _referenced_names(expression: str, rule_names: List[str]) -> List[str]:
    try:
        identifiers = expression_identifiers(expression)
    except ExpressionSyntaxError:
        # Untokenizable text: fall back to a word-boundary scan
        return [
            name for name in rule_names
            if re.search(rf"(?<!\w){re.escape(name)}(?!\w)", expression)
        ]
    known = set(rule_names)
    return [name for name in identifiers if name in known]


def extract_dependencies(rule: ScoringRule, rule_names: Iterable[str]) -> List[str]:
    """
    Rule names referenced by `rule`, without duplicates, in source order.

    Args:
        rule: The rule to inspect.
        rule_names: All rule names defined in the schema.

    Returns:
        Subset of rule_names: input first, then formula names, then condition names.
    """
    names = list(rule_names)
    known = set(names)
    dependencies: List[str] = []

    def add(name: str) -> None:
        if name in known and name not in dependencies:
            dependencies.append(name)

    if rule.input:
        add(rule.input)
    if rule.formula:
        for name in _referenced_names(rule.formula, names):
            add(name)
    if rule.condition:
        for name in _referenced_names(rule.condition, names):
            add(name)
    return dependencies


def plan_evaluation(rules: Mapping[str, ScoringRule]) -> Tuple[List[str], List[Tuple[str, str]]]:
    """Iterative DFS returning (evaluation order, dropped back-edges) in one walk."""
    names = list(rules)
    state: Dict[str, VisitState] = {name: VisitState.UNVISITED for name in names}
    order: List[str] = []
    back_edges: List[Tuple[str, str]] = []

    for root in names:
        if state[root] is not VisitState.UNVISITED:
            continue
        state[root] = VisitState.IN_PROGRESS
        stack: List[Tuple[str, Iterator[str]]] = [
            (root, iter(extract_dependencies(rules[root], names)))
        ]
        while stack:
            current, pending = stack[-1]
            dependency = next(pending, None)
            if dependency is None:
                stack.pop()
                state[current] = VisitState.DONE
                order.append(current)
                continue
            dep_state = state[dependency]
            if dep_state is VisitState.IN_PROGRESS:
                back_edges.append((current, dependency))
            elif dep_state is VisitState.UNVISITED:
                state[dependency] = VisitState.IN_PROGRESS
                stack.append(
                    (dependency, iter(extract_dependencies(rules[dependency], names)))
                )
    return order, back_edges


def order_rules(rules: Mapping[str, ScoringRule]) -> List[str]:
    """Evaluation order: every rule after the rules it depends on, cycles broken."""
    order, _ = plan_evaluation(rules)
    return order


def find_cycles(rules: Mapping[str, ScoringRule]) -> List[Tuple[str, str]]:
    """(rule, dependency) edges that had to be dropped to break cycles."""
    _, back_edges = plan_evaluation(rules)
    return back_edges
