"""Rule registry — every check the engine can run."""

from __future__ import annotations

from collections.abc import Iterable

from promptlint.analysis.rules import (
    heading_format,
    missing_termination,
    section_placement,
    system_injection,
    temperature_range,
    token_budget,
)
from promptlint.analysis.rules.base import Rule, RuleContext
from promptlint.constants import RuleId

__all__ = ["ALL_RULES", "Rule", "RuleContext", "get_rule", "select_rules"]

ALL_RULES: tuple[Rule, ...] = (
    heading_format.RULE,
    section_placement.RULE,
    system_injection.RULE,
    token_budget.RULE,
    missing_termination.RULE,
    temperature_range.RULE,
)


def select_rules(
    only: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
) -> tuple[Rule, ...]:
    """Filter :data:`ALL_RULES` by id.

    Raises ValueError naming any id that is not registered.
    """
    only_ids = set(only) if only else None
    exclude_ids = set(exclude or ())
    known = {str(rule.rule_id) for rule in ALL_RULES}
    unknown = ((only_ids or set()) | exclude_ids) - known
    if unknown:
        raise ValueError(
            f"Unknown rule id(s): {', '.join(sorted(unknown))}"
        )
    return tuple(
        rule
        for rule in ALL_RULES
        if (only_ids is None or rule.rule_id in only_ids)
        and rule.rule_id not in exclude_ids
    )


def get_rule(rule_id: RuleId | str) -> Rule:
    for rule in ALL_RULES:
        if rule.rule_id == rule_id:
            return rule
    raise KeyError(rule_id)
