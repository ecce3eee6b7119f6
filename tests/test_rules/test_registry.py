"""Tests for the rule registry."""

from __future__ import annotations

import pytest

from promptlint.analysis.rules import ALL_RULES, get_rule, select_rules
from promptlint.constants import RuleId


def test_every_rule_id_is_registered_once() -> None:
    ids = [rule.rule_id for rule in ALL_RULES]
    assert sorted(ids) == sorted(RuleId)


def test_select_all_by_default() -> None:
    assert select_rules() == ALL_RULES


def test_select_only() -> None:
    rules = select_rules(only=["prompt-token-budget"])
    assert [r.rule_id for r in rules] == [RuleId.TOKEN_BUDGET]


def test_select_exclude_keeps_order() -> None:
    rules = select_rules(exclude=[RuleId.HEADING_FORMAT, RuleId.TOKEN_BUDGET])
    assert [r.rule_id for r in rules] == [
        RuleId.SECTION_PLACEMENT,
        RuleId.SYSTEM_INJECTION,
        RuleId.MISSING_TERMINATION,
        RuleId.TEMPERATURE_RANGE,
    ]


def test_unknown_id_raises() -> None:
    with pytest.raises(ValueError, match="prompt-bogus"):
        select_rules(exclude=["prompt-bogus"])


def test_get_rule() -> None:
    assert get_rule("prompt-system-injection").rule_id is (
        RuleId.SYSTEM_INJECTION
    )
    with pytest.raises(KeyError):
        get_rule("nope")
