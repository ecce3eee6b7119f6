"""Single-pass rule dispatch over parsed source units."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from promptlint.analysis.rules import ALL_RULES, Rule, RuleContext, select_rules
from promptlint.analysis.schemas import AnalysisReport, FileReport, Finding
from promptlint.analysis.syntax import NodeKind, SyntaxTree
from promptlint.analysis.tokens import TokenCounter
from promptlint.config import RuleConfig, Settings, resolve_rule_config
from promptlint.errors import SourceReadError, SourceSyntaxError
from promptlint.ingestion.discovery import discover_sources

logger = logging.getLogger(__name__)


def analyze_tree(
    tree: SyntaxTree,
    config: RuleConfig,
    *,
    rules: Iterable[Rule] = ALL_RULES,
    token_counter: TokenCounter | None = None,
) -> list[Finding]:
    """Visit every node once, top-down, and run the rules it triggers.

    Rules are independent, so findings are ordered by node position and
    then by rule registration order.
    """
    counter = token_counter if token_counter is not None else TokenCounter()
    dispatch: dict[NodeKind, list[Rule]] = defaultdict(list)
    for rule in rules:
        for kind in rule.triggers:
            dispatch[kind].append(rule)

    findings: list[Finding] = []
    for node in tree.walk():
        triggered = dispatch.get(node.kind)
        if not triggered:
            continue
        ctx = RuleContext(node=node, config=config, tokens=counter)
        for rule in triggered:
            finding = rule.check(ctx)
            if finding is not None:
                logger.debug("%s", finding.diagnostic)
                findings.append(finding)
    return findings


def analyze_source(
    source: str | bytes,
    *,
    path: Path | None = None,
    config: RuleConfig | None = None,
    rules: Iterable[Rule] = ALL_RULES,
    token_counter: TokenCounter | None = None,
) -> list[Finding]:
    """Parse and analyze one source unit.

    Raises :class:`SourceSyntaxError` if the unit does not parse cleanly
    and :class:`GrammarUnavailableError` if no Ruby grammar is installed.
    """
    tree = SyntaxTree.parse(source, path)
    if tree.has_errors:
        raise SourceSyntaxError(path, tree.first_error_line() or 1)
    return analyze_tree(
        tree,
        config if config is not None else RuleConfig(),
        rules=rules,
        token_counter=token_counter,
    )


def analyze_file(
    path: Path,
    config: RuleConfig,
    *,
    rules: Iterable[Rule] = ALL_RULES,
    token_counter: TokenCounter | None = None,
) -> FileReport:
    """Analyze one file; read and syntax failures become a failed report."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        error = SourceReadError(path, exc.strerror or str(exc))
        logger.warning("%s", error)
        return FileReport(path=str(path), error=str(error))

    try:
        findings = analyze_source(
            data,
            path=path,
            config=config,
            rules=rules,
            token_counter=token_counter,
        )
    except SourceSyntaxError as exc:
        logger.warning("%s", exc)
        return FileReport(path=str(path), error=str(exc))

    return FileReport(path=str(path), findings=findings)


def analyze_paths(
    paths: Iterable[Path],
    settings: Settings | None = None,
    *,
    options: Mapping[str, Any] | None = None,
    rules: Iterable[Rule] | None = None,
    token_counter: TokenCounter | None = None,
) -> AnalysisReport:
    """Discover Ruby sources under ``paths`` and analyze each one.

    Configuration is resolved once before the first file; units are
    independent and analyzed in discovery order.
    """
    cfg = settings if settings is not None else Settings()
    config = resolve_rule_config(options, cfg)
    selected = (
        tuple(rules)
        if rules is not None
        else select_rules(exclude=cfg.disabled_rules)
    )
    counter = (
        token_counter
        if token_counter is not None
        else TokenCounter(cfg.tokenizer_encoding)
    )

    sources = discover_sources(paths, cfg)
    logger.info(
        "Analyzing %d file(s) with %d rule(s)", len(sources), len(selected)
    )
    return AnalysisReport(
        files=[
            analyze_file(
                source, config, rules=selected, token_counter=counter
            )
            for source in sources
        ]
    )
