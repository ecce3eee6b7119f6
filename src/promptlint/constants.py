"""Shared constants — single source of truth for cross-module values.

Rule identifiers, thresholds and the keyword tables consulted by the
rules live here. StrEnum members are str-compatible, so JSON output and
CLI arguments work unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class RuleId(StrEnum):
    """Stable identifiers for every registered rule."""

    HEADING_FORMAT = "prompt-heading-format"
    SECTION_PLACEMENT = "prompt-section-placement"
    SYSTEM_INJECTION = "prompt-system-injection"
    TOKEN_BUDGET = "prompt-token-budget"
    MISSING_TERMINATION = "prompt-missing-termination"
    TEMPERATURE_RANGE = "prompt-temperature-range"


class OutputFormat(StrEnum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"


class ExitCode:
    """Process exit codes for the CLI."""

    CLEAN = 0
    FINDINGS = 1
    ERROR = 2


# ── Rule Thresholds ──────────────────────────────────────

DEFAULT_MAX_TOKENS = 4000
TEMPERATURE_THRESHOLD = 0.7

# Section placement needs at least this many lines to have a middle
SECTION_MIN_LINES = 7
SECTION_MIN_EDGE_LINES = 2

# ── Keyword Tables ───────────────────────────────────────

PROMPT_SCOPE_MARKER = "prompt"
SYSTEM_KEY = "system"
SYSTEM_DELIMITER = "SYSTEM"
PARAMETERS_KEY = "parameters"
TERMINATION_KEYS = frozenset({"stop", "max_tokens"})

CHAT_METHODS = frozenset({"chat"})
COMPLETION_METHODS = frozenset({"chat", "complete", "completion"})

DEFAULT_CLIENT_TYPES = ("OpenAI::Client",)

DEFAULT_CLIENT_NAME_HINTS = (
    "client",
    "openai_client",
    "ai_client",
    "llm_client",
    "chat_client",
    "api_client",
)

DEFAULT_PRECISION_KEYWORDS = (
    # Analysis and accuracy
    "accurate", "accuracy", "precise", "precision", "exact", "exactly",
    "analyze", "analysis", "calculate", "computation", "compute",
    "measure", "measurement", "count", "sum", "total",
    # Factual and data tasks
    "fact", "factual", "data", "information", "correct", "verify",
    "validate", "check", "review", "audit", "inspect",
    # Classification and categorization
    "classify", "classification", "categorize", "category",
    "sort", "organize", "structure", "parse", "extract",
    # Technical and code tasks
    "code", "programming", "syntax", "debug", "error", "fix",
    "technical", "documentation", "specification", "format",
)

# ── Token Estimation ────────────────────────────────────

DEFAULT_TOKENIZER_ENCODING = "cl100k_base"
CHARS_PER_TOKEN_ESTIMATE = 4


def estimate_tokens(text: str) -> int:
    """Rough token estimate using chars-per-token ratio."""
    return len(text) // CHARS_PER_TOKEN_ESTIMATE


# ── Misc ─────────────────────────────────────────────────

BINARY_DETECTION_BUFFER = 8192
