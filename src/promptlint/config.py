"""Environment-based configuration and per-run rule configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, NoDecode

from promptlint.constants import (
    DEFAULT_CLIENT_NAME_HINTS,
    DEFAULT_CLIENT_TYPES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_PRECISION_KEYWORDS,
    DEFAULT_TOKENIZER_ENCODING,
    SYSTEM_DELIMITER,
    TEMPERATURE_THRESHOLD,
)

logger = logging.getLogger(__name__)

# Host option name recognized by resolve_rule_config()
MAX_TOKENS_OPTION = "MaxTokens"


class Settings(BaseSettings):
    """Reads from .env file and PROMPTLINT_* environment variables."""

    # Rules
    max_tokens: int = DEFAULT_MAX_TOKENS
    disabled_rules: Annotated[list[str], NoDecode] = []

    # Keyword tables
    client_types: Annotated[list[str], NoDecode] = list(DEFAULT_CLIENT_TYPES)
    client_name_hints: Annotated[list[str], NoDecode] = list(
        DEFAULT_CLIENT_NAME_HINTS
    )
    precision_keywords: Annotated[list[str], NoDecode] = list(
        DEFAULT_PRECISION_KEYWORDS
    )

    # Tokenizer
    tokenizer_encoding: str = DEFAULT_TOKENIZER_ENCODING

    # Logging
    log_level: str = "WARNING"

    # Discovery
    skip_directories: Annotated[list[str], NoDecode] = [
        "vendor",
        "node_modules",
        "tmp",
        "log",
        "coverage",
        "pkg",
        ".bundle",
        ".git",
    ]

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _coerce_max_tokens(cls, v: Any) -> Any:
        """Fall back to the default instead of failing on bad input."""
        parsed = parse_positive_int(v)
        if parsed is None:
            logger.warning(
                "Invalid max_tokens %r, using default %d",
                v,
                DEFAULT_MAX_TOKENS,
            )
            return DEFAULT_MAX_TOKENS
        return parsed

    @field_validator(
        "disabled_rules",
        "client_types",
        "client_name_hints",
        "precision_keywords",
        "skip_directories",
        mode="before",
    )
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "PROMPTLINT_",
        "extra": "ignore",
    }


class RuleConfig(BaseModel):
    """Read-only rule configuration, resolved once per analysis run."""

    model_config = ConfigDict(frozen=True)

    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature_threshold: float = TEMPERATURE_THRESHOLD
    system_delimiter: str = SYSTEM_DELIMITER
    client_types: tuple[str, ...] = DEFAULT_CLIENT_TYPES
    client_name_hints: tuple[str, ...] = DEFAULT_CLIENT_NAME_HINTS
    precision_keywords: tuple[str, ...] = DEFAULT_PRECISION_KEYWORDS

    @property
    def client_type_paths(self) -> tuple[tuple[str, ...], ...]:
        """Client types split into constant segments (``OpenAI::Client``)."""
        return tuple(
            tuple(seg for seg in name.split("::") if seg)
            for name in self.client_types
        )


def parse_positive_int(value: Any) -> int | None:
    """Return ``value`` as a positive int, or None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value.strip().replace("_", ""))
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None


def resolve_rule_config(
    options: Mapping[str, Any] | None = None,
    settings: Settings | None = None,
) -> RuleConfig:
    """Build the :class:`RuleConfig` for one analysis run.

    ``settings`` supplies the baseline. ``options`` is a host option
    mapping in which only ``MaxTokens`` is recognized; malformed values
    keep the baseline and unknown keys are ignored.
    """
    cfg = settings if settings is not None else Settings()
    max_tokens = cfg.max_tokens

    for key, value in (options or {}).items():
        if key != MAX_TOKENS_OPTION:
            logger.debug("Ignoring unrecognized option %r", key)
            continue
        parsed = parse_positive_int(value)
        if parsed is None:
            logger.warning(
                "Invalid %s %r, using %d", key, value, max_tokens
            )
            continue
        max_tokens = parsed

    return RuleConfig(
        max_tokens=max_tokens,
        client_types=tuple(cfg.client_types),
        client_name_hints=tuple(h.lower() for h in cfg.client_name_hints),
        precision_keywords=tuple(
            k.lower() for k in cfg.precision_keywords
        ),
    )


# File extension / file name → language name mapping
EXTENSION_MAP: dict[str, str] = {
    ".rb": "ruby",
    ".rake": "ruby",
    ".gemspec": "ruby",
    ".ru": "ruby",
}

FILENAME_MAP: dict[str, str] = {
    "Gemfile": "ruby",
    "Rakefile": "ruby",
}

# Grammar module name → import path for tree-sitter grammars
GRAMMAR_MODULES: dict[str, str] = {
    "ruby": "tree_sitter_ruby",
}
