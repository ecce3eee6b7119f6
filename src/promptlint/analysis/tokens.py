"""Token counting via tiktoken with a character-based fallback."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import tiktoken

from promptlint.constants import DEFAULT_TOKENIZER_ENCODING, estimate_tokens

logger = logging.getLogger(__name__)

type Encoder = Callable[[str], Sequence[int]]


@dataclass(frozen=True)
class TokenCount:
    value: int
    estimated: bool = False


class TokenCounter:
    """Counts tokens with a single fixed encoding.

    The encoding is loaded on first use. If loading or encoding fails the
    counter falls back to ``len(text) // 4`` and logs one warning; it
    never retries a failed load.
    """

    def __init__(
        self,
        encoding_name: str = DEFAULT_TOKENIZER_ENCODING,
        encoder: Encoder | None = None,
    ) -> None:
        self.encoding_name = encoding_name
        self._encoder = encoder
        self._load_failed = False
        self._warned = False

    def count(self, text: str) -> TokenCount:
        encoder = self._get_encoder()
        if encoder is None:
            return TokenCount(estimate_tokens(text), estimated=True)
        try:
            return TokenCount(len(encoder(text)))
        except Exception as exc:  # noqa: BLE001
            self._warn_fallback(exc)
            return TokenCount(estimate_tokens(text), estimated=True)

    def _get_encoder(self) -> Encoder | None:
        if self._encoder is not None:
            return self._encoder
        if self._load_failed:
            return None
        try:
            encoding = tiktoken.get_encoding(self.encoding_name)
        except Exception as exc:  # noqa: BLE001
            # Missing model data, unknown encoding, offline download
            self._load_failed = True
            self._warn_fallback(exc)
            return None

        def encode(text: str) -> Sequence[int]:
            return encoding.encode(text, disallowed_special=())

        self._encoder = encode
        return encode

    def _warn_fallback(self, exc: Exception) -> None:
        if self._warned:
            return
        self._warned = True
        logger.warning(
            "Failed to calculate tokens with %s: %s. "
            "Using character approximation.",
            self.encoding_name,
            exc,
        )
