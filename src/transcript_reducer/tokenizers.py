"""Token counting backends for transcript accounting."""

from __future__ import annotations

import unicodedata
from typing import Any, Protocol

from transcript_reducer.config import DEFAULT_ENCODING


class Tokenizer(Protocol):
    def count_tokens(
        self,
        text: str,
        consider_pre_tokenization: bool,
        consider_normalization: bool,
    ) -> int: ...


class TiktokenTokenizer:
    """Counts tokens with a tiktoken BPE encoding.

    The encoding is resolved on first use so constructing the tokenizer never
    touches the network-backed encoding cache.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING, encoding: Any | None = None) -> None:
        self._encoding_name = encoding_name
        self._encoding = encoding

    @property
    def encoding_name(self) -> str:
        return self._encoding_name

    def _resolve_encoding(self) -> Any:
        if self._encoding is None:
            import tiktoken

            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    def count_tokens(
        self,
        text: str,
        consider_pre_tokenization: bool,
        consider_normalization: bool,
    ) -> int:
        if not text:
            return 0

        normalized = unicodedata.normalize("NFKC", text) if consider_normalization else text
        encoding = self._resolve_encoding()
        if consider_pre_tokenization:
            # Special-token text such as "<|endoftext|>" counts as one token.
            return len(encoding.encode(normalized, allowed_special="all"))
        return len(encoding.encode_ordinary(normalized))
