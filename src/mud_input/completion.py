from __future__ import annotations

import re
from typing import Iterable

from mud_input.types import InputState

_LAST_WORD_RE = re.compile(r"(.*\s)?(\S*)\Z", re.DOTALL)

DEFAULT_MIN_PREVIEW_LENGTH = 2
DEFAULT_MAX_PREVIEW = 10


def split_last_word(text: str) -> tuple[str, str]:
    """Split text into (everything through the last whitespace, last word)."""
    m = _LAST_WORD_RE.match(text)
    return m.group(1) or "", m.group(2)


def _rank_key(word: str) -> tuple[int, str, str]:
    return (len(word), word.lower(), word)


def find_matches(partial: str, vocabulary: Iterable[str]) -> list[str]:
    """Words starting with `partial` (case insensitive), shortest first.

    A word equal to `partial` is already complete and is left out.
    """
    lp = partial.lower()
    matches = {w for w in vocabulary if w.lower().startswith(lp) and w.lower() != lp}
    return sorted(matches, key=_rank_key)


class TabCompletion:
    """Completes the last word of the input line.

    Calling complete() again with the string it just returned cycles to the
    next candidate. Any other edit must be followed by reset().
    """

    def __init__(
        self,
        min_preview_length: int = DEFAULT_MIN_PREVIEW_LENGTH,
        max_preview: int = DEFAULT_MAX_PREVIEW,
    ):
        self.min_preview_length = min_preview_length
        self.max_preview = max_preview
        self._last_output = ""
        self._prefix = ""  # text before the word being cycled
        self._matches: list[str] = []
        self._index = 0

    @property
    def state(self) -> InputState:
        return InputState.CYCLING if self._matches else InputState.IDLE

    @property
    def candidates(self) -> list[str]:
        return list(self._matches)

    def complete(self, text: str, vocabulary: Iterable[str]) -> str:
        """Return `text` with its last word completed, or unchanged."""
        prefix, partial = split_last_word(text)
        if not partial:
            return text

        if self._matches and text == self._last_output:
            self._index = (self._index + 1) % len(self._matches)
            self._last_output = self._prefix + self._matches[self._index]
            return self._last_output

        matches = find_matches(partial, vocabulary)
        if not matches:
            self.reset()
            return text

        self._matches = matches
        self._index = 0
        self._prefix = prefix
        self._last_output = prefix + matches[0]
        return self._last_output

    def reset(self):
        """Forget the cached candidates."""
        self._last_output = ""
        self._prefix = ""
        self._matches = []
        self._index = 0

    def get_completions(self, prefix: str, vocabulary: Iterable[str]) -> list[str]:
        """Preview candidates for `prefix` (ghost text). Does not affect cycling."""
        if len(prefix) < self.min_preview_length:
            return []
        return find_matches(prefix, vocabulary)[: self.max_preview]
