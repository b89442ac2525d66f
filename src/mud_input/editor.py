from __future__ import annotations

from typing import Callable, Iterable

from mud_input.completion import TabCompletion, split_last_word
from mud_input.history import CommandHistory


class LineEditor:
    """Input line that drives history replay and tab completion.

    Every edit other than tab() resets the completion cycle, and every edit
    other than history navigation resets the history cursor.
    """

    def __init__(
        self,
        history: CommandHistory | None = None,
        completion: TabCompletion | None = None,
        vocabulary: Callable[[], Iterable[str]] | None = None,
        words: Iterable[str] = (),
    ):
        self.history = history if history is not None else CommandHistory()
        self.completion = completion if completion is not None else TabCompletion()
        self._vocabulary = vocabulary
        self.words = list(words)
        self._text = ""
        self._draft: str | None = None  # buffer before history browsing started

    @property
    def text(self) -> str:
        return self._text

    def vocabulary(self) -> list[str]:
        """Snapshot of the words available for completion right now."""
        words = list(self._vocabulary()) if self._vocabulary else []
        return words + self.words

    def _edited(self):
        self.history.reset()
        self.completion.reset()
        self._draft = None

    # --- Editing ---

    def insert(self, text: str):
        self._text += text
        self._edited()

    def backspace(self):
        if self._text:
            self._text = self._text[:-1]
        self._edited()

    def set_text(self, text: str):
        self._text = text
        self._edited()

    def clear(self) -> str:
        """Clear the buffer and return the previous content."""
        text = self._text
        self._text = ""
        self._edited()
        return text

    def submit(self) -> str:
        """Return the line and record it in history unless blank."""
        line = self.clear()
        if line.strip():
            self.history.add(line)
        return line

    # --- History ---

    def history_up(self) -> str:
        entry = self.history.previous()
        if entry is None:
            return self._text
        if self._draft is None:
            self._draft = self._text
        self._text = entry
        self.completion.reset()
        return self._text

    def history_down(self) -> str:
        if self._draft is None:
            self.history.reset()
            return self._text
        entry = self.history.next()
        if entry is None:
            # Walked off the newest entry: restore what was being typed
            entry, self._draft = self._draft, None
        self._text = entry
        self.completion.reset()
        return self._text

    # --- Completion ---

    def tab(self) -> str:
        self._text = self.completion.complete(self._text, self.vocabulary())
        self.history.reset()
        self._draft = None
        return self._text

    def suggestions(self) -> list[str]:
        """Ghost-text candidates for the word being typed."""
        _, partial = split_last_word(self._text)
        return self.completion.get_completions(partial, self.vocabulary())
