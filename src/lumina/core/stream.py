"""Accumulates streamed AI answer fragments into a transcript."""

from __future__ import annotations

import re

_BLANK_RUN = re.compile(r"\n{3,}")
_CHAR_RUN = re.compile(r"(.)\1{10,}", re.DOTALL)


def normalize_fragment(fragment: str) -> str:
    return fragment.replace("\r", "")


def trim_transcript(text: str) -> str:
    """Render-time cleanup for degenerate model output.

    Collapses runs of 3+ newlines to a blank line and any character
    repeated more than 10 times to a single occurrence.
    """
    text = normalize_fragment(text)
    text = _BLANK_RUN.sub("\n\n", text)
    text = _CHAR_RUN.sub(r"\1", text)
    return text.strip()


class StreamBuffer:
    """Ordered fragments of one AI answer plus their concatenation."""

    def __init__(self) -> None:
        self._fragments: list[str] = []
        self._transcript = ""
        self._complete = False

    @property
    def fragments(self) -> tuple[str, ...]:
        return tuple(self._fragments)

    @property
    def transcript(self) -> str:
        return self._transcript

    @property
    def is_complete(self) -> bool:
        return self._complete

    def append(self, fragment: str) -> bool:
        """Append a fragment; returns False when it was discarded.

        A fragment that is already a suffix of the transcript is a repeat of
        the previous tail and is dropped.
        """
        if self._complete:
            return False
        cleaned = normalize_fragment(fragment)
        if not cleaned or self._transcript.endswith(cleaned):
            return False
        self._fragments.append(cleaned)
        self._transcript += cleaned
        return True

    def complete(self) -> None:
        self._complete = True

    def reset(self) -> None:
        self._fragments.clear()
        self._transcript = ""
        self._complete = False

    def rendered(self) -> str:
        return trim_transcript(self._transcript)
