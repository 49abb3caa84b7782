from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from .mapping import SENTENCE_TERMINALS, gap_owner
from .models import Insertion, Token, TokenType

LOGGER = logging.getLogger(__name__)

PARAGRAPH_FALLBACK_RULE = "PARAGRAPH_END_FALLBACK"


def paragraph_spans(text: str) -> List[Tuple[int, int]]:
    """Return (start, end) character spans of non-blank newline-separated paragraphs."""
    spans: List[Tuple[int, int]] = []
    offset = 0
    for line in text.split("\n"):
        end = offset + len(line)
        if line.strip():
            spans.append((offset, end))
        offset = end + 1
    return spans


def paragraph_end_insertions(
    text: str,
    tokens: Sequence[Token],
    existing: Iterable[Insertion] = (),
    *,
    terminal_text: str = ".",
) -> List[Insertion]:
    """
    Propose a terminal at the end of every paragraph but the last.

    A paragraph qualifies when its last word or punctuation token is not
    already sentence-final and the boundary owning the gap after it sits in
    the same paragraph and is not owned by an ``existing`` insertion.
    """
    owned = {insertion.before_b_index for insertion in existing}
    spans = paragraph_spans(text)
    extras: List[Insertion] = []
    pos = 0

    for start, end in spans[:-1]:
        last_content: int | None = None
        while pos < len(tokens) and tokens[pos].end <= end:
            if tokens[pos].start >= start and tokens[pos].type is not TokenType.BOUNDARY:
                last_content = pos
            pos += 1
        if last_content is None:
            continue
        if tokens[last_content].raw in SENTENCE_TERMINALS:
            continue

        owner = gap_owner(tokens, last_content)
        if owner is None or tokens[owner].end > end:
            LOGGER.debug("No boundary closes the paragraph ending at offset %d", end)
            continue
        before_b_index = tokens[owner].idx
        if before_b_index in owned:
            continue

        extras.append(
            Insertion(
                at=tokens[last_content].end,
                text=terminal_text,
                before_b_index=before_b_index,
                rule=PARAGRAPH_FALLBACK_RULE,
                message="Paragraph ends without terminal punctuation.",
            )
        )
        owned.add(before_b_index)

    return extras
