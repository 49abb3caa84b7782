"""
Map grammar-checker issues onto boundary-owned insertions.

Three coordinate systems meet here: character offsets in the original text,
positions in the token sequence, and offsets reported by the external rule
engine. Every insertion is owned by exactly one BOUNDARY token: the last
boundary in the run that directly follows the token the insertion is
appended to.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .issues import Issue
from .models import Insertion, Token, TokenType
from .rules import ResolutionKind, policy_for

LOGGER = logging.getLogger(__name__)

SENTENCE_TERMINALS = frozenset({".", "!", "?"})


@dataclass(frozen=True, slots=True)
class IssueResolution:
    """
    Outcome of resolving one issue against a token sequence.

    ``targets`` are the token positions whose state the issue's severity
    applies to; they are only set when the issue actually took effect.
    """

    issue: Issue
    insertion: Insertion | None = None
    targets: tuple[int, ...] = ()


def resolve_issues(
    text: str,
    tokens: Sequence[Token],
    issues: Iterable[Issue],
    *,
    terminal_text: str = ".",
    disabled_rules: Iterable[str] = (),
) -> List[IssueResolution]:
    """Resolve every issue in input order; dropped issues resolve to nothing."""
    index = _TokenIndex(tokens)
    disabled = frozenset(disabled_rules)
    owned: set[int] = set()
    resolutions: List[IssueResolution] = []

    for issue in issues:
        resolution = _resolve_one(
            text, index, issue, owned, terminal_text=terminal_text, disabled=disabled
        )
        if resolution.insertion is not None:
            owned.add(resolution.insertion.before_b_index)
        resolutions.append(resolution)

    return resolutions


def map_issues_to_insertions(
    text: str,
    tokens: Sequence[Token],
    issues: Iterable[Issue],
    *,
    terminal_text: str = ".",
    disabled_rules: Iterable[str] = (),
) -> List[Insertion]:
    """Return insertions ordered by ``at``; ties keep input issue order."""
    resolutions = resolve_issues(
        text,
        tokens,
        issues,
        terminal_text=terminal_text,
        disabled_rules=disabled_rules,
    )
    insertions = [r.insertion for r in resolutions if r.insertion is not None]
    return sorted(insertions, key=lambda insertion: insertion.at)


def group_insertions_by_boundary(
    insertions: Iterable[Insertion] | None,
) -> Dict[int, List[Insertion]]:
    """Group insertions by owning boundary index, preserving input order."""
    grouped: Dict[int, List[Insertion]] = {}
    for insertion in insertions or ():
        grouped.setdefault(insertion.before_b_index, []).append(insertion)
    return grouped


def apply_insertions(text: str, insertions: Iterable[Insertion]) -> str:
    """Return text with every insertion spliced in at its original offset."""
    ordered = sorted(
        (ins for ins in insertions if 0 <= ins.at <= len(text)),
        key=lambda ins: ins.at,
    )
    pieces: List[str] = []
    cursor = 0
    for insertion in ordered:
        pieces.append(text[cursor : insertion.at])
        pieces.append(insertion.text)
        cursor = insertion.at
    pieces.append(text[cursor:])
    return "".join(pieces)


def gap_owner(tokens: Sequence[Token], left_pos: int) -> int | None:
    """
    Position of the boundary owning the gap after ``tokens[left_pos]``.

    The gap is the run of BOUNDARY tokens directly following ``left_pos``;
    its owner is the last boundary of that run, i.e. the one immediately
    preceding the next word or punctuation token.
    """
    owner: int | None = None
    pos = left_pos + 1
    while pos < len(tokens) and tokens[pos].type is TokenType.BOUNDARY:
        owner = pos
        pos += 1
    return owner


def previous_content(tokens: Sequence[Token], pos: int) -> int | None:
    """Nearest non-boundary token strictly before ``pos``."""
    for k in range(pos - 1, -1, -1):
        if tokens[k].type is not TokenType.BOUNDARY:
            return k
    return None


class _TokenIndex:
    """Offset lookups over a token sequence ordered by ``start``."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = tokens
        self._starts = [token.start for token in tokens]

    def starting_at(self, offset: int) -> int | None:
        pos = bisect_left(self._starts, offset)
        if pos < len(self.tokens) and self.tokens[pos].start == offset:
            return pos
        return None

    def first_at_or_after(self, offset: int) -> int:
        return bisect_left(self._starts, offset)

    def containing(self, offset: int) -> int | None:
        pos = bisect_right(self._starts, offset) - 1
        if pos >= 0 and self.tokens[pos].start <= offset < self.tokens[pos].end:
            return pos
        return None


def _resolve_one(
    text: str,
    index: _TokenIndex,
    issue: Issue,
    owned: set[int],
    *,
    terminal_text: str,
    disabled: frozenset[str],
) -> IssueResolution:
    policy = policy_for(issue.rule, disabled)
    if policy is None:
        return _drop(issue, "unrecognized or disabled rule")
    if not 0 <= issue.offset < len(text):
        return _drop(issue, "offset out of range")

    tokens = index.tokens
    if policy.kind is ResolutionKind.WORD_ONLY:
        pos = index.containing(issue.offset)
        if pos is None or tokens[pos].type is not TokenType.WORD:
            return _drop(issue, "offset not on a word")
        return IssueResolution(issue=issue, targets=(pos,))

    if policy.kind is ResolutionKind.WORD_SPAN:
        span_end = issue.offset + max(issue.length, 1)
        words: List[int] = []
        for pos in range(index.first_at_or_after(issue.offset), len(tokens)):
            if tokens[pos].end > span_end:
                break
            if tokens[pos].type is TokenType.WORD:
                words.append(pos)
        if not words:
            return _drop(issue, "no word inside the span")
        return IssueResolution(issue=issue, targets=tuple(words))

    if policy.kind is ResolutionKind.SENTENCE_START:
        pos = index.starting_at(issue.offset)
        if pos is None or tokens[pos].type is not TokenType.WORD:
            return _drop(issue, "offset not aligned to a word start")
        anchor = previous_content(tokens, pos)
        target = pos
    else:
        pos = index.containing(issue.offset)
        if pos is None:
            return _drop(issue, "offset not inside a token")
        anchor = pos if not tokens[pos].is_boundary else previous_content(tokens, pos)
        target = anchor

    if anchor is None:
        return _drop(issue, "no token before the flagged location")
    if tokens[anchor].raw in SENTENCE_TERMINALS:
        return _drop(issue, "already terminated")

    owner = gap_owner(tokens, anchor)
    if owner is None:
        return _drop(issue, "no owning boundary")
    before_b_index = tokens[owner].idx
    if before_b_index in owned:
        return _drop(issue, f"boundary {before_b_index} already owned")

    targets = (target,) if tokens[target].type is TokenType.WORD else ()
    insertion = Insertion(
        at=tokens[anchor].end,
        text=issue.terminal or terminal_text,
        before_b_index=before_b_index,
        rule=issue.id,
        message=issue.message or policy.message,
    )
    return IssueResolution(issue=issue, insertion=insertion, targets=targets)


def _drop(issue: Issue, reason: str) -> IssueResolution:
    LOGGER.debug("Dropping issue %s at offset %s: %s", issue.id, issue.offset, reason)
    return IssueResolution(issue=issue)
