from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from .issues import Issue
from .mapping import SENTENCE_TERMINALS, group_insertions_by_boundary, resolve_issues
from .models import (
    Insertion,
    TerminalGroup,
    Token,
    TokenKind,
    TokenModel,
    TokenType,
    TokState,
)
from .rules import policy_for

LOGGER = logging.getLogger(__name__)

_STATE_RANK = {TokState.OK: 0, TokState.MAYBE: 1, TokState.BAD: 2}


def classify_kind(token: Token) -> TokenKind:
    """Map a token onto the UI kind used by the scoring layer."""
    if token.type is TokenType.BOUNDARY:
        return TokenKind.CARET
    if token.type is TokenType.WORD:
        return TokenKind.WORD
    if token.raw in SENTENCE_TERMINALS:
        return TokenKind.DOT
    if token.raw == "\n":
        return TokenKind.NEWLINE
    return TokenKind.PUNCT


def build_token_models(tokens: Sequence[Token]) -> List[TokenModel]:
    return [
        TokenModel(id=f"token-{index}", kind=classify_kind(token), text=token.raw)
        for index, token in enumerate(tokens)
    ]


def build_terminal_groups(
    token_models: Sequence[TokenModel],
    tokens: Sequence[Token],
    insertions: Iterable[Insertion] = (),
) -> List[TerminalGroup]:
    """
    Emit one group per pair of consecutive carets separated by at most one
    punctuation slot.

    State policy: terminal punctuation in the slot is ``ok`` unless an
    insertion is still owned by the right caret, which contradicts it
    (``bad``). An empty slot with a pending insertion is ``maybe``, an empty
    slot without one is ``ok``. Non-terminal punctuation is ``bad`` when an
    insertion is pending and ``maybe`` otherwise.
    """
    owned = group_insertions_by_boundary(insertions)
    carets = [i for i, model in enumerate(token_models) if model.kind is TokenKind.CARET]
    groups: List[TerminalGroup] = []

    for left, right in zip(carets, carets[1:]):
        gap = right - left - 1
        if gap == 0:
            dot_idx = None
        elif gap == 1 and token_models[left + 1].kind in (TokenKind.DOT, TokenKind.PUNCT):
            dot_idx = left + 1
        else:
            continue

        pending = tokens[right].idx in owned
        if dot_idx is None:
            state = TokState.MAYBE if pending else TokState.OK
        elif token_models[dot_idx].kind is TokenKind.DOT:
            state = TokState.BAD if pending else TokState.OK
        else:
            state = TokState.BAD if pending else TokState.MAYBE

        groups.append(
            TerminalGroup(
                id=f"tg-{right}",
                state=state,
                left_idx=left,
                dot_idx=dot_idx,
                right_idx=right,
            )
        )

    return groups


def bootstrap(
    text: str,
    tokens: Sequence[Token],
    issues: Iterable[Issue],
    *,
    terminal_text: str = ".",
    disabled_rules: Iterable[str] = (),
    extra_insertions: Iterable[Insertion] = (),
) -> Tuple[List[TokenModel], List[TerminalGroup]]:
    """Build token models and terminal groups with their initial states."""
    token_models = build_token_models(tokens)
    resolutions = resolve_issues(
        text,
        tokens,
        issues,
        terminal_text=terminal_text,
        disabled_rules=disabled_rules,
    )

    insertions: List[Insertion] = []
    for resolution in resolutions:
        if resolution.insertion is not None:
            insertions.append(resolution.insertion)
        policy = policy_for(resolution.issue.rule)
        state = policy.severity.as_state() if policy is not None else None
        if state is None:
            continue
        for target in resolution.targets:
            model = token_models[target]
            if _STATE_RANK[state] > _STATE_RANK[model.state]:
                model.state = state
    insertions.extend(extra_insertions)

    terminal_groups = build_terminal_groups(token_models, tokens, insertions)
    LOGGER.debug(
        "Bootstrapped %d token models and %d terminal groups",
        len(token_models),
        len(terminal_groups),
    )
    return token_models, terminal_groups

