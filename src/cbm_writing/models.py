from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TokenType(str, Enum):
    WORD = "WORD"
    PUNCT = "PUNCT"
    BOUNDARY = "BOUNDARY"


class TokenKind(str, Enum):
    WORD = "word"
    PUNCT = "punct"
    CARET = "caret"
    DOT = "dot"
    NEWLINE = "newline"


class TokState(str, Enum):
    """Scoring state shared by token models and terminal groups."""

    OK = "ok"
    MAYBE = "maybe"
    BAD = "bad"


@dataclass(frozen=True, slots=True)
class Token:
    """A token and its inclusive-exclusive character offsets."""

    idx: int
    raw: str
    start: int
    end: int
    type: TokenType

    @property
    def is_boundary(self) -> bool:
        return self.type is TokenType.BOUNDARY

    def to_dict(self) -> dict[str, Any]:
        return {
            "idx": self.idx,
            "raw": self.raw,
            "start": self.start,
            "end": self.end,
            "type": self.type.value,
        }


@dataclass(frozen=True, slots=True)
class Insertion:
    """Text to splice into the original document, owned by one boundary token."""

    at: int
    text: str
    before_b_index: int
    rule: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "at": self.at,
            "text": self.text,
            "beforeBIndex": self.before_b_index,
            "rule": self.rule,
            "message": self.message,
        }


@dataclass(slots=True)
class TokenModel:
    """Per-token unit consumed by the scoring UI."""

    id: str
    kind: TokenKind
    text: str
    state: TokState = TokState.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "text": self.text,
            "state": self.state.value,
        }


@dataclass(slots=True)
class TerminalGroup:
    """
    One sentence-end decision: two caret token models and the punctuation
    slot between them. ``dot_idx`` is None when no punctuation token sits
    between the carets.
    """

    id: str
    state: TokState
    left_idx: int
    dot_idx: int | None
    right_idx: int
    selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.value,
            "leftIdx": self.left_idx,
            "dotIdx": self.dot_idx,
            "rightIdx": self.right_idx,
            "selected": self.selected,
        }


@dataclass(slots=True)
class Document:
    """Represents an input document."""

    doc_id: str
    text: str


@dataclass(slots=True)
class DocumentResult:
    """Everything the rendering layer needs for one document."""

    doc_id: str
    tokens: list[Token]
    insertions: list[Insertion]
    token_models: list[TokenModel]
    terminal_groups: list[TerminalGroup] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "tokens": [token.to_dict() for token in self.tokens],
            "insertions": [insertion.to_dict() for insertion in self.insertions],
            "tokenModels": [model.to_dict() for model in self.token_models],
            "terminalGroups": [group.to_dict() for group in self.terminal_groups],
        }
