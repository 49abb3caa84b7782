"""
Closed vocabulary of grammar-checker rule identifiers the mapper acts on.

Anything outside ``KnownRule`` parses to ``UnrecognizedRule`` and is ignored
by both the mapper and the bootstrapper.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .models import TokState


class KnownRule(str, Enum):
    UPPERCASE_SENTENCE_START = "UPPERCASE_SENTENCE_START"
    MISSING_SENTENCE_TERMINATOR = "MISSING_SENTENCE_TERMINATOR"
    PUNCTUATION_PARAGRAPH_END = "PUNCTUATION_PARAGRAPH_END"
    MORFOLOGIK_RULE_EN_US = "MORFOLOGIK_RULE_EN_US"
    # GrammarBot edit categories
    GB_PUNC = "GB_PUNC"
    GB_SPELL = "GB_SPELL"
    GB_GRMR = "GB_GRMR"


@dataclass(frozen=True, slots=True)
class UnrecognizedRule:
    """Catch-all for rule ids with no resolution rule."""

    raw_id: str


Rule = Union[KnownRule, UnrecognizedRule]


class ResolutionKind(str, Enum):
    SENTENCE_START = "sentence_start"
    SENTENCE_END = "sentence_end"
    WORD_ONLY = "word_only"
    WORD_SPAN = "word_span"


class Severity(str, Enum):
    NONE = "none"
    MAYBE = "maybe"
    BAD = "bad"

    def as_state(self) -> TokState | None:
        if self is Severity.MAYBE:
            return TokState.MAYBE
        if self is Severity.BAD:
            return TokState.BAD
        return None


@dataclass(frozen=True, slots=True)
class RulePolicy:
    kind: ResolutionKind
    severity: Severity
    message: str


RULE_POLICIES: dict[KnownRule, RulePolicy] = {
    KnownRule.UPPERCASE_SENTENCE_START: RulePolicy(
        ResolutionKind.SENTENCE_START,
        Severity.MAYBE,
        "Sentence starts without terminal punctuation before it.",
    ),
    KnownRule.MISSING_SENTENCE_TERMINATOR: RulePolicy(
        ResolutionKind.SENTENCE_END,
        Severity.NONE,
        "Sentence is missing terminal punctuation.",
    ),
    KnownRule.PUNCTUATION_PARAGRAPH_END: RulePolicy(
        ResolutionKind.SENTENCE_END,
        Severity.NONE,
        "Paragraph is missing terminal punctuation.",
    ),
    KnownRule.MORFOLOGIK_RULE_EN_US: RulePolicy(
        ResolutionKind.WORD_ONLY,
        Severity.BAD,
        "Possible spelling mistake.",
    ),
    KnownRule.GB_PUNC: RulePolicy(
        ResolutionKind.SENTENCE_END,
        Severity.NONE,
        "Add terminal punctuation.",
    ),
    KnownRule.GB_SPELL: RulePolicy(
        ResolutionKind.WORD_SPAN,
        Severity.BAD,
        "Possible spelling mistake.",
    ),
    KnownRule.GB_GRMR: RulePolicy(
        ResolutionKind.WORD_ONLY,
        Severity.MAYBE,
        "Possible grammar problem.",
    ),
}


def parse_rule(raw_id: object) -> Rule:
    """Map any rule identifier onto the closed vocabulary."""
    value = "" if raw_id is None else str(raw_id).strip()
    try:
        return KnownRule(value)
    except ValueError:
        return UnrecognizedRule(value)


def policy_for(rule: Rule, disabled: frozenset[str] = frozenset()) -> RulePolicy | None:
    """Return the policy for a recognized, enabled rule; None otherwise."""
    if isinstance(rule, UnrecognizedRule):
        return None
    if rule.value in disabled:
        return None
    return RULE_POLICIES[rule]


def rule_id(rule: Rule) -> str:
    if isinstance(rule, UnrecognizedRule):
        return rule.raw_id
    return rule.value
