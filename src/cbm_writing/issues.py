from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .rules import KnownRule, Rule, UnrecognizedRule, parse_rule, rule_id

LOGGER = logging.getLogger(__name__)

TERMINAL_MARKS = (".", "!", "?")


class IssuePayloadError(ValueError):
    """Raised when a grammar-checker payload has an unusable top-level shape."""


@dataclass(frozen=True, slots=True)
class Issue:
    """
    A finding from an external grammar checker.

    ``terminal`` is the punctuation the checker itself proposed; when it is
    None the configured terminal text is inserted instead.
    """

    rule: Rule
    offset: int
    length: int = 0
    message: str = ""
    terminal: str | None = None

    @property
    def id(self) -> str:
        return rule_id(self.rule)


def make_issue(
    rule_id_value: str,
    offset: int,
    length: int = 0,
    message: str = "",
    terminal: str | None = None,
) -> Issue:
    """Build an Issue from a plain rule identifier."""
    return Issue(
        rule=parse_rule(rule_id_value),
        offset=offset,
        length=length,
        message=message,
        terminal=terminal,
    )


def issue_from_payload(data: Mapping[str, Any]) -> Issue:
    """
    Build an Issue from one match record.

    Servers disagree on field names, so the rule id is read from ``ruleId``,
    ``rule.id`` or ``id``; the offset from ``offset`` or ``fromPos``; the
    length from ``length`` or ``len``. Non-integer offsets become -1.
    """
    raw_rule = data.get("ruleId")
    if raw_rule is None:
        nested = data.get("rule")
        if isinstance(nested, Mapping):
            raw_rule = nested.get("id")
    if raw_rule is None:
        raw_rule = data.get("id")

    offset = _first_int(data, ("offset", "fromPos"), default=-1)
    length = _first_int(data, ("length", "len"), default=0)
    message = data.get("message", data.get("msg", ""))
    return Issue(
        rule=parse_rule(raw_rule),
        offset=offset,
        length=length,
        message=str(message or ""),
    )


def terminal_from_replacement(original: str, replacement: str) -> str | None:
    """
    Terminal mark a replacement adds, if any.

    Either the replacement is a bare mark (an insertion of ``.``) or it ends
    in a mark the original span did not end in (``Day`` -> ``Day.``).
    """
    if replacement in TERMINAL_MARKS:
        return replacement
    last = replacement[-1:]
    if last in TERMINAL_MARKS and not original.endswith(last):
        return last
    return None


def issue_from_edit(data: Mapping[str, Any], text: str = "") -> Issue:
    """
    Build an Issue from one GrammarBot edit record.

    Edits proposing a terminal mark become ``GB_PUNC`` whatever their
    category, anchored on the last non-whitespace character before the
    edit end. ``SPELL`` and ``GRMR`` edits keep their span; any other
    category is unrecognized.
    """
    start = _first_int(data, ("start",), default=-1)
    end = _first_int(data, ("end",), default=-1)
    category = str(data.get("err_cat") or "").strip().upper()
    message = str(data.get("err_desc") or "")
    if start < 0 or end < start:
        return Issue(
            rule=UnrecognizedRule(f"GB_{category or 'UNKNOWN'}_EDIT"),
            offset=-1,
            message=message,
        )

    original = text[start:end]
    terminal = terminal_from_replacement(original, str(data.get("replace") or ""))
    if terminal is not None:
        anchor = min(end, len(text)) - 1
        while anchor >= 0 and text[anchor].isspace():
            anchor -= 1
        return Issue(
            rule=KnownRule.GB_PUNC,
            offset=anchor,
            length=end - start,
            message=message or f"Add {terminal}",
            terminal=terminal,
        )

    if category == "SPELL":
        rule: Rule = KnownRule.GB_SPELL
    elif category == "GRMR":
        rule = KnownRule.GB_GRMR
    else:
        # PUNC edits that add no terminal (commas, quotes) land here too
        rule = UnrecognizedRule(f"GB_{category or 'UNKNOWN'}_EDIT")
    return Issue(rule=rule, offset=start, length=end - start, message=message)


def issues_from_payload(payload: object, text: str = "") -> list[Issue]:
    """
    Accept a list of records, a LanguageTool response with ``matches`` or a
    GrammarBot response with ``edits``.

    A record carrying ``replace`` is read as a GrammarBot edit, anything
    else as a LanguageTool match. ``text`` is the checked document; edits
    need it to tell which terminal mark a replacement adds.
    """
    if isinstance(payload, Mapping):
        records = payload.get("matches", payload.get("edits"))
        if not isinstance(records, list):
            raise IssuePayloadError(
                "Issue payload mapping must contain a 'matches' or 'edits' list."
            )
        payload = records
    if not isinstance(payload, list):
        raise IssuePayloadError(
            "Issue payload must be a list or a mapping with 'matches' or 'edits'."
        )

    issues: list[Issue] = []
    for position, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            LOGGER.debug("Skipping non-mapping issue entry at position %d", position)
            continue
        if "replace" in entry:
            issues.append(issue_from_edit(entry, text))
        else:
            issues.append(issue_from_payload(entry))
    return issues


def count_by_rule(issues: Iterable[Issue]) -> dict[str, int]:
    """Count issues per rule id; an empty id is reported as '(unknown)'."""
    counts = Counter(issue.id or "(unknown)" for issue in issues)
    return dict(counts)


def _first_int(data: Mapping[str, Any], keys: tuple[str, ...], default: int) -> int:
    for key in keys:
        value = data.get(key)
        # bool is an int subclass; a flag is never an offset
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return default
