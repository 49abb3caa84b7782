from cbm_writing.issues import issues_from_payload, make_issue
from cbm_writing.mapping import (
    apply_insertions,
    group_insertions_by_boundary,
    map_issues_to_insertions,
    resolve_issues,
)
from cbm_writing.models import Insertion, TokenType
from cbm_writing.tokenization import tokenize


def _boundary_before(tokens, raw):
    for i, token in enumerate(tokens):
        if token.raw == raw:
            assert tokens[i - 1].type is TokenType.BOUNDARY
            return tokens[i - 1]
    raise AssertionError(f"{raw!r} not found")


def test_sentence_start_inserts_after_previous_word():
    """The dot goes after 'dark'; the caret before 'nobody' owns it."""
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    insertions = map_issues_to_insertions(text, tokens, issues)

    dark = next(t for t in tokens if t.raw == "dark")
    caret = _boundary_before(tokens, "nobody")
    assert len(insertions) == 1
    assert insertions[0].at == dark.end
    assert insertions[0].before_b_index == caret.idx
    assert insertions[0].text == "."
    assert insertions[0].rule == "UPPERCASE_SENTENCE_START"


def test_owner_is_boundary_immediately_before_flagged_word():
    text = "It was dark ^ ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert len(insertions) == 1
    assert insertions[0].before_b_index == _boundary_before(tokens, "nobody").idx
    assert insertions[0].at == text.index("dark") + len("dark")


def test_insertion_follows_trailing_punctuation():
    text = "It was dark, ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert insertions[0].at == text.index(",") + 1


def test_missing_boundary_drops_issue():
    text = "It was dark nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    assert map_issues_to_insertions(text, tokens, issues) == []


def test_already_terminated_sentence_is_skipped():
    text = "It was dark. ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    assert map_issues_to_insertions(text, tokens, issues) == []


def test_unrecognized_rule_is_ignored():
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("TOO_LONG_SENTENCE", text.index("nobody"))]

    assert map_issues_to_insertions(text, tokens, issues) == []


def test_malformed_offsets_are_dropped():
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    issues = [
        make_issue("UPPERCASE_SENTENCE_START", -1),
        make_issue("UPPERCASE_SENTENCE_START", len(text) + 10),
        make_issue("UPPERCASE_SENTENCE_START", text.index("nobody") + 2),
        make_issue("UPPERCASE_SENTENCE_START", text.index("^")),
        make_issue("UPPERCASE_SENTENCE_START", 0),
    ]

    assert map_issues_to_insertions(text, tokens, issues) == []


def test_duplicate_issues_keep_one_insertion_per_boundary():
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    offset = text.index("nobody")
    issues = [
        make_issue("UPPERCASE_SENTENCE_START", offset),
        make_issue("MISSING_SENTENCE_TERMINATOR", text.index("dark")),
    ]

    resolutions = resolve_issues(text, tokens, issues)

    assert resolutions[0].insertion is not None
    assert resolutions[1].insertion is None
    assert len(map_issues_to_insertions(text, tokens, issues)) == 1


def test_missing_terminator_uses_same_gap_owner():
    text = "the storm came ^ ^ we ran ^"
    tokens = tokenize(text)
    issues = [make_issue("MISSING_SENTENCE_TERMINATOR", text.index("came"))]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert len(insertions) == 1
    assert insertions[0].at == text.index("came") + len("came")
    assert insertions[0].before_b_index == _boundary_before(tokens, "we").idx


def test_paragraph_end_rule_on_final_boundary():
    text = "we ran home ^"
    tokens = tokenize(text)
    issues = [make_issue("PUNCTUATION_PARAGRAPH_END", text.index("home"))]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert len(insertions) == 1
    assert insertions[0].at == len("we ran home")
    assert insertions[0].before_b_index == tokens[-1].idx


def test_insertions_sorted_by_offset():
    text = "It was dark ^ nobody came ^ then rain fell"
    tokens = tokenize(text)
    issues = [
        make_issue("UPPERCASE_SENTENCE_START", text.index("then")),
        make_issue("UPPERCASE_SENTENCE_START", text.index("nobody")),
    ]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert [i.at for i in insertions] == [
        text.index("dark") + len("dark"),
        text.index("came") + len("came"),
    ]


def test_spelling_rule_targets_word_without_insertion():
    text = "I woud go ^ home"
    tokens = tokenize(text)
    issues = [make_issue("MORFOLOGIK_RULE_EN_US", text.index("woud"))]

    resolutions = resolve_issues(text, tokens, issues)

    assert resolutions[0].insertion is None
    assert resolutions[0].targets == (1,)
    assert map_issues_to_insertions(text, tokens, issues) == []


def test_disabled_rule_behaves_like_unrecognized():
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    issues = [make_issue("UPPERCASE_SENTENCE_START", text.index("nobody"))]

    insertions = map_issues_to_insertions(
        text, tokens, issues, disabled_rules=["UPPERCASE_SENTENCE_START"]
    )

    assert insertions == []


def test_group_insertions_by_boundary():
    insertions = [
        Insertion(at=10, text=".", before_b_index=4),
        Insertion(at=25, text="!", before_b_index=8),
        Insertion(at=30, text=".", before_b_index=8),
    ]

    grouped = group_insertions_by_boundary(insertions)

    assert list(grouped) == [4, 8]
    assert [i.text for i in grouped[8]] == ["!", "."]
    assert group_insertions_by_boundary([]) == {}
    assert group_insertions_by_boundary(None) == {}


def test_apply_insertions_uses_original_offsets():
    text = "It was dark ^ nobody came ^ then"
    insertions = [
        Insertion(at=text.index(" ^ then"), text=".", before_b_index=6),
        Insertion(at=text.index(" ^ nobody"), text=".", before_b_index=3),
        Insertion(at=len(text) + 5, text="!", before_b_index=9),
    ]

    assert apply_insertions(text, insertions) == "It was dark. ^ nobody came. ^ then"


def test_sentence_start_after_closing_quote_inserts_after_quote():
    """Closing quotes and brackets are ordinary anchors; the dot follows them."""
    text = 'He said "stop" ^ nobody moved (we ran) ^ then rain'
    tokens = tokenize(text)
    issues = [
        make_issue("UPPERCASE_SENTENCE_START", text.index("nobody")),
        make_issue("UPPERCASE_SENTENCE_START", text.index("then")),
    ]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert [(i.at, i.before_b_index) for i in insertions] == [
        (text.index('" ^') + 1, _boundary_before(tokens, "nobody").idx),
        (text.index(") ^") + 1, _boundary_before(tokens, "then").idx),
    ]
    assert apply_insertions(text, insertions) == (
        'He said "stop". ^ nobody moved (we ran). ^ then rain'
    )


def test_grammarbot_terminal_is_inserted_verbatim():
    text = "What a storm ^ we ran ^ did you see it ^"
    tokens = tokenize(text)
    edits = {
        "edits": [
            {"start": 12, "end": 12, "replace": "!", "err_cat": "PUNC", "edit_type": "INSERT"},
            {"start": 34, "end": 36, "replace": "it?", "err_cat": "PUNC", "edit_type": "MODIFY"},
        ]
    }

    insertions = map_issues_to_insertions(text, tokens, issues_from_payload(edits, text))

    assert [(i.at, i.text, i.rule) for i in insertions] == [
        (text.index("storm") + 5, "!", "GB_PUNC"),
        (text.index("it ^") + 2, "?", "GB_PUNC"),
    ]
    assert insertions[1].before_b_index == tokens[-1].idx


def test_grammarbot_terminal_shares_gap_with_languagetool():
    """Whichever checker reports the gap first owns its boundary."""
    text = "It was dark ^ nobody could"
    tokens = tokenize(text)
    issues = [
        make_issue("UPPERCASE_SENTENCE_START", text.index("nobody")),
        make_issue("GB_PUNC", text.index("dark"), terminal="!"),
    ]

    insertions = map_issues_to_insertions(text, tokens, issues)

    assert [i.text for i in insertions] == ["."]


def test_spelling_span_targets_every_word_inside():
    text = "I woud liek to go ^ home"
    tokens = tokenize(text)
    issues = [make_issue("GB_SPELL", 2, length=9)]

    resolutions = resolve_issues(text, tokens, issues)

    assert resolutions[0].insertion is None
    assert resolutions[0].targets == (1, 2)
