"""
Tiny helper script showing the text -> insertions -> scoring model flow
on a caret-marked student sample with a canned grammar-checker response.
"""

from __future__ import annotations

from cbm_writing import apply_insertions, issues_from_payload, process_document
from cbm_writing.config import CbmConfig
from cbm_writing.models import Document

SAMPLE = "It was dark ^ nobody could see the trees ^ ^ The water was cold ^"

LANGUAGETOOL_RESPONSE = {
    "matches": [
        {
            "offset": SAMPLE.index("nobody"),
            "length": len("nobody"),
            "message": "This sentence does not start with an uppercase letter.",
            "rule": {"id": "UPPERCASE_SENTENCE_START"},
        },
        {
            "offset": SAMPLE.index("The"),
            "length": len("The"),
            "rule": {"id": "UPPERCASE_SENTENCE_START"},
        },
        {
            "offset": SAMPLE.index("cold"),
            "length": len("cold"),
            "rule": {"id": "PUNCTUATION_PARAGRAPH_END"},
        },
    ]
}


def main() -> None:
    issues = issues_from_payload(LANGUAGETOOL_RESPONSE)
    result = process_document(Document("sample", SAMPLE), issues, CbmConfig())

    print(apply_insertions(SAMPLE, result.insertions))
    for insertion in result.insertions:
        print(f"insert {insertion.text!r} at {insertion.at} (caret {insertion.before_b_index})")
    for group in result.terminal_groups:
        print(f"{group.id}: {group.state.value}")


if __name__ == "__main__":
    main()
