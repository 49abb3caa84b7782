from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def write_text_with_issues(
    path: Path, text: str, matches: list[dict[str, Any]] | None = None
) -> None:
    """Write a text file and, when matches are given, its LanguageTool-style sidecar."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if matches is not None:
        sidecar = path.with_name(path.stem + ".issues.json")
        sidecar.write_text(json.dumps({"matches": matches}), encoding="utf-8")


def sentence_start_match(text: str, word: str) -> dict[str, Any]:
    """Build the match LanguageTool emits for a lowercase sentence start."""
    return {
        "offset": text.index(word),
        "length": len(word),
        "message": "This sentence does not start with an uppercase letter.",
        "rule": {"id": "UPPERCASE_SENTENCE_START"},
    }
