from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

from .bootstrap import bootstrap
from .config import CbmConfig
from .issues import Issue, count_by_rule
from .mapping import map_issues_to_insertions
from .models import Document, DocumentResult, Insertion
from .paragraphs import paragraph_end_insertions
from .tokenization import tokenize

LOGGER = logging.getLogger(__name__)


def process_document(
    doc: Document,
    issues: Sequence[Issue],
    config: CbmConfig | None = None,
) -> DocumentResult:
    """Tokenize a document and turn its grammar issues into the scoring model."""
    config = config or CbmConfig()
    issues = list(issues)
    LOGGER.debug("doc=%s issues by rule: %s", doc.doc_id, count_by_rule(issues))

    tokens = tokenize(doc.text)
    insertions = map_issues_to_insertions(
        doc.text,
        tokens,
        issues,
        terminal_text=config.terminal_text,
        disabled_rules=config.disabled_rules,
    )
    extras: List[Insertion] = []
    if config.paragraph_fallback:
        extras = paragraph_end_insertions(
            doc.text, tokens, insertions, terminal_text=config.terminal_text
        )
        insertions = sorted(insertions + extras, key=lambda insertion: insertion.at)

    token_models, terminal_groups = bootstrap(
        doc.text,
        tokens,
        issues,
        terminal_text=config.terminal_text,
        disabled_rules=config.disabled_rules,
        extra_insertions=extras,
    )
    LOGGER.debug(
        "doc=%s tokens=%d insertions=%d groups=%d",
        doc.doc_id,
        len(tokens),
        len(insertions),
        len(terminal_groups),
    )
    return DocumentResult(
        doc_id=doc.doc_id,
        tokens=tokens,
        insertions=insertions,
        token_models=token_models,
        terminal_groups=terminal_groups,
    )


def process_corpus(
    documents: List[Document],
    issues_by_doc: Mapping[str, Sequence[Issue]],
    config: CbmConfig | None = None,
) -> Dict[str, DocumentResult]:
    """Process all documents; documents without issues get an empty issue list."""
    results: Dict[str, DocumentResult] = {}
    for document in documents:
        results[document.doc_id] = process_document(
            document, issues_by_doc.get(document.doc_id, []), config
        )
    return results
