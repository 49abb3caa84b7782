"""
cbm_writing package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .bootstrap import bootstrap
from .config import CbmConfig, config_from_dict, config_from_yaml, load_config
from .issues import Issue, issues_from_payload, make_issue
from .mapping import apply_insertions, map_issues_to_insertions
from .pipeline import process_corpus, process_document
from .tokenization import tokenize

__all__ = [
    "CbmConfig",
    "config_from_dict",
    "config_from_yaml",
    "load_config",
    "Issue",
    "issues_from_payload",
    "make_issue",
    "tokenize",
    "map_issues_to_insertions",
    "apply_insertions",
    "bootstrap",
    "process_corpus",
    "process_document",
]

__version__ = "0.1.0"
