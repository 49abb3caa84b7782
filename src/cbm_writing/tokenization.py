from __future__ import annotations

import re
from typing import List

from .models import Token, TokenType

BOUNDARY_MARKER = "^"

# A letter or digit plus any combining marks riding on it, so decomposed
# text ("cafe" + U+0301) stays one word. Underscore is not a letter.
_WORD_CHAR = r"[^\W_][\u0300-\u036f\u1ab0-\u1aff\u1dc0-\u1dff\u20d0-\u20ff\ufe20-\ufe2f]*"

# Apostrophes (straight or curly) and hyphens join word runs only when a word
# character follows, so "don't", "children’s" and "sister-in-law" stay whole
# while trailing punctuation is left for its own token.
TOKEN_PATTERN = re.compile(
    r"(?P<boundary>\^)"
    rf"|(?P<word>(?:{_WORD_CHAR})+(?:['’\-](?:{_WORD_CHAR})+)*)"
    r"|(?P<punct>\S)",
    re.UNICODE,
)


def tokenize(text: str) -> List[Token]:
    """Tokenize text into WORD/PUNCT/BOUNDARY tokens with character offsets."""
    tokens: List[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup
        if kind == "boundary":
            token_type = TokenType.BOUNDARY
        elif kind == "word":
            token_type = TokenType.WORD
        else:
            token_type = TokenType.PUNCT
        tokens.append(
            Token(
                idx=len(tokens),
                raw=match.group(),
                start=match.start(),
                end=match.end(),
                type=token_type,
            )
        )
    return tokens
