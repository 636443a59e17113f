"""Live syntax highlighting for the naive REPL, driven by the RD lexer."""

from __future__ import annotations

from typing import Callable, Dict, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as NvLexer
from .token_types import TT, Tok

# Highlight group -> prompt_toolkit style string.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "literal": "ansicyan",
    "number": "ansimagenta",
    "text": "ansigreen",
    "call": "bold ansiyellow",
    "comment": "italic ansibrightblack",
    "error": "bold ansired",
}

_PUNCTUATION = frozenset({TT.LPAR, TT.RPAR, TT.LBRACE, TT.RBRACE, TT.SEMI, TT.COMMA})


def _static_group(kind: TT) -> str:
    if kind in (TT.TRUE, TT.FALSE, TT.NIL):
        return "literal"
    if kind.is_keyword:
        return "keyword"
    if kind in (TT.INT, TT.FLOAT):
        return "number"
    if kind in (TT.CHAR, TT.STRING):
        return "text"
    if kind == TT.COMMENT:
        return "comment"
    if kind == TT.INVALID:
        return "error"
    return ""


def _group(tokens: List[Tok], idx: int) -> str:
    tok = tokens[idx]

    # a name directly before '(' is a call or a declaration
    if tok.type == TT.IDENT and idx + 1 < len(tokens) and tokens[idx + 1].type == TT.LPAR:
        return "call"
    if tok.type in _PUNCTUATION:
        return ""

    return _static_group(tok.type)


def highlight_line(text: str) -> StyleAndTextTuples:
    """Split one line into (style, text) fragments that concatenate back to `text`."""
    if not text:
        return [("", "")]

    tokens = [tok for tok in NvLexer(text).tokenize() if tok.type != TT.EOF]
    fragments: StyleAndTextTuples = []
    pos = 0

    for idx, tok in enumerate(tokens):
        start = tok.column - 1
        end = min(start + len(tok.value), len(text))

        if start < pos or start >= end:
            continue
        if start > pos:
            fragments.append(("", text[pos:start]))

        fragments.append((GROUP_STYLE.get(_group(tokens, idx), ""), text[start:end]))
        pos = end

    if pos < len(text):
        fragments.append(("", text[pos:]))

    return fragments


class NaiveLexer(Lexer):
    """Highlights each buffer line independently; lines are lexed on first request."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        seen: Dict[int, StyleAndTextTuples] = {}

        def line_fragments(lineno: int) -> StyleAndTextTuples:
            if lineno >= len(lines):
                return [("", "")]
            if lineno not in seen:
                seen[lineno] = highlight_line(lines[lineno])
            return seen[lineno]

        return line_fragments
