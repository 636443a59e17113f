"""
Lexer for naive - pull-based scanner

Converts raw source bytes into tokens on demand.

Features:
- Pull-based: `scan()` returns one token per call, EOF forever at the end
- UTF-8 decoding with position tracking (line, column in code points)
- Recoverable errors: counted and recorded, scanning always continues
"""

import logging
from typing import Callable, List, Optional, Tuple, Union

from .token_types import TT, Tok, Location, lookup

logger = logging.getLogger(__name__)

_EOF = ''
_BOM = '\ufeff'

# ============================================================================
# Character classes
# ============================================================================

def _is_dec_digit(ch: str) -> bool:
    return '0' <= ch <= '9'

def _is_bin_digit(ch: str) -> bool:
    return ch in ('0', '1')

def _is_oct_digit(ch: str) -> bool:
    return '0' <= ch <= '7'

def _is_hex_digit(ch: str) -> bool:
    return '0' <= ch <= '9' or 'a' <= ch <= 'f' or 'A' <= ch <= 'F'

def _can_lead_ident(ch: str) -> bool:
    return ch == '_' or (ch != _EOF and ch.isalpha())

def _can_make_ident(ch: str) -> bool:
    return _can_lead_ident(ch) or _is_dec_digit(ch)

def _utf8_width(lead: int) -> int:
    if 0xC0 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF7:
        return 4
    return 1

_RADIX_DIGITS: dict[str, Callable[[str], bool]] = {
    'b': _is_bin_digit,
    'o': _is_oct_digit,
    'x': _is_hex_digit,
}

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(Exception):
    """Raised by callers that treat recorded lexical errors as fatal."""

    def __init__(self, errors: List[Tuple[Location, str]]):
        self.errors = errors
        self.location = errors[0][0] if errors else None
        self.line = self.location.line if self.location else None
        self.column = self.location.column if self.location else None
        lines = [f"{loc}: {msg}" for loc, msg in errors]
        super().__init__("\n".join(lines) if lines else "lexical error")


class Lexer:
    """
    naive lexer.

    Cursor state mirrors a byte-oriented decoder:
    - ch: current decoded code point ('' at end of input)
    - offset: byte offset of ch
    - rd_offset: byte offset of the next code point
    """

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('=>', TT.ARROW),
        ('/=', TT.NEQ),
        ('>=', TT.GTE),
        ('<=', TT.LTE),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('=', TT.ASSIGN),
        ('>', TT.GT),
        ('<', TT.LT),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (';', TT.SEMI),
        (',', TT.COMMA),
    ]

    def __init__(self, source: Union[bytes, str], name: Optional[str] = None):
        if isinstance(source, str):
            source = source.encode('utf-8')
        self.src: bytes = source
        self.name = name

        self.ch = ' '
        self.offset = 0
        self.rd_offset = 0
        self.line = 1
        self.column = 0

        self.errors: List[Tuple[Location, str]] = []
        self._reported_offset = -1

        self.next()
        if self.ch == _BOM:
            self.next()
            self.column = 1

    @property
    def num_errors(self) -> int:
        return len(self.errors)

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Scan the whole source, return token list ending with EOF"""
        tokens = []
        while True:
            tok = self.scan()
            tokens.append(tok)
            if tok.type == TT.EOF:
                return tokens

    def scan(self) -> Tok:
        """Scan next token"""
        self.skip_whitespace()

        line, column = self.line, self.column
        ch = self.ch

        if _can_lead_ident(ch):
            kind, text = self.scan_identifier()
        elif _is_dec_digit(ch):
            kind, text = self.scan_number()
        elif ch == '"':
            kind, text = TT.STRING, self.scan_string()
        elif ch == "'":
            kind, text = TT.CHAR, self.scan_char()
        elif ch == '#':
            kind, text = TT.COMMENT, self.scan_comment()
        elif ch == _EOF:
            kind, text = TT.EOF, ''
        else:
            kind, text = self.scan_operator()

        return Tok(type=kind, value=text, line=line, column=column, file=self.name)

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_identifier(self) -> Tuple[TT, str]:
        """Scan identifier or keyword, with an optional trailing '!' or '?'"""
        begin = self.offset
        while _can_make_ident(self.ch):
            self.next()
        if self.ch in ('!', '?'):
            self.next()

        text = self.text_from(begin)
        return lookup(text), text

    def scan_number(self) -> Tuple[TT, str]:
        """Scan integer or floating-point literal"""
        begin = self.offset

        if self.ch == '0':
            self.next()
            is_digit = _RADIX_DIGITS.get(self.ch)
            if is_digit is not None:
                self.next()
                if self.scan_digits(is_digit) == 0:
                    self.report("invalid integer literal: no digits after radix prefix")
                return TT.INT, self.text_from(begin)

        self.scan_digits(_is_dec_digit)
        kind = TT.INT

        if self.ch == '.':
            kind = TT.FLOAT
            self.next()
            if self.scan_digits(_is_dec_digit) == 0:
                self.report("invalid floating-point literal: no fraction")
                return kind, self.text_from(begin)

        if self.ch in ('e', 'E'):
            kind = TT.FLOAT
            self.next()
            if self.ch in ('+', '-'):
                self.next()
            if self.scan_digits(_is_dec_digit) == 0:
                self.report("invalid floating-point literal: incomplete exponent")

        return kind, self.text_from(begin)

    def scan_digits(self, is_valid: Callable[[str], bool]) -> int:
        n = 0
        while is_valid(self.ch):
            n += 1
            self.next()
        return n

    def scan_char(self) -> str:
        """Scan char literal: 'x' (exactly one code point, no escapes)"""
        begin = self.offset
        self.next()  # opening quote

        if self.ch == "'":
            self.next()
            self.report("illegal char literal: empty")
        elif self.ch in (_EOF, '\n'):
            self.report("char literal not terminated")
        else:
            self.next()
            if self.ch == "'":
                self.next()
            else:
                self.report("char literal not terminated")

        return self.text_from(begin)

    def scan_string(self) -> str:
        """Scan string literal: "..." up to the closing quote or end of line"""
        begin = self.offset
        self.next()  # opening quote

        while self.ch != '"':
            if self.ch in ('\n', _EOF):
                self.report("string literal not terminated")
                break
            self.next()

        if self.ch == '"':
            self.next()

        return self.text_from(begin)

    def scan_comment(self) -> str:
        """Scan comment until end of line (newline excluded)"""
        begin = self.offset
        while self.ch not in ('\n', _EOF):
            self.next()
        return self.text_from(begin)

    def scan_operator(self) -> Tuple[TT, str]:
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.src.startswith(op_str.encode('ascii'), self.offset):
                for _ in op_str:
                    self.next()
                return op_type, op_str

        ch = self.ch
        if self.offset != self._reported_offset:
            self.report(f"illegal character U+{ord(ch):04X} {ch!r}")
        self.next()
        return TT.INVALID, ch

    # ========================================================================
    # Utilities
    # ========================================================================

    def next(self) -> str:
        """Decode the next code point into `ch` and return it"""
        if self.ch == '\n':
            self.line += 1
            self.column = 1
        elif self.ch != _EOF:
            self.column += 1

        if self.rd_offset >= len(self.src):
            self.offset = len(self.src)
            self.ch = _EOF
            return self.ch

        self.offset = self.rd_offset
        lead = self.src[self.rd_offset]
        width = 1

        if lead == 0:
            ch = '\0'
            self.report("illegal character NUL")
            self._reported_offset = self.offset
        elif lead < 0x80:
            ch = chr(lead)
        else:
            width = _utf8_width(lead)
            chunk = self.src[self.rd_offset:self.rd_offset + width]
            try:
                ch = chunk.decode('utf-8')
            except UnicodeDecodeError:
                ch, width = '\ufffd', 1
                self.report("illegal UTF-8 encoding")
                self._reported_offset = self.offset
            else:
                if ch == _BOM and self.offset > 0:
                    self.report("illegal byte order mark")
                    self._reported_offset = self.offset

        self.rd_offset += width
        self.ch = ch
        return ch

    def skip_whitespace(self) -> None:
        while self.ch in (' ', '\t', '\r', '\n'):
            self.next()

    def text_from(self, begin: int) -> str:
        return self.src[begin:self.offset].decode('utf-8', errors='replace')

    def report(self, message: str) -> None:
        loc = Location(self.name, self.line, self.column)
        self.errors.append((loc, message))
        logger.debug("%s: %s", loc, message)


def tokenize(source: Union[bytes, str], name: Optional[str] = None) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source, name).tokenize()
