"""
Recursive Descent Parser for naive

Structure:
- Lexer: tokens pulled on demand
- Parser: recursive descent, one method per precedence level
- AST: labelled lark Trees built through `naive_ref.ast`

Lookahead is a single current token plus the previous one. Two grammar
points are ambiguous on their first token and resolved by advancing one
token and backtracking when the guess was wrong:

- IDENT starts either an assignment (`x = ...;`) or an expression statement
- `fn` starts either a named function (`fn name(...)`) or a lambda (`fn (...)`)
"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from lark import Tree

from . import ast
from .lexer_rd import Lexer
from .token_types import TT, Tok

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.location = token.location if token is not None else None
        self.line = token.line if token is not None else None
        self.column = token.column if token is not None else None
        super().__init__(
            f"{self.location}: {message}" if token is not None else message
        )

class Parser:
    """
    Recursive descent parser for naive.

    Expression precedence (lowest to highest):
    1. lambda (fn (params) => expr | fn (params) { ... }), expression start only
    2. or
    3. and
    4. relational (==, /=, <, >, <=, >=)
    5. additive (+, -)
    6. multiplicative (*, /, %)
    7. unary (not, -)
    8. call (name(args))
    9. primary (literals, identifiers, parens)
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.previous: Optional[Tok] = None
        # Tokens put back by go_back(), replayed before the lexer is consulted
        self.staged: List[Tok] = []
        self.current: Tok = self.lexer.scan()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def next_token(self) -> None:
        if self.staged:
            self.current = self.staged.pop()
        else:
            self.current = self.lexer.scan()

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.previous = prev
        self.next_token()
        return prev

    def go_back(self) -> None:
        """Undo the last advance(): stage the current token, restore the previous one"""
        if self.previous is None:
            raise ParseError("nothing to backtrack to", self.current)
        self.staged.append(self.current)
        self.current = self.previous
        self.previous = None

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"expected {token_type.name}, got {self._describe(self.current)}"
            raise ParseError(msg, self.current)
        return self.advance()

    def _describe(self, tok: Tok) -> str:
        if tok.type == TT.INVALID:
            return f"invalid token {tok.value!r}"
        if tok.type in (TT.EOF,) or not tok.value:
            return tok.type.name
        return f"{tok.type.name} {tok.value!r}"

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Tree]:
        """Parse entire program into a list of statements"""
        stmts: List[Tree] = []

        while not self.check(TT.EOF):
            if self.match(TT.COMMENT):
                continue
            stmts.append(self.parse_statement())

        return stmts

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """Parse a single statement, dispatching on its first token."""
        if self.check(TT.SEMI):
            return ast.empty_stmt(self.advance())
        if self.check(TT.LET):
            return self.parse_let_stmt()
        if self.check(TT.IDENT):
            return self.parse_assign_or_expr_stmt()
        if self.check(TT.LBRACE):
            return self.parse_block()
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.ELSE):
            raise ParseError("dangling else", self.current)
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FN):
            return self.parse_fn_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.PRINT):
            return self.parse_print_stmt()

        return self.parse_expr_stmt()

    def parse_expr_stmt(self) -> Tree:
        expr = self.parse_expr()
        self.expect(TT.SEMI)
        return ast.expr_stmt(expr)

    def parse_let_stmt(self) -> Tree:
        """Parse declaration: let name [= expr];"""
        let_tok = self.expect(TT.LET)
        name = self.expect(TT.IDENT)

        init = None
        if self.match(TT.ASSIGN):
            init = self.parse_expr()

        self.expect(TT.SEMI)
        return ast.let_stmt(name.value, init, let_tok)

    def parse_assign_or_expr_stmt(self) -> Tree:
        """IDENT '=' expr ';' is an assignment; anything else re-reads the IDENT as an expression."""
        name = self.advance()

        if self.match(TT.ASSIGN):
            expr = self.parse_expr()
            self.expect(TT.SEMI)
            return ast.assign_stmt(name.value, expr, name)

        self.go_back()
        return self.parse_expr_stmt()

    def parse_block(self) -> Tree:
        """Parse block: { stmt* }"""
        lbrace = self.expect(TT.LBRACE)
        stmts: List[Tree] = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError("unexpected EOF, expected RBRACE", self.current)
            if self.match(TT.COMMENT):
                continue
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE)
        return ast.block(stmts, lbrace)

    def parse_if_stmt(self) -> Tree:
        """
        Parse if statement:
        if expr { ... } [else if ... | else { ... }]
        """
        if_tok = self.expect(TT.IF)
        cond = self.parse_expr()
        then_body = self.parse_block()

        otherwise = None
        if self.match(TT.ELSE):
            if self.check(TT.IF):
                otherwise = self.parse_if_stmt()
            else:
                otherwise = self.parse_block()

        return ast.if_stmt(cond, then_body, otherwise, if_tok)

    def parse_while_stmt(self) -> Tree:
        """Parse while loop: while expr { ... }"""
        while_tok = self.expect(TT.WHILE)
        cond = self.parse_expr()
        body = self.parse_block()
        return ast.while_stmt(cond, body, while_tok)

    def parse_fn_stmt(self) -> Tree:
        """
        Parse function declaration: fn name(params) { ... }
        `fn` followed by anything but a name is a lambda expression statement.
        """
        fn_tok = self.advance()

        if self.check(TT.IDENT):
            name = self.advance()
            params = self.parse_param_list()
            body = self.parse_block()
            return ast.fn_def(name.value, params, body, fn_tok)

        self.go_back()
        return self.parse_expr_stmt()

    def parse_return_stmt(self) -> Tree:
        """Parse return statement: return [expr];"""
        ret_tok = self.expect(TT.RETURN)

        if self.check(TT.SEMI):
            value = ast.nil_literal(ret_tok)
        else:
            value = self.parse_expr()

        self.expect(TT.SEMI)
        return ast.return_stmt(value, ret_tok)

    def parse_print_stmt(self) -> Tree:
        """Parse legacy print statement: print("format", expr, ...);"""
        print_tok = self.expect(TT.PRINT)
        self.expect(TT.LPAR)
        fmt = self.expect(TT.STRING, f"print expects a format STRING, got {self._describe(self.current)}")

        args: List[Tree] = []
        while self.match(TT.COMMA):
            args.append(self.parse_expr())

        self.expect(TT.RPAR)
        self.expect(TT.SEMI)
        return ast.print_stmt(_string_value(fmt.value), args, print_tok)

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (top level). A lambda is only recognized here."""
        if self.check(TT.FN):
            return self.parse_lambda()
        return self.parse_or_expr()

    def parse_lambda(self) -> Tree:
        """Parse lambda: fn (params) => expr  |  fn (params) { ... }"""
        fn_tok = self.expect(TT.FN)
        params = self.parse_param_list()

        if self.check(TT.ARROW):
            arrow = self.advance()
            value = self.parse_expr()
            body = ast.block([ast.return_stmt(value, arrow)], arrow)
        else:
            body = self.parse_block()

        return ast.lambda_expr(params, body, fn_tok)

    def parse_or_expr(self) -> Tree:
        """Parse logical OR: expr or expr"""
        left = self.parse_and_expr()

        while self.check(TT.OR):
            op = self.advance()
            right = self.parse_and_expr()
            left = ast.binary(left, op, right)

        return left

    def parse_and_expr(self) -> Tree:
        """Parse logical AND: expr and expr"""
        left = self.parse_compare_expr()

        while self.check(TT.AND):
            op = self.advance()
            right = self.parse_compare_expr()
            left = ast.binary(left, op, right)

        return left

    def parse_compare_expr(self) -> Tree:
        """Parse comparison; repeated operators chain to the left: a < b < c == (a < b) < c"""
        left = self.parse_add_expr()

        while self.check(TT.EQ, TT.NEQ, TT.LT, TT.GT, TT.LTE, TT.GTE):
            op = self.advance()
            right = self.parse_add_expr()
            left = ast.binary(left, op, right)

        return left

    def parse_add_expr(self) -> Tree:
        """Parse addition/subtraction: expr + expr"""
        left = self.parse_mul_expr()

        while self.check(TT.PLUS, TT.MINUS):
            op = self.advance()
            right = self.parse_mul_expr()
            left = ast.binary(left, op, right)

        return left

    def parse_mul_expr(self) -> Tree:
        """Parse multiplication/division/modulo: expr * expr"""
        left = self.parse_unary_expr()

        while self.check(TT.STAR, TT.SLASH, TT.MOD):
            op = self.advance()
            right = self.parse_unary_expr()
            left = ast.binary(left, op, right)

        return left

    def parse_unary_expr(self) -> Tree:
        """Parse unary operators: -expr, not expr"""
        if self.check(TT.MINUS, TT.NOT):
            op = self.advance()
            operand = self.parse_unary_expr()
            return ast.unary(op, operand)

        return self.parse_call_expr()

    def parse_call_expr(self) -> Tree:
        """Parse call: name(args). A name without '(' is a variable reference."""
        if not self.check(TT.IDENT):
            return self.parse_primary_expr()

        name = self.advance()
        if not self.check(TT.LPAR):
            return ast.variable(name.value, name)

        self.advance()
        args = self.parse_arg_list()
        self.expect(TT.RPAR)
        return ast.call(name.value, args, name)

    def parse_primary_expr(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (int, float, char, string, true, false, nil)
        - Parenthesized expressions
        """
        tok = self.current

        if self.match(TT.INT):
            return ast.int_literal(_int_value(tok), tok)
        if self.match(TT.FLOAT):
            return ast.float_literal(_float_value(tok), tok)
        if self.match(TT.CHAR):
            return ast.char_literal(_char_value(tok), tok)
        if self.match(TT.STRING):
            return ast.string_literal(_string_value(tok.value), tok)
        if self.match(TT.TRUE):
            return ast.true_literal(tok)
        if self.match(TT.FALSE):
            return ast.false_literal(tok)
        if self.match(TT.NIL):
            return ast.nil_literal(tok)

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR)
            return ast.grouping(expr, tok)

        raise ParseError(f"unexpected {self._describe(tok)}", tok)

    def parse_param_list(self) -> List[str]:
        """Parse function parameter list: (name, ...)"""
        self.expect(TT.LPAR)
        params: List[str] = []

        if not self.check(TT.RPAR):
            while True:
                param = self.expect(TT.IDENT)
                if param.value in params:
                    raise ParseError(f"duplicate parameter {param.value!r}", param)
                params.append(param.value)
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR)
        return params

    def parse_arg_list(self) -> List[Tree]:
        """Parse call arguments up to (not including) ')'"""
        args: List[Tree] = []
        if self.check(TT.RPAR):
            return args

        while True:
            args.append(self.parse_expr())
            if not self.match(TT.COMMA):
                return args

# ============================================================================
# Literal conversion
# ============================================================================

_RADIX = {'0b': 2, '0o': 8, '0x': 16}

def _int_value(tok: Tok) -> int:
    text = tok.value
    base = _RADIX.get(text[:2], 10)
    digits = text[2:] if base != 10 else text

    try:
        return int(digits, base)
    except ValueError:
        raise ParseError(f"malformed integer literal {text!r}", tok) from None

def _float_value(tok: Tok) -> Decimal:
    # Decimal accepts "1." but a float literal needs a fraction and exponent digits
    if tok.value[-1:] in ("", ".", "e", "E", "+", "-"):
        raise ParseError(f"malformed floating-point literal {tok.value!r}", tok)

    try:
        return Decimal(tok.value)
    except InvalidOperation:
        raise ParseError(f"malformed floating-point literal {tok.value!r}", tok) from None

def _char_value(tok: Tok) -> str:
    text = tok.value
    if len(text) != 3 or text[0] != "'" or text[-1] != "'":
        raise ParseError(f"malformed char literal {text!r}", tok)
    return text[1]

def _string_value(text: str) -> str:
    begin, end = 0, len(text)
    if text.startswith('"'):
        begin += 1
    if text.endswith('"') and begin < end:
        end -= 1
    return text[begin:end]

# ============================================================================
# Entry points
# ============================================================================

def parse_source(source: Union[bytes, str], name: Optional[str] = None) -> List[Tree]:
    """
    Parse naive source code to a list of statement trees.

    Recorded lexical errors are not raised here; use `naive_ref.runner`
    for the policy that treats them as fatal.
    """
    return Parser(Lexer(source, name)).parse()
