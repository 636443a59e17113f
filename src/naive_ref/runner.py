from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional, Union

from lark import Tree

from .evaluator import Interpreter
from .lexer_rd import LexError, Lexer
from .parser_rd import ParseError, Parser
from .runtime import NvValue, NaiveRuntimeError
from .utils import debug_py_trace_enabled, log_level

logger = logging.getLogger(__name__)

USAGE = "usage: naive [--dump-ast] [script]"

def parse_program(source: Union[bytes, str], name: Optional[str]=None) -> List[Tree]:
    """
    Parse a whole program. A ParseError wins over lexical diagnostics;
    if parsing succeeds, any recorded lexical error is raised as LexError.
    """
    lexer = Lexer(source, name)
    statements = Parser(lexer).parse()

    if lexer.num_errors:
        raise LexError(lexer.errors)

    logger.debug("parsed %d statement(s) from %s", len(statements), name or "<unknown>")
    return statements

def run(source: Union[bytes, str], name: Optional[str]=None, interpreter: Optional[Interpreter]=None) -> NvValue:
    if interpreter is None:
        interpreter = Interpreter(name)

    statements = parse_program(source, name)
    return interpreter.evaluate(statements, name=name)

def run_file(path: Union[str, Path], interpreter: Optional[Interpreter]=None) -> NvValue:
    p = Path(path)
    return run(p.read_bytes(), name=str(p), interpreter=interpreter)

def repl_eval(text: str, interpreter: Interpreter) -> NvValue:
    """Evaluate one REPL submission against the session's persistent interpreter."""
    return run(text, name="<repl>", interpreter=interpreter)

def report_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(exc)), file=sys.stderr, end="")

def _dump_ast(path: Path) -> None:
    for stmt in parse_program(path.read_bytes(), str(path)):
        print(stmt.pretty(), end="")

def main(argv: Optional[List[str]]=None) -> int:
    logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")

    dump_ast = False
    args: List[str] = []

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--dump-ast":
            dump_ast = True
            continue
        if token in ("-h", "--help"):
            print(USAGE)
            return 0
        args.append(token)

    if len(args) > 1:
        print(USAGE, file=sys.stderr)
        return 1

    if not args:
        if dump_ast:
            print(USAGE, file=sys.stderr)
            return 1

        from .repl import repl  # prompt_toolkit is only needed interactively
        repl()
        return 0

    path = Path(args[0])

    try:
        if dump_ast:
            _dump_ast(path)
        else:
            run_file(path)
    except OSError as exc:
        print(f"Error: cannot read {path}: {exc.strerror}", file=sys.stderr)
        return 1
    except (ParseError, LexError, NaiveRuntimeError) as exc:
        report_error(exc)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
