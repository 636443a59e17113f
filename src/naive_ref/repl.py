"""Interactive REPL for naive, powered by prompt_toolkit."""

from __future__ import annotations

import re
import sys
from typing import Callable, Dict, NamedTuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .evaluator import Interpreter
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError
from .repl_highlight import NaiveLexer
from .runner import report_error, repl_eval
from .runtime import NvNil, NaiveRuntimeError
from .token_types import TT
from .utils import debug_py_trace_enabled, set_debug_py_trace

PROMPT = "naive> "
CONTINUATION = "...... "

# zero-width space/joiners, BOM, nbsp, CR
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_ON_WORDS = ("on", "1", "true", "yes")
_OFF_WORDS = ("off", "0", "false", "no")

SessionBox = list  # one-element list holding the live Interpreter


class SlashCommand(NamedTuple):
    run: Callable[[str, SessionBox], None]
    help: str
    usage: str = ""


def _cmd_clear(_arg: str, _box: SessionBox) -> None:
    clear()


def _cmd_traceback(arg: str, _box: SessionBox) -> None:
    word = arg.lower()

    if word in _ON_WORDS:
        set_debug_py_trace(True)
    elif word in _OFF_WORDS:
        set_debug_py_trace(False)
    elif not word:
        set_debug_py_trace(not debug_py_trace_enabled())
    else:
        print(f"usage: /py-traceback {SLASH_COMMANDS['/py-traceback'].usage}", file=sys.stderr)
        return

    print("Python traceback: " + ("on" if debug_py_trace_enabled() else "off"))


def _cmd_reset(_arg: str, box: SessionBox) -> None:
    box[0].reset()
    print("Environment reset.")


SLASH_COMMANDS: Dict[str, SlashCommand] = {
    "/clear": SlashCommand(_cmd_clear, "clear the screen"),
    "/py-traceback": SlashCommand(_cmd_traceback, "show Python tracebacks for errors", "[on|off]"),
    "/reset": SlashCommand(_cmd_reset, "forget every binding made in this session"),
}


def open_depth(text: str) -> int:
    """Count brackets left open in *text*; a positive result means the input continues."""
    depth = 0

    for tok in tokenize(text):
        if tok.type in (TT.LPAR, TT.LBRACE):
            depth += 1
        elif tok.type in (TT.RPAR, TT.RBRACE) and depth:
            depth -= 1

    return depth


class _SlashCompleter(Completer):
    def get_completions(self, document, complete_event):
        typed = document.text_before_cursor
        if not typed.startswith("/"):
            return

        for name, cmd in SLASH_COMMANDS.items():
            if name.startswith(typed):
                yield Completion(name, start_position=-len(typed), display_meta=cmd.help)


def handle_slash(line: str, session_box: SessionBox) -> bool:
    """Run a slash command. Returns False when `line` is ordinary source."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    name, _, arg = stripped.partition(" ")
    cmd = SLASH_COMMANDS.get(name)

    if cmd is None:
        print(f"Unknown command: {name}", file=sys.stderr)
    else:
        cmd.run(arg.strip(), session_box)

    return True


def normalize(text: str) -> str:
    return _INVISIBLE_RE.sub("", text)


def submit(text: str, session_box: SessionBox) -> None:
    """
    Run one submission. Errors are reported on stderr and the session keeps
    whatever the completed statements bound; nothing is rolled back.
    """
    text = normalize(text)
    if not text.strip():
        return

    if handle_slash(text, session_box):
        return

    try:
        result = repl_eval(text, session_box[0])
    except (ParseError, LexError, NaiveRuntimeError) as exc:
        report_error(exc)
        return

    if not isinstance(result, NvNil):
        print(result)


def _wants_more(text: str) -> bool:
    if text.startswith("/"):
        return False
    return open_depth(text) > 0


def _key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # a blank line ends a multi-line entry even with brackets open
        if "\n" in text and not text.rsplit("\n", 1)[1].strip():
            buf.text = text.rstrip()
            buf.validate_and_handle()
        elif _wants_more(text):
            buf.insert_text("\n" + "    " * open_depth(text))
        else:
            buf.validate_and_handle()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    return bindings


def repl() -> None:
    """Read-eval-print loop over one persistent interpreter; Ctrl-D exits."""
    session_box: SessionBox = [Interpreter("<repl>")]

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=NaiveLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=_key_bindings(),
        multiline=True,
        prompt_continuation=CONTINUATION,
    )

    print("naive repl, Ctrl-D to exit, type / for commands")

    while True:
        try:
            text = session.prompt(PROMPT)
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            continue

        submit(text, session_box)
