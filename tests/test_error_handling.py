from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    LexError,
    NaiveArityError,
    NaiveNameError,
    NaiveRuntimeError,
    NaiveTypeError,
    NaiveUnimplementedError,
    NaiveZeroDivisionError,
    ParseError,
    run_program,
)

HIERARCHY = [NaiveNameError, NaiveTypeError, NaiveArityError, NaiveZeroDivisionError, NaiveUnimplementedError]


def _raise(source: str, exc_type: type, name: str = "err.nv"):
    with pytest.raises(exc_type) as exc_info:
        run_program(source, name=name)
    return exc_info.value


@pytest.mark.parametrize("exc_type", HIERARCHY, ids=lambda t: t.__name__)
def test_runtime_errors_share_a_base(exc_type: type) -> None:
    assert issubclass(exc_type, NaiveRuntimeError)


def test_error_reports_innermost_location() -> None:
    err = _raise("let a = 1;\nlet b = a + nil;", NaiveTypeError)

    assert str(err).startswith("err.nv:2:11: ")
    assert err.message == "unsupported operand type nil for '+'"


def test_undefined_variable_message() -> None:
    err = _raise("let a = 1;\n  writeln(zz);", NaiveNameError)

    assert err.name == "zz"
    assert str(err) == "err.nv:2:11: undefined variable 'zz'"


def test_error_inside_function_points_into_body() -> None:
    source = dedent(
        """\
        fn f(x) {
            return x / 0;
        }
        f(1);
    """
    )
    err = _raise(source, NaiveZeroDivisionError)

    assert str(err).startswith("err.nv:2:")


def test_error_without_location_is_plain() -> None:
    assert str(NaiveRuntimeError("boom")) == "boom"


def test_unnamed_source_uses_placeholder() -> None:
    with pytest.raises(NaiveNameError) as exc_info:
        run_program("missing;")
    assert str(exc_info.value).startswith("<unknown>:1:1: ")


def test_lexical_error_after_valid_parse() -> None:
    err = _raise(b"let a = 1; # \xff\n", LexError)
    assert "illegal UTF-8" in str(err)
    assert err.line == 1


def test_parse_error_stops_before_running(capsys: pytest.CaptureFixture[str]) -> None:
    err = _raise('print("ran");\nlet = 2;', ParseError)

    assert str(err).startswith("err.nv:2:5: ")
    assert capsys.readouterr().out == ""


def test_runtime_error_keeps_earlier_output(capsys: pytest.CaptureFixture[str]) -> None:
    _raise('print("first");\nmissing;\nprint("second");', NaiveNameError)
    assert capsys.readouterr().out == "first\n"
