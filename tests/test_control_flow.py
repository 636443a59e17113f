from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import NaiveNameError, run_output_case, run_runtime_case

SCENARIOS = [
    pytest.param("let r = 0; if true { r = 1; } else { r = 2; } return r;", ("int", 1), None, id="if-then"),
    pytest.param("let r = 0; if nil { r = 1; } else { r = 2; } return r;", ("int", 2), None, id="if-else"),
    pytest.param("let r = 0; if 0 { r = 1; } return r;", ("int", 1), None, id="zero-condition-truthy"),
    pytest.param("let r = 0; if false { r = 1; } return r;", ("int", 0), None, id="if-without-else"),
    pytest.param(
        dedent(
            """\
            fn grade(n) {
                if n > 90 { return 'A'; }
                else if n > 80 { return 'B'; }
                else { return 'C'; }
            }
            return grade(85);
        """
        ),
        ("char", "B"),
        None,
        id="else-if-chain",
    ),
    pytest.param(
        "let s = 0; let i = 1; while i <= 100 { s = s + i; i = i + 1; } return s;",
        ("int", 5050),
        None,
        id="while-sum",
    ),
    pytest.param("let n = 0; while false { n = 1; } return n;", ("int", 0), None, id="while-never-runs"),
    pytest.param(
        dedent(
            """\
            let total = 0;
            let i = 0;
            while i < 3 {
                let j = 0;
                while j < 3 {
                    total = total + i * j;
                    j = j + 1;
                }
                i = i + 1;
            }
            return total;
        """
        ),
        ("int", 9),
        None,
        id="nested-while",
    ),
    pytest.param(
        "let i = 0; while i < 3 { let tmp = i; i = i + 1; } return tmp;",
        None,
        NaiveNameError,
        id="loop-body-scope-is-fresh",
    ),
    pytest.param(
        "let i = 0; while i < 10 { if i == 4 { return i; } i = i + 1; } return -1;",
        ("int", 4),
        None,
        id="top-level-return-in-loop",
    ),
    pytest.param("let a = 1; return a; a = missing;", ("int", 1), None, id="top-level-return-stops-unit"),
    pytest.param("if true { missing; }", None, NaiveNameError, id="taken-branch-evaluated"),
    pytest.param("if false { missing; } else { }", ("nil", None), None, id="untaken-branch-skipped"),
    pytest.param("let x = 1; { x; }", ("nil", None), None, id="unit-without-return-is-nil"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_control_flow(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_return_skips_remaining_output(capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        print("before");
        return 0;
        print("after");
    """
    )
    assert run_output_case(source, capsys) == "before\n"


def test_condition_reevaluated_each_iteration(capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        let i = 3;
        while i > 0 {
            print("{}", i);
            i = i - 1;
        }
    """
    )
    assert run_output_case(source, capsys) == "3\n2\n1\n"
