"""Tests for selection classification and script synthesis."""

import pytest

from uv_run.context.types import ExtractedContext, SelectionRange
from uv_run.core.exceptions import InputError
from uv_run.synthesis.selection import (
    SELECTION_MARKER,
    build_selection_script,
    classify_selection,
    is_all_indented,
    selection_text,
    synthesize_selection_script,
)
from uv_run.synthesis.types import (
    ClassDef,
    Expression,
    FunctionDef,
    IndentedFragment,
    ScriptKind,
    Statement,
)

EMPTY_CONTEXT = ExtractedContext()


class TestSelectionText:
    """Tests for cutting a selection out of a buffer."""

    def test_single_line_columns(self) -> None:
        lines = ["value = compute(1, 2)"]
        text = selection_text(lines, SelectionRange(1, 9, 1, 21))
        assert text == "compute(1, 2)"

    def test_multi_line_clips_first_and_last(self) -> None:
        lines = ["a = 1", "b = 2", "c = 3"]
        text = selection_text(lines, SelectionRange(1, 5, 3, 1))
        assert text == "1\nb = 2\nc"

    def test_end_column_past_line_end(self) -> None:
        lines = ["x + 1"]
        assert selection_text(lines, SelectionRange(1, 1, 1, 999)) == "x + 1"

    def test_out_of_range_raises(self) -> None:
        with pytest.raises(InputError, match="buffer has 1 lines"):
            selection_text(["x"], SelectionRange(1, 1, 2, 1))

    def test_inverted_range_raises(self) -> None:
        with pytest.raises(InputError, match="ends before it starts"):
            selection_text(["x", "y"], SelectionRange(2, 1, 1, 1))


class TestClassification:
    """Tests for classify_selection()."""

    def test_all_indented(self) -> None:
        assert classify_selection("    x = 1\n\n    y = 2") == IndentedFragment()

    def test_function_def(self) -> None:
        assert classify_selection("def foo():\n    return 42") == FunctionDef(name="foo")

    def test_function_def_after_blank_line(self) -> None:
        assert classify_selection("\ndef bar(a):\n    return a") == FunctionDef(name="bar")

    def test_decorated_function_def(self) -> None:
        text = "@staticmethod\ndef foo():\n    return 42"
        assert classify_selection(text) == FunctionDef(name="foo")

    def test_class_def(self) -> None:
        assert classify_selection("class A:\n    x = 1") == ClassDef()

    def test_decorated_class_def(self) -> None:
        assert classify_selection("@dataclass\nclass A:\n    x: int") == ClassDef()

    def test_expression(self) -> None:
        assert classify_selection("x + 1") == Expression()

    def test_comparison_is_expression(self) -> None:
        assert classify_selection("x == 1") == Expression()

    @pytest.mark.parametrize(
        "text",
        [
            "x = 1",
            "total += 1",
            "for i in range(3):\n    pass",
            "if ready:\n    go()",
            "print(x)",
            "foo()\nbar()",
            "# note",
        ],
    )
    def test_statements(self, text: str) -> None:
        assert classify_selection(text) == Statement()

    def test_is_all_indented_false_on_blank(self) -> None:
        assert not is_all_indented("   \n")


class TestBuildSelectionScript:
    """Tests for build_selection_script()."""

    def test_blank_selection_raises(self) -> None:
        with pytest.raises(InputError, match="No code selected"):
            build_selection_script("\n   \n", EMPTY_CONTEXT)

    def test_layout(self) -> None:
        ctx = ExtractedContext(imports=("import os",), globals=("X = 1",))
        script = build_selection_script("print(X)", ctx)
        assert script.kind is ScriptKind.SELECTION
        assert script.lines == ("import os", "", "X = 1", "", SELECTION_MARKER, "print(X)")
        assert script.text.endswith("print(X)\n")

    def test_multi_line_import_split_into_lines(self) -> None:
        ctx = ExtractedContext(imports=("from typing import (\nAny,\n)",))
        script = build_selection_script("print(1)", ctx)
        assert script.lines[:3] == ("from typing import (", "Any,", ")")

    def test_indented_fragment_wrapped(self) -> None:
        text = "    total = 0\n    for i in range(3):\n        total += i"
        script = build_selection_script(text, EMPTY_CONTEXT)
        body_start = script.lines.index("def run_selection():")
        assert script.lines[body_start + 1 : body_start + 4] == (
            "        total = 0",
            "        for i in range(3):",
            "            total += i",
        )
        assert script.lines[-1] == "run_selection()"
        assert script.lines.count("run_selection()") == 1

    def test_expression_printed(self) -> None:
        script = build_selection_script("x + 1", EMPTY_CONTEXT)
        assert script.lines[-1] == "print('Expression result:', x + 1)"

    def test_expression_trimmed(self) -> None:
        script = build_selection_script("len(items)  \n", EMPTY_CONTEXT)
        assert script.lines[-1] == "print('Expression result:', len(items))"

    def test_expression_trailing_comment_not_printed(self) -> None:
        script = build_selection_script("x + 1  # bump", EMPTY_CONTEXT)
        assert script.lines[-1] == "print('Expression result:', x + 1)"
        assert "x + 1  # bump" in script.lines

    def test_multi_line_expression_kept_verbatim(self) -> None:
        script = build_selection_script("max(\n    a,\n    b,\n)", EMPTY_CONTEXT)
        assert script.lines[-4:] == (
            "print('Expression result:', max(",
            "    a,",
            "    b,",
            "))",
        )

    def test_several_calls_get_completion_marker(self) -> None:
        script = build_selection_script("foo()\nbar()", EMPTY_CONTEXT)
        assert script.lines[-1] == "print('Code executed successfully.')"
        assert "Expression result" not in script.text

    def test_decorated_function_gets_guarded_call(self) -> None:
        text = "@staticmethod\ndef foo():\n    return 42"
        script = build_selection_script(text, EMPTY_CONTEXT)
        assert script.text.count("result = foo()") == 1
        assert "Expression result" not in script.text

    def test_function_def_gets_guarded_call(self) -> None:
        script = build_selection_script("def foo():\n    return 42", EMPTY_CONTEXT)
        text = script.text
        assert text.count('if __name__ == "__main__":') == 1
        assert text.count("result = foo()") == 1
        assert "    if result is not None:" in script.lines
        assert '        print(f"Return value: {result}")' in script.lines

    def test_function_already_called_not_invoked_again(self) -> None:
        text = "def foo():\n    return 42\n\nprint(foo())"
        script = build_selection_script(text, EMPTY_CONTEXT)
        assert "result = foo()" not in script.text
        assert '__name__ == "__main__"' not in script.text

    def test_class_def_not_instrumented(self) -> None:
        script = build_selection_script("class A:\n    x = 1", EMPTY_CONTEXT)
        assert script.lines[-2:] == ("class A:", "    x = 1")

    def test_statement_gets_completion_marker(self) -> None:
        script = build_selection_script("x = 1", EMPTY_CONTEXT)
        assert script.lines[-1] == "print('Code executed successfully.')"

    def test_statement_with_print_unchanged(self) -> None:
        script = build_selection_script("x = 1\nprint(x)", EMPTY_CONTEXT)
        assert script.lines[-1] == "print(x)"
        assert "Code executed successfully." not in script.text

    def test_statement_starting_with_comment_unchanged(self) -> None:
        script = build_selection_script("# setup\nx = 1", EMPTY_CONTEXT)
        assert script.lines[-1] == "x = 1"


class TestSynthesizeSelectionScript:
    """Tests for the full buffer + range pipeline."""

    def test_uses_file_context(self) -> None:
        lines = [
            "import math",
            "",
            "class Circle:",
            "    r = 2",
            "",
            "RADIUS = 3",
            "area = math.pi * RADIUS ** 2",
        ]
        script = synthesize_selection_script(lines, SelectionRange(7, 8, 7, 999))
        assert script.lines[0] == "import math"
        assert "RADIUS = 3" in script.lines
        assert "    r = 2" not in script.lines
        assert script.lines[-1] == "print('Expression result:', math.pi * RADIUS ** 2)"

    def test_blank_selection_raises(self) -> None:
        lines = ["x = 1", "", "   ", "y = 2"]
        with pytest.raises(InputError, match="No code selected"):
            synthesize_selection_script(lines, SelectionRange(2, 1, 3, 999))

    def test_empty_buffer_raises(self) -> None:
        with pytest.raises(InputError):
            synthesize_selection_script([], SelectionRange(1, 1, 1, 1))


class TestScriptsAreValidPython:
    """Synthesized scripts compile for every classification."""

    @pytest.mark.parametrize(
        "selection",
        [
            "    total = 0\n    for i in range(3):\n        total += i",
            "def foo():\n    return 42",
            "class A:\n    x = 1",
            "RADIUS * 2",
            "area = RADIUS ** 2",
            "# note\nprint(RADIUS)",
            "RADIUS + 1  # bump",
            "math.floor(RADIUS)\nmath.ceil(RADIUS)",
            "# note",
            "@staticmethod\ndef foo():\n    return 42",
            "(RADIUS +  # partial\n    1)",
        ],
    )
    def test_compiles(self, selection: str) -> None:
        ctx = ExtractedContext(imports=("import math",), globals=("RADIUS = 3",))
        script = build_selection_script(selection, ctx)
        compile(script.text, "run_selection.py", "exec")

    def test_function_script_executes(self, capsys: pytest.CaptureFixture[str]) -> None:
        script = build_selection_script("def foo():\n    return 42", EMPTY_CONTEXT)
        exec(compile(script.text, "run_selection.py", "exec"), {"__name__": "__main__"})
        out = capsys.readouterr().out
        assert "Auto-executing function: foo" in out
        assert "Return value: 42" in out

    def test_expression_script_executes(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx = ExtractedContext(globals=("x = 1",))
        script = build_selection_script("x + 1", ctx)
        exec(compile(script.text, "run_selection.py", "exec"), {"__name__": "__main__"})
        assert capsys.readouterr().out == "Expression result: 2\n"

    def test_commented_expression_executes(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx = ExtractedContext(globals=("x = 1",))
        script = build_selection_script("x + 1  # bump", ctx)
        exec(compile(script.text, "run_selection.py", "exec"), {"__name__": "__main__"})
        assert capsys.readouterr().out == "Expression result: 2\n"

    def test_decorated_function_executes(self, capsys: pytest.CaptureFixture[str]) -> None:
        ctx = ExtractedContext(imports=("import functools",))
        text = "@functools.lru_cache(maxsize=None)\ndef foo():\n    return 42"
        script = build_selection_script(text, ctx)
        exec(compile(script.text, "run_selection.py", "exec"), {"__name__": "__main__"})
        assert "Return value: 42" in capsys.readouterr().out
