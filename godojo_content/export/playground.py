"""Playground and exercise metadata derived from built topics."""

import re

from godojo_content.ingestion.markdown import code_blocks
from godojo_content.models.sections import ExerciseTest, Playground

ENTRY_PACKAGE_MARKER = "package main"
ENTRY_FUNCTION_MARKER = "func main()"

OUTPUT_LANGUAGES = ("text", "bash", "output")

HINT_RE = re.compile(
    r"\*\*(?:Подсказк[аи]|Hints?):\*\*\s*(?P<hint>.*?)(?=\n[ \t]*\n|\*\*|\Z)",
    re.DOTALL,
)
_BULLET_RE = re.compile(r"^[ \t]*(?:[-*•]|\d+\.)[ \t]*")

_FUNCTION_WORDS = ("функци", "function")


def is_runnable(code: str) -> bool:
    """True if the snippet already declares both the entry package and function."""
    return ENTRY_PACKAGE_MARKER in code and ENTRY_FUNCTION_MARKER in code


def playground_template(code: str) -> str:
    """Return ``code`` unchanged if runnable, else wrapped in a main program."""
    if is_runnable(code):
        return code

    lines = ["package main", ""]
    if "fmt." in code:
        lines.extend(['import "fmt"', ""])
    lines.append("func main() {")
    lines.extend(f"    {line}" if line.strip() else "" for line in code.splitlines())
    lines.append("}")
    return "\n".join(lines) + "\n"


def expected_output(explanation: str) -> str | None:
    """Content of the last output/text/bash fence in ``explanation``, if any."""
    outputs = [block for block in code_blocks(explanation) if block.language in OUTPUT_LANGUAGES]
    if not outputs:
        return None
    return outputs[-1].code.strip() or None


def build_playground(code: str, explanation: str) -> Playground:
    return Playground(
        template=playground_template(code),
        runnable=is_runnable(code),
        expected_output=expected_output(explanation),
    )


def extract_hints(content: str) -> list[str]:
    """Hint lines following a bold ``Hint:`` marker, one per non-empty line."""
    hints = []
    for match in HINT_RE.finditer(content):
        for line in match.group("hint").splitlines():
            hint = _BULLET_RE.sub("", line).strip()
            if hint:
                hints.append(hint)
    return hints


def exercise_tests(title: str | None) -> list[ExerciseTest]:
    """Fixed checks every exercise solution is run against."""
    lowered = title.lower() if isinstance(title, str) else ""
    tests = [
        ExerciseTest(
            name="Compilation",
            kind="compile",
            description="The solution compiles without errors",
        )
    ]
    if any(word in lowered for word in _FUNCTION_WORDS):
        tests.append(
            ExerciseTest(
                name="Function defined",
                kind="function_exists",
                description="The required function is defined",
            )
        )
    tests.append(
        ExerciseTest(
            name="Execution",
            kind="run",
            description="The program runs without panicking",
        )
    )
    return tests
