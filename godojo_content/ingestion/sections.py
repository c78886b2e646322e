"""Heading-driven section extractor for tutorial topics.

The extractor relies on a fixed vocabulary of ``##`` headings (the document
schema). Any change to the heading texts below is a breaking change for the
corpus and must bump ``DOCUMENT_SCHEMA_VERSION``.
"""

import logging
import re

from godojo_content.ingestion.markdown import FENCE_RE, code_blocks, fenced_spans, in_spans
from godojo_content.models.sections import CodeExample, Exercise, ParsedSections

logger = logging.getLogger(__name__)

DOCUMENT_SCHEMA_VERSION = 1

# Canonical section name -> accepted ``##`` heading texts
SECTION_HEADINGS: dict[str, tuple[str, ...]] = {
    "objectives": ("🎯 Что вы изучите", "🎯 What you will learn"),
    "theory": ("📚 Теоретическая часть", "📚 Theory"),
    "examples": ("💻 Практические примеры", "💻 Practical examples"),
    "exercises": ("🎯 Практические упражнения", "🎯 Practical exercises"),
    "bestPractices": ("🔧 Лучшие практики", "🔧 Best practices"),
    "commonMistakes": ("⚠️ Частые ошибки", "⚠️ Common mistakes"),
    "realWorld": ("🌍 Применение в реальном мире", "🌍 Real-world applications"),
    "summary": ("📝 Резюме", "📝 Summary"),
}

HEADING_TO_SECTION: dict[str, str] = {
    heading: name for name, variants in SECTION_HEADINGS.items() for heading in variants
}

# Sections a topic is expected to have
RECOMMENDED_SECTIONS: tuple[str, ...] = ("objectives", "theory", "examples", "exercises")

_TEXT_SECTIONS: dict[str, str] = {
    "theory": "theory",
    "bestPractices": "best_practices",
    "commonMistakes": "common_mistakes",
    "realWorld": "real_world",
    "summary": "summary",
}

SECTION_RE = re.compile(r"^## (.+?)[ \t]*$", re.MULTILINE)
SUBSECTION_RE = re.compile(r"^### (.+?)[ \t]*$", re.MULTILINE)
EXERCISE_HEADING_RE = re.compile(
    r"^### (?:Упражнение|Exercise) (\d+):[ \t]*(.+?)[ \t]*$", re.MULTILINE
)


def _split_by(pattern: re.Pattern[str], text: str) -> list[tuple[re.Match[str], str]]:
    """Split ``text`` at heading matches outside code blocks.

    Returns ``(match, content)`` pairs where content runs up to the next match
    of the same pattern.
    """
    spans = fenced_spans(text)
    matches = [m for m in pattern.finditer(text) if not in_spans(m.start(), spans)]
    parts = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        parts.append((match, text[match.end():end]))
    return parts


def section_names(body: str) -> set[str]:
    """Canonical names of the recognised ``##`` sections present in ``body``."""
    return {
        HEADING_TO_SECTION[m.group(1).strip()]
        for m, _ in _split_by(SECTION_RE, body)
        if m.group(1).strip() in HEADING_TO_SECTION
    }


def count_exercises(body: str) -> int:
    """Number of ``### Exercise N: Title`` headings outside code blocks."""
    return len(_split_by(EXERCISE_HEADING_RE, body))


class SectionExtractor:
    """Splits a topic body into canonical sections.

    Unrecognised ``##`` headings end the preceding section and their content
    is dropped from the structured output.

    Args:
        code_language: Fence language tag of the tutorial's code examples.
    """

    def __init__(self, code_language: str = "go") -> None:
        self._code_language = code_language.lower()

    def extract(self, body: str) -> ParsedSections:
        """Extract the canonical sections of ``body``."""
        text_sections: dict[str, list[str]] = {field: [] for field in _TEXT_SECTIONS.values()}
        examples: list[CodeExample] = []
        exercises: list[Exercise] = []

        for match, content in _split_by(SECTION_RE, body):
            heading = match.group(1).strip()
            name = HEADING_TO_SECTION.get(heading)
            if name is None:
                logger.debug("Ignoring unrecognised section heading: %s", heading)
                continue

            if name == "examples":
                examples.extend(self.extract_examples(content))
            elif name == "exercises":
                exercises.extend(self.extract_exercises(content))
            elif name in _TEXT_SECTIONS:
                stripped = content.strip()
                if stripped:
                    text_sections[_TEXT_SECTIONS[name]].append(stripped)

        return ParsedSections(
            examples=examples,
            exercises=exercises,
            **{field: "\n\n".join(parts) for field, parts in text_sections.items()},
        )

    def extract_examples(self, content: str) -> list[CodeExample]:
        """Decompose the examples section into ``###`` titled code examples."""
        examples = []
        for match, sub_content in _split_by(SUBSECTION_RE, content):
            code = ""
            for block in code_blocks(sub_content):
                if block.language == self._code_language:
                    code = block.code
                    break
            examples.append(
                CodeExample(
                    title=match.group(1).strip(),
                    code=code,
                    explanation=self._strip_code(sub_content).strip(),
                )
            )
        return examples

    def extract_exercises(self, content: str) -> list[Exercise]:
        """Decompose the exercises section into numbered exercises.

        Only ``### Exercise N: Title`` headings start an exercise; an
        exercise's content runs up to the next ``###`` heading of any kind.
        """
        exercises = []
        for match, sub_content in _split_by(SUBSECTION_RE, content):
            exercise = EXERCISE_HEADING_RE.match(match.group(0))
            if exercise is None:
                continue
            number = int(exercise.group(1))
            if number < 1:
                logger.debug("Skipping exercise with number %d", number)
                continue
            exercises.append(
                Exercise(
                    number=number,
                    title=exercise.group(2).strip(),
                    content=sub_content.strip(),
                )
            )
        return exercises

    def _strip_code(self, text: str) -> str:
        """Remove the code-language fences, keep output and other blocks."""

        def replace(match: re.Match[str]) -> str:
            info = match.group("info").strip()
            language = info.split()[0].lower() if info else ""
            return "" if language == self._code_language else match.group(0)

        return FENCE_RE.sub(replace, text)
