"""Tests for the Markdown helpers and the section extractor."""

from collections.abc import Callable

from godojo_content.ingestion.markdown import (
    code_blocks,
    count_words,
    headings,
    links,
    slugify,
    split_fenced,
)
from godojo_content.ingestion.sections import (
    SectionExtractor,
    count_exercises,
    section_names,
)


class TestMarkdownHelpers:
    """Tests for the line-oriented Markdown helpers."""

    def test_code_blocks(self) -> None:
        text = "intro\n```go\nx := 1\n```\n\n~~~\nplain\n~~~\n"
        blocks = code_blocks(text)
        assert [(b.language, b.code) for b in blocks] == [("go", "x := 1"), ("", "plain")]

    def test_count_words_ignores_code_and_front_matter(self) -> None:
        text = "---\ntitle: a b c\n---\none two\n```go\nthree four five\n```\nsix"
        assert count_words(text) == 3

    def test_headings_outside_code(self) -> None:
        text = "# Title\n```bash\n# comment\n```\n## Sub\n"
        assert [(level, title) for level, title, _ in headings(text)] == [(1, "Title"), (2, "Sub")]

    def test_links_outside_code(self) -> None:
        text = "[Go](https://go.dev)\n```\n[x](y)\n```\n"
        assert links(text) == [("Go", "https://go.dev")]

    def test_split_fenced_concatenates_back(self) -> None:
        text = "a\n```go\nb\n```\nc"
        segments = split_fenced(text)
        assert [is_code for is_code, _ in segments] == [False, True, False]
        assert "".join(segment for _, segment in segments) == text

    def test_slugify(self) -> None:
        assert slugify("Go Basics: Variables!") == "go-basics-variables"
        assert slugify("Переменные") == ""


class TestSectionExtractor:
    """Tests for SectionExtractor.extract."""

    def test_fixture_topic(self, topic_body: Callable[..., str]) -> None:
        sections = SectionExtractor("go").extract(topic_body(20))

        assert sections.theory.startswith("слово0")
        assert [e.title for e in sections.examples] == [
            "Пример 1: Объявление",
            "Пример 2: Короткое объявление",
            "Пример 3: Константы",
        ]
        assert sections.examples[0].code.startswith("package main")
        assert "```go" not in sections.examples[0].explanation
        assert "```text" in sections.examples[0].explanation
        assert [(e.number, e.title) for e in sections.exercises] == [
            (1, "Базовые переменные"),
            (2, "Функция обмена"),
        ]
        assert sections.best_practices.startswith("Используйте")
        assert sections.summary == "Мы разобрали объявление переменных."

    def test_no_exercises_section(self) -> None:
        sections = SectionExtractor().extract("## 📚 Theory\n\nText only.\n")
        assert sections.exercises == []
        assert sections.theory == "Text only."

    def test_example_takes_first_matching_block(self) -> None:
        body = (
            "## 💻 Practical examples\n\n### Example\n\n"
            "```bash\ngo run main.go\n```\n\n"
            "```go\nfmt.Println(1)\n```\n\n```go\nfmt.Println(2)\n```\n"
        )
        example = SectionExtractor("go").extract(body).examples[0]
        assert example.code == "fmt.Println(1)"
        assert "go run main.go" in example.explanation
        assert "fmt.Println(2)" not in example.explanation

    def test_example_without_code(self) -> None:
        body = "## 💻 Practical examples\n\n### Idea\n\nJust words.\n"
        example = SectionExtractor().extract(body).examples[0]
        assert example.code == ""
        assert example.explanation == "Just words."

    def test_unrecognised_heading_dropped(self) -> None:
        body = "## 📚 Theory\n\nKept.\n\n## Random notes\n\nDropped.\n\n## 📝 Summary\n\nEnd.\n"
        sections = SectionExtractor().extract(body)
        assert sections.theory == "Kept."
        assert sections.summary == "End."
        assert "Dropped" not in sections.model_dump_json()

    def test_heading_inside_code_is_not_a_section(self) -> None:
        body = "## 📚 Theory\n\n```markdown\n## 📝 Summary\n```\n"
        sections = SectionExtractor().extract(body)
        assert sections.summary == ""
        assert "## 📝 Summary" in sections.theory

    def test_non_exercise_subsections_skipped(self) -> None:
        body = (
            "## 🎯 Practical exercises\n\n### Preface\n\nRead first.\n\n"
            "### Exercise 1: Loops\n\nWrite a loop.\n\n### Exercise 0: Invalid\n\nNope.\n"
        )
        sections = SectionExtractor().extract(body)
        assert [(e.number, e.title, e.content) for e in sections.exercises] == [
            (1, "Loops", "Write a loop.")
        ]


class TestSectionHelpers:
    def test_section_names(self, topic_body: Callable[..., str]) -> None:
        names = section_names(topic_body(5))
        assert {"objectives", "theory", "examples", "exercises", "summary"} <= names

    def test_count_exercises(self, topic_body: Callable[..., str]) -> None:
        assert count_exercises(topic_body(5)) == 2
        assert count_exercises("no exercises here") == 0
