"""Tests for data models."""

import pytest
from pydantic import ValidationError

from godojo_content.models import (
    BuiltTopic,
    CodeExample,
    Exercise,
    ExerciseTest,
    Finding,
    ParsedSections,
    Playground,
    Report,
    Severity,
)
from godojo_content.models.author import AuthorProfile
from godojo_content.models.built import Manifest, ManifestStats
from godojo_content.models.document import Document


class TestFinding:
    def test_constructors(self) -> None:
        blocking = Finding.blocking("a.md", "broken")
        advisory = Finding.advisory("a.md", "style")
        assert blocking.severity is Severity.BLOCKING
        assert blocking.is_blocking
        assert not advisory.is_blocking
        assert str(blocking) == "[blocking] a.md: broken"

    def test_frozen(self) -> None:
        finding = Finding.advisory("a.md", "style")
        with pytest.raises(ValidationError):
            finding.message = "other"


class TestReport:
    """Reports are accumulated immutably."""

    def test_with_findings_returns_new_report(self) -> None:
        empty = Report(title="Quality")
        report = empty.with_findings([Finding.advisory("a.md", "x")])
        assert empty.checked == 0
        assert empty.findings == ()
        assert report.checked == 1
        assert report.title == "Quality"
        assert report.ok
        assert report.exit_code == 0

    def test_blocking_sets_exit_code(self) -> None:
        report = Report().with_findings(
            [Finding.blocking("a.md", "x"), Finding.advisory("b.md", "y")], checked=2
        )
        assert report.checked == 2
        assert [f.file_path for f in report.blocking] == ["a.md"]
        assert [f.file_path for f in report.advisory] == ["b.md"]
        assert not report.ok
        assert report.exit_code == 1

    def test_merge(self) -> None:
        first = Report(title="Structure").with_findings([]).with_passed("fine")
        second = Report(title="Quality").with_findings([Finding.blocking("a.md", "x")])
        merged = first.merge(second)
        assert merged.title == "Structure"
        assert merged.checked == 2
        assert merged.passed == ("fine",)
        assert len(merged.findings) == 1


class TestSections:
    def test_camel_case_aliases(self) -> None:
        sections = ParsedSections(best_practices="Use gofmt", real_world="CLI tools")
        data = sections.model_dump(by_alias=True)
        assert data["bestPractices"] == "Use gofmt"
        assert data["realWorld"] == "CLI tools"
        assert data["commonMistakes"] == ""

    def test_exercise_number_positive(self) -> None:
        with pytest.raises(ValidationError):
            Exercise(number=0, title="Invalid")

    def test_exercise_test_serializes_kind_as_type(self) -> None:
        test = ExerciseTest(name="Compilation", kind="compile", description="Compiles")
        assert test.model_dump(by_alias=True) == {
            "name": "Compilation",
            "type": "compile",
            "description": "Compiles",
        }

    def test_playground_alias(self) -> None:
        playground = Playground(template="package main", runnable=True, expected_output="1")
        assert playground.model_dump(by_alias=True)["expectedOutput"] == "1"


class TestBuiltTopic:
    """Tests for build output records."""

    def _topic(self) -> BuiltTopic:
        return BuiltTopic(
            slug="variables",
            category="basics",
            front_matter={"title": "Переменные", "module": 1, "category": "ignored"},
            content=ParsedSections(
                examples=[
                    CodeExample(
                        title="Example",
                        code="x := 1",
                        playground=Playground(template="t", runnable=False),
                    )
                ],
                exercises=[Exercise(number=1, title="Task", hints=["hint"])],
            ),
        )

    def test_to_record_excludes_export_fields(self) -> None:
        record = self._topic().to_record()
        assert record["category"] == "basics"
        assert record["slug"] == "variables"
        assert record["content"]["examples"][0] == {
            "title": "Example",
            "code": "x := 1",
            "explanation": "",
        }
        assert record["content"]["exercises"][0] == {"number": 1, "title": "Task", "content": ""}
        assert record["stats"]["readingTimeMinutes"] == 0

    def test_front_matter_keys_come_first(self) -> None:
        assert list(self._topic().to_record())[:2] == ["title", "module"]

    @pytest.mark.parametrize("value, expected", [(3, 3), ("3", None), (True, None), (None, None)])
    def test_module(self, value: object, expected: int | None) -> None:
        topic = BuiltTopic(slug="s", category="c", front_matter={"module": value})
        assert topic.module == expected


class TestManifest:
    def test_to_record(self) -> None:
        manifest = Manifest(
            generated="2024-01-15T12:00:00+00:00",
            platform="godojo.dev",
            language="ru",
            repository="golang-book-ru",
            stats=ManifestStats(topics=2, code_examples=6),
            categories=["basics"],
            modules_range=(1, 2),
        )
        record = manifest.to_record()
        assert record["stats"]["codeExamples"] == 6
        assert record["structure"]["modulesRange"] == {"min": 1, "max": 2}

    def test_empty_range(self) -> None:
        manifest = Manifest(generated="now", platform="p", language="ru", repository="r")
        assert manifest.to_record()["structure"]["modulesRange"] is None


class TestDocumentAndProfile:
    def test_document_index_detection(self) -> None:
        assert Document(file_path="content/basics/index.md").is_category_index
        assert not Document(file_path="content/basics/01-x/topic.md").is_category_index

    def test_profile_validation(self) -> None:
        with pytest.raises(ValidationError):
            AuthorProfile(name="", email="a@b.c", author_id="a")
        with pytest.raises(ValidationError):
            AuthorProfile(name="Ada", email="no-at-sign", author_id="ada")

    def test_profile_aliases(self) -> None:
        profile = AuthorProfile(name="Ada", email="ada@example.com", author_id="ada")
        data = profile.model_dump(mode="json", by_alias=True)
        assert data["authorId"] == "ada"
        assert data["contentCreated"] == 0
        assert AuthorProfile.model_validate(data) == profile
