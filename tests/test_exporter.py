"""Tests for the platform exporter."""

import hashlib
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from conftest import Project

from godojo_content.building import ContentBuilder
from godojo_content.errors import ExportError
from godojo_content.export import (
    GodojoExporter,
    exercise_tests,
    expected_output,
    extract_hints,
    html_to_nodes,
    is_runnable,
    plain_text,
    playground_template,
    render,
)
from godojo_content.export.exporter import package_checksum


def _read(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def exported(project: Project, tmp_path: Path) -> Path:
    """Build and export the fixture project, returning the export directory."""
    build_dir = tmp_path / "build"
    export_dir = tmp_path / "export"
    ContentBuilder(project.config, project.content_dir, build_dir).build()
    GodojoExporter(project.config, build_dir, export_dir).export()
    return export_dir


class TestPlayground:
    """Tests for playground template derivation."""

    def test_runnable_code_unchanged(self) -> None:
        code = 'package main\n\nfunc main() {\n    println("hi")\n}'
        assert is_runnable(code)
        assert playground_template(code) == code

    def test_snippet_wrapped(self) -> None:
        template = playground_template('x := 42\nfmt.Println(x)')
        assert "package main" in template
        assert "func main()" in template
        assert 'import "fmt"' in template
        assert "    x := 42\n" in template
        assert template.endswith("}\n")

    def test_snippet_without_fmt_has_no_import(self) -> None:
        template = playground_template("var x int\n_ = x")
        assert "import" not in template
        assert is_runnable(template)

    def test_expected_output_last_output_fence(self) -> None:
        explanation = "First:\n```text\nA\n```\nThen:\n```output\nB\n```\n```go\nC\n```\n"
        assert expected_output(explanation) == "B"

    def test_no_expected_output(self) -> None:
        assert expected_output("Nothing printed.") is None


class TestExerciseMetadata:
    def test_hints(self) -> None:
        content = "**Задача:** Do it.\n\n**Подсказки:**\n- First\n- Second\n\nMore text."
        assert extract_hints(content) == ["First", "Second"]

    def test_inline_hint(self) -> None:
        assert extract_hints("**Hint:** use a map") == ["use a map"]

    def test_hints_after_blank_line(self) -> None:
        content = "**Подсказка:**\n\n- Первая\n- Вторая\n"
        assert extract_hints(content) == ["Первая", "Вторая"]

    def test_no_hints(self) -> None:
        assert extract_hints("**Задача:** Do it.") == []

    def test_tests_for_function_exercise(self) -> None:
        kinds = [t.kind for t in exercise_tests("Функция обмена")]
        assert kinds == ["compile", "function_exists", "run"]

    def test_tests_without_title(self) -> None:
        assert [t.kind for t in exercise_tests(None)] == ["compile", "run"]

    def test_tests_for_plain_exercise(self) -> None:
        tests = exercise_tests("Базовые переменные")
        assert [t.kind for t in tests] == ["compile", "run"]
        assert tests[0].model_dump(by_alias=True)["type"] == "compile"


class TestRender:
    """Tests for Markdown rendering and display nodes."""

    def test_render(self) -> None:
        html, nodes = render("# Hi\n\nText **bold**")
        assert "<h1>Hi</h1>" in html
        assert nodes[0] == {"tag": "h1", "text": "Hi"}
        assert nodes[1]["tag"] == "p"
        assert nodes[1]["children"][1] == {"tag": "strong", "text": "bold"}

    def test_render_empty(self) -> None:
        assert render("   ") == ("", [])

    def test_attributes_kept(self) -> None:
        nodes = html_to_nodes('<p><a href="https://go.dev">Go</a></p>')
        link = {"tag": "a", "attrs": {"href": "https://go.dev"}, "text": "Go"}
        assert nodes == [{"tag": "p", "children": [link]}]

    def test_plain_text(self) -> None:
        text = "# Заголовок\n\n**Жирный** <b>текст</b>\n```go\nsecret()\n```\n"
        assert plain_text(text) == "заголовок жирный текст"


class TestGodojoExporter:
    """Tests for GodojoExporter.export."""

    def test_layout(self, exported: Path) -> None:
        for name in [
            "package.json",
            "export-report.json",
            "metadata/platform.json",
            "metadata/topics-index.json",
            "metadata/categories-index.json",
            "metadata/manifest.json",
            "metadata/categories/basics.yaml",
            "content/basics/variables.json",
            "search/index.json",
            "search/autocomplete.json",
        ]:
            assert (exported / name).is_file(), name
        assert (exported / "assets").is_dir()

    def test_enriched_topic(self, exported: Path) -> None:
        topic = _read(exported / "content/basics/variables.json")
        content = topic["content"]

        assert content["theoryHtml"].startswith("<p>")
        assert content["theoryNodes"][0]["tag"] == "p"
        assert content["summaryHtml"] == "<p>Мы разобрали объявление переменных.</p>"

        first = content["examples"][0]
        assert first["playground"]["runnable"] is True
        assert first["playground"]["expectedOutput"] == "1"
        assert "expectedOutput" not in content["examples"][1]["playground"]
        assert "<pre>" in first["explanationHtml"]

        basics, swap = content["exercises"]
        assert basics["hints"] == ["Используйте var", "Используйте :="]
        assert [t["type"] for t in basics["tests"]] == ["compile", "run"]
        assert [t["type"] for t in swap["tests"]] == ["compile", "function_exists", "run"]

        assert topic["progress"] == {
            "estimatedMinutes": 30,
            "difficulty": "Beginner",
            "requiredForCertificate": True,
            "bonusContent": False,
        }
        assert topic["navigation"] == {"previous": None, "next": None, "category": "basics"}

    def test_navigation_follows_modules(
        self,
        project: Project,
        tmp_path: Path,
        topic_body: Callable[..., str],
        topic_front_matter: dict[str, Any],
    ) -> None:
        topic_front_matter.update(slug="constants", module=2, title="Константы")
        project.write_doc("basics/02-constants/topic.md", topic_front_matter, topic_body(50))
        build_dir = tmp_path / "build"
        ContentBuilder(project.config, project.content_dir, build_dir).build()
        GodojoExporter(project.config, build_dir, tmp_path / "export").export()

        first = _read(tmp_path / "export/content/basics/variables.json")
        second = _read(tmp_path / "export/content/basics/constants.json")
        assert first["navigation"]["previous"] is None
        assert first["navigation"]["next"]["slug"] == "constants"
        assert second["navigation"]["previous"] == {
            "slug": "variables",
            "category": "basics",
            "module": 1,
            "title": "Переменные",
        }

    def test_search_index(self, exported: Path) -> None:
        index = _read(exported / "search/index.json")
        document = index["documents"][0]
        assert document["id"] == "basics_variables"
        assert document["weight"] == {"module": 1, "difficulty": 1.0, "popularity": 1.0}
        assert "переменные" in document["searchText"]
        assert "fmt.println" not in document["searchText"]

        autocomplete = _read(exported / "search/autocomplete.json")
        assert autocomplete == [
            {"id": "basics_variables", "title": "Переменные", "category": "basics", "module": 1}
        ]

    def test_package_and_report(self, exported: Path) -> None:
        package = _read(exported / "package.json")
        assert package["type"] == "godojo-content-package"
        assert package["validation"]["checksum"].startswith("sha256:")
        assert package["validation"]["fileCount"] > 0
        assert package["instructions"]["endpoint"] == "https://api.godojo.dev/v1/content/upload"

        report = _read(exported / "export-report.json")
        assert report["readyForUpload"] is True
        assert report["stats"]["topics"] == 1
        assert report["stats"]["exercises"] == 2
        assert report["stats"]["codeExamples"] == 3

    def test_platform_metadata(self, exported: Path) -> None:
        platform = _read(exported / "metadata/platform.json")
        assert platform["version"] == "v1"
        assert platform["source"]["language"] == "ru"
        assert platform["content"]["modules"] == {
            "total": 79,
            "available": 1,
            "range": {"min": 1, "max": 1},
        }
        assert platform["features"]["multiLanguage"] is True

    def test_missing_topic_file_is_warning(self, project: Project, tmp_path: Path) -> None:
        build_dir = tmp_path / "build"
        ContentBuilder(project.config, project.content_dir, build_dir).build()
        (build_dir / "topics/basics/variables.json").unlink()

        result = GodojoExporter(project.config, build_dir, tmp_path / "export").export()
        assert result.topics == 0
        assert result.warnings == ["Missing build file for topic basics/variables"]
        assert _read(tmp_path / "export/export-report.json")["readyForUpload"] is False

    def test_missing_manifest(self, project: Project, tmp_path: Path) -> None:
        with pytest.raises(ExportError, match="run the build first"):
            GodojoExporter(project.config, tmp_path / "build", tmp_path / "export").export()

    def test_previous_export_replaced(self, project: Project, tmp_path: Path) -> None:
        stale = tmp_path / "export" / "content" / "old.json"
        stale.parent.mkdir(parents=True)
        stale.write_text("{}", encoding="utf-8")
        build_dir = tmp_path / "build"
        ContentBuilder(project.config, project.content_dir, build_dir).build()
        GodojoExporter(project.config, build_dir, tmp_path / "export").export()
        assert not stale.exists()


class TestPackageChecksum:
    def test_digest_over_paths_and_bytes(self, tmp_path: Path) -> None:
        (tmp_path / "b.json").write_bytes(b"B")
        (tmp_path / "a.json").write_bytes(b"A")
        files = [tmp_path / "b.json", tmp_path / "a.json"]

        expected = hashlib.sha256(b"a.json\0Ab.json\0B").hexdigest()
        assert package_checksum(tmp_path, files) == f"sha256:{expected}"


class TestMalformedBuildOutput:
    """Damaged build records degrade to warnings instead of aborting the export."""

    @pytest.fixture
    def build_dir(self, project: Project, tmp_path: Path) -> Path:
        build_dir = tmp_path / "build"
        ContentBuilder(project.config, project.content_dir, build_dir).build()
        return build_dir

    def _rewrite_topic(self, build_dir: Path, **changes: Any) -> None:
        path = build_dir / "topics/basics/variables.json"
        topic = _read(path)
        for key, value in changes.items():
            topic["content"][key] = value
        path.write_text(json.dumps(topic), encoding="utf-8")

    def test_bad_exercise_fields_left_out(
        self, project: Project, build_dir: Path, tmp_path: Path
    ) -> None:
        exercises = _read(build_dir / "topics/basics/variables.json")["content"]["exercises"]
        exercises[0]["title"] = None
        exercises[1]["content"] = 5
        self._rewrite_topic(build_dir, exercises=exercises, summary=["not", "text"])

        result = GodojoExporter(project.config, build_dir, tmp_path / "export").export()
        assert result.topics == 1

        content = _read(tmp_path / "export/content/basics/variables.json")["content"]
        first, second = content["exercises"]
        assert [t["type"] for t in first["tests"]] == ["compile", "run"]
        assert "hints" not in second
        assert "contentHtml" not in second
        assert "summaryHtml" not in content
        assert content["theoryHtml"].startswith("<p>")
        assert any("exercise 2 hints" in w for w in result.warnings)
        assert any("section 'summary'" in w for w in result.warnings)

    def test_bad_example_playground_left_out(
        self, project: Project, build_dir: Path, tmp_path: Path
    ) -> None:
        examples = _read(build_dir / "topics/basics/variables.json")["content"]["examples"]
        examples[0]["code"] = 42
        self._rewrite_topic(build_dir, examples=[*examples, "not a record"])

        result = GodojoExporter(project.config, build_dir, tmp_path / "export").export()
        content = _read(tmp_path / "export/content/basics/variables.json")["content"]
        assert len(content["examples"]) == 3
        assert "playground" not in content["examples"][0]
        assert content["examples"][1]["playground"]["runnable"] is True
        assert "basics/variables: example 4 is not a record, skipped" in result.warnings

    def test_unsafe_index_entry_not_exported(
        self, project: Project, build_dir: Path, tmp_path: Path
    ) -> None:
        escaped = tmp_path / "escaped.json"
        escaped.write_text(json.dumps({"slug": "escaped", "content": {}}), encoding="utf-8")
        index_path = build_dir / "topics-index.json"
        index = _read(index_path)
        index.append({"category": "..", "slug": "../escaped"})
        index_path.write_text(json.dumps(index), encoding="utf-8")

        export_dir = tmp_path / "export"
        result = GodojoExporter(project.config, build_dir, export_dir).export()
        assert result.topics == 1
        assert "Invalid topic id ../../escaped, not exported" in result.warnings
        assert not (export_dir / "escaped.json").exists()
        assert sorted(p.name for p in (export_dir / "content").rglob("*.json")) == [
            "variables.json"
        ]
