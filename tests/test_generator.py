"""Tests for repository bootstrapping."""

from pathlib import Path

import pytest

from godojo_content.authoring import StructureGenerator
from godojo_content.config import load_content_config
from godojo_content.ingestion.frontmatter import parse_front_matter
from godojo_content.validation import StructureValidator


class TestStructureGenerator:
    """Tests for StructureGenerator.generate."""

    def test_generate_all(self, tmp_path: Path) -> None:
        result = StructureGenerator(tmp_path).generate("all")

        config = load_content_config(tmp_path / "content.config.json")
        assert config.slugs == ["basics", "advanced", "web", "concurrency", "testing"]
        for slug in config.slugs:
            assert (tmp_path / "content" / slug).is_dir()
        for name in [".gitignore", "README.md", "CONTRIBUTING.md"]:
            assert (tmp_path / name).is_file()
        assert tmp_path / "content" / "basics" / "01-introduction" / "topic.md" in result.created
        assert result.skipped == []

    def test_sample_is_valid(self, tmp_path: Path) -> None:
        StructureGenerator(tmp_path).generate("all")
        config = load_content_config(tmp_path / "content.config.json")

        validator = StructureValidator(config, tmp_path / "content")
        assert validator.validate_category(config.category("basics")) == []

        topic = tmp_path / "content" / "basics" / "01-introduction" / "topic.md"
        front_matter, _ = parse_front_matter(topic.read_text(encoding="utf-8"))
        assert front_matter["module"] == 1
        assert front_matter["authorId"] == "system"

    def test_single_target(self, tmp_path: Path) -> None:
        result = StructureGenerator(tmp_path).generate("docs")
        assert sorted(p.name for p in result.created) == ["CONTRIBUTING.md", "README.md"]
        assert not (tmp_path / "content").exists()

    def test_directories_follow_existing_config(self, tmp_path: Path) -> None:
        (tmp_path / "content.config.json").write_text(
            '{"structure": {"defaultLanguage": "en", "languages": ["en"]},'
            ' "categories": [{"slug": "intro", "titleLocalized": {"en": "Intro"},'
            ' "modules": "1-5", "difficulty": "Beginner", "estimatedHours": 2}],'
            ' "quality": {}}',
            encoding="utf-8",
        )
        StructureGenerator(tmp_path).generate("directories")
        assert [p.name for p in (tmp_path / "content").iterdir()] == ["intro"]

    def test_existing_files_not_overwritten(self, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"
        readme.write_text("mine", encoding="utf-8")

        result = StructureGenerator(tmp_path).generate("all")
        assert readme in result.skipped
        assert readme.read_text(encoding="utf-8") == "mine"

        again = StructureGenerator(tmp_path).generate("all")
        assert again.created == []

    def test_unknown_target(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown target"):
            StructureGenerator(tmp_path).generate("everything")
