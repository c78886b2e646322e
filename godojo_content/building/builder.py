"""Content builder: raw Markdown tree -> normalized JSON/YAML records."""

import json
import logging
import math
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from godojo_content.config import ContentConfig, is_slug
from godojo_content.errors import BuildError, FrontMatterError
from godojo_content.ingestion.markdown import count_words
from godojo_content.ingestion.parser import DocumentParser
from godojo_content.ingestion.scanner import list_dirs
from godojo_content.ingestion.sections import SectionExtractor
from godojo_content.models.built import (
    BuiltCategory,
    BuiltTopic,
    Manifest,
    ManifestStats,
    TopicRef,
    TopicStats,
)
from godojo_content.models.document import Document

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
CATEGORY_INDEX_FILE = "index.md"
TOPIC_FILE = "topic.md"

TOPICS_INDEX_FILE = "topics-index.json"
CATEGORIES_INDEX_FILE = "categories-index.json"
MANIFEST_FILE = "manifest.json"

_NUMBER_PREFIX_RE = re.compile(r"^\d+-")


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` as indented UTF-8 JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def write_yaml(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False),
        encoding="utf-8",
    )


def reading_time(words: int) -> int:
    """Minutes needed to read ``words`` words."""
    return math.ceil(words / WORDS_PER_MINUTE)


def topic_slug(document: Document, topic_dir: Path) -> str:
    """Front matter slug, else the directory name without its number prefix."""
    slug = document.get("slug")
    if isinstance(slug, str) and slug.strip():
        return slug.strip()
    return _NUMBER_PREFIX_RE.sub("", topic_dir.name)


@dataclass
class BuildFailure:
    """A file that could not be built."""

    file_path: str
    reason: str


@dataclass
class BuildResult:
    """Outcome of one build invocation."""

    output_dir: Path
    topics: list[BuiltTopic] = field(default_factory=list)
    categories: list[BuiltCategory] = field(default_factory=list)
    failures: list[BuildFailure] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    manifest: Manifest | None = None

    @property
    def ok(self) -> bool:
        """False only when topics were attempted and every one failed."""
        return bool(self.topics) or not self.failures


class ContentBuilder:
    """Builds per-topic and per-category records from the content tree.

    Each invocation regenerates the whole output: previous topic and category
    files are removed before writing. A file that cannot be parsed is
    recorded as a failure and skipped; configuration problems are raised
    before any file is touched.

    Args:
        config: Validated content configuration.
        content_dir: Root of the Markdown tree.
        output_dir: Build output directory.
        clock: Callable returning the build timestamp (injectable for tests).
    """

    def __init__(
        self,
        config: ContentConfig,
        content_dir: str | Path,
        output_dir: str | Path,
        clock: Any = None,
    ) -> None:
        self._config = config
        self._content_dir = Path(content_dir)
        self._output_dir = Path(output_dir)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._parser = DocumentParser(display_root=self._content_dir.parent)
        self._extractor = SectionExtractor(code_language=config.structure.code_language)

    def build(self) -> BuildResult:
        """Scan, transform and write the full build output.

        Raises:
            BuildError: If the content directory does not exist.
        """
        if not self._content_dir.is_dir():
            raise BuildError(f"Content directory not found: {self._content_dir}")

        result = BuildResult(output_dir=self._output_dir)
        for category_dir in list_dirs(self._content_dir):
            self._scan_category(category_dir, result)

        self._reset_output()
        self._write_records(result)
        self._write_indexes(result)
        self._write_manifest(result)

        logger.info(
            "Built %d topics in %d categories (%d failed)",
            len(result.topics),
            len(result.categories),
            len(result.failures),
        )
        return result

    def build_topic(self, document: Document, category: str, topic_dir: Path) -> BuiltTopic:
        """Transform one parsed topic document into its output record."""
        sections = self._extractor.extract(document.body)
        words = count_words(document.body)
        front_matter = dict(document.front_matter)
        slug = topic_slug(document, topic_dir)
        front_matter["slug"] = slug
        return BuiltTopic(
            slug=slug,
            category=category,
            front_matter=front_matter,
            content=sections,
            stats=TopicStats(
                word_count=words,
                code_example_count=len(sections.examples),
                exercise_count=len(sections.exercises),
                reading_time_minutes=reading_time(words),
            ),
        )

    def _scan_category(self, category_dir: Path, result: BuildResult) -> None:
        slug = category_dir.name
        if not is_slug(slug):
            self._fail(result, self._parser.display_path(category_dir), "Invalid category name")
            return
        front_matter: dict[str, Any] | None = None

        index_path = category_dir / CATEGORY_INDEX_FILE
        if index_path.is_file():
            document = self._parse_or_fail(index_path, result)
            if document is not None:
                front_matter = dict(document.front_matter)
        else:
            logger.debug("No %s in %s", CATEGORY_INDEX_FILE, category_dir)

        topics: list[BuiltTopic] = []
        seen: dict[str, str] = {}
        for topic_dir in list_dirs(category_dir):
            topic_path = topic_dir / TOPIC_FILE
            if not topic_path.is_file():
                logger.debug("Skipping %s: no %s", topic_dir, TOPIC_FILE)
                continue
            document = self._parse_or_fail(topic_path, result)
            if document is None:
                continue

            # The slug names the output file, so it must be unique and path-safe
            topic_id = topic_slug(document, topic_dir)
            display = self._parser.display_path(topic_path)
            if not is_slug(topic_id):
                self._fail(result, display, f"Invalid topic slug '{topic_id}'")
                continue
            if topic_id in seen:
                reason = f"Duplicate slug '{topic_id}' (also in {seen[topic_id]})"
                self._fail(result, display, reason)
                continue
            seen[topic_id] = display
            topics.append(self.build_topic(document, slug, topic_dir))

        result.topics.extend(topics)
        if front_matter is not None:
            result.categories.append(
                BuiltCategory(
                    slug=slug,
                    front_matter=front_matter,
                    topics=[
                        TopicRef(slug=t.slug, title=t.front_matter.get("title"), module=t.module)
                        for t in topics
                    ],
                )
            )

    def _parse_or_fail(self, path: Path, result: BuildResult) -> Document | None:
        try:
            return self._parser.parse(path)
        except (FrontMatterError, OSError, ValueError) as exc:
            self._fail(result, self._parser.display_path(path), str(exc))
            return None

    @staticmethod
    def _fail(result: BuildResult, display: str, reason: str) -> None:
        logger.warning("Skipping %s: %s", display, reason)
        result.failures.append(BuildFailure(file_path=display, reason=reason))

    def _reset_output(self) -> None:
        for name in ("topics", "categories"):
            target = self._output_dir / name
            if target.exists():
                shutil.rmtree(target)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def _write_records(self, result: BuildResult) -> None:
        for topic in result.topics:
            path = self._output_dir / "topics" / topic.category / f"{topic.slug}.json"
            write_json(path, topic.to_record())
            result.written.append(path)

        for category in result.categories:
            path = self._output_dir / "categories" / f"{category.slug}.yaml"
            write_yaml(path, category.to_record())
            result.written.append(path)

    def _write_indexes(self, result: BuildResult) -> None:
        topics_index = self._output_dir / TOPICS_INDEX_FILE
        write_json(topics_index, [topic.index_entry() for topic in result.topics])
        categories_index = self._output_dir / CATEGORIES_INDEX_FILE
        write_json(categories_index, [category.index_entry() for category in result.categories])
        result.written.extend([topics_index, categories_index])

    def _write_manifest(self, result: BuildResult) -> None:
        modules = [t.module for t in result.topics if t.module is not None]
        manifest = Manifest(
            generated=self._clock().isoformat(),
            platform=self._config.godojo.platform,
            language=self._config.structure.default_language,
            repository=self._config.godojo.repository,
            stats=ManifestStats(
                categories=len(result.categories),
                topics=len(result.topics),
                exercises=sum(t.stats.exercise_count for t in result.topics),
                code_examples=sum(t.stats.code_example_count for t in result.topics),
                failed=len(result.failures),
            ),
            categories=[c.slug for c in result.categories],
            modules_range=(min(modules), max(modules)) if modules else None,
        )
        path = self._output_dir / MANIFEST_FILE
        write_json(path, manifest.to_record())
        result.written.append(path)
        result.manifest = manifest
