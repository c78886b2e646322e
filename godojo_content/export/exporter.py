"""Packages build output for upload to the godojo platform."""

import hashlib
import json
import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from godojo_content.building.builder import (
    CATEGORIES_INDEX_FILE,
    MANIFEST_FILE,
    TOPICS_INDEX_FILE,
    write_json,
)
from godojo_content.config import ContentConfig, is_slug
from godojo_content.errors import ExportError
from godojo_content.export.playground import build_playground, exercise_tests, extract_hints
from godojo_content.export.render import plain_text, render, render_html

logger = logging.getLogger(__name__)

PACKAGE_TYPE = "godojo-content-package"
PACKAGE_FILE = "package.json"
REPORT_FILE = "export-report.json"
PLATFORM_FILE = "platform.json"
SEARCH_INDEX_FILE = "index.json"
AUTOCOMPLETE_FILE = "autocomplete.json"

EXPORT_SUBDIRS = ("content", "metadata", "search", "assets")
RENDERED_SECTIONS = ("theory", "bestPractices", "commonMistakes", "realWorld", "summary")
DEFAULT_ESTIMATED_MINUTES = 30

# Raised by malformed build records while deriving optional fields
DERIVATION_ERRORS = (AttributeError, TypeError, ValueError)

DIFFICULTY_WEIGHTS: dict[str, float] = {
    "Beginner": 1.0,
    "Intermediate": 0.8,
    "Advanced": 0.6,
}
DEFAULT_DIFFICULTY_WEIGHT = 0.5


def difficulty_weight(difficulty: Any) -> float:
    return DIFFICULTY_WEIGHTS.get(difficulty, DEFAULT_DIFFICULTY_WEIGHT)


def package_checksum(root: Path, files: list[Path]) -> str:
    """``sha256:`` digest over relative paths and contents of ``files``."""
    digest = hashlib.sha256()
    for path in sorted(files, key=lambda p: p.relative_to(root).as_posix()):
        digest.update(path.relative_to(root).as_posix().encode("utf-8"))
        digest.update(b"\0")
        digest.update(path.read_bytes())
    return f"sha256:{digest.hexdigest()}"


def _sort_key(topic: dict[str, Any]) -> tuple[int, str, str]:
    module = topic.get("module")
    if not isinstance(module, int) or isinstance(module, bool):
        module = 10**6
    return module, str(topic.get("category", "")), str(topic.get("slug", ""))


def _topic_ref(topic: dict[str, Any] | None) -> dict[str, Any] | None:
    if topic is None:
        return None
    return {
        "slug": topic.get("slug"),
        "category": topic.get("category"),
        "module": topic.get("module"),
        "title": topic.get("title"),
    }


@dataclass
class ExportResult:
    """Outcome of one export invocation."""

    output_dir: Path
    topics: int = 0
    exercises: int = 0
    code_examples: int = 0
    total_size: int = 0
    file_count: int = 0
    checksum: str = ""
    warnings: list[str] = field(default_factory=list)

    def stats(self) -> dict[str, Any]:
        return {
            "topics": self.topics,
            "exercises": self.exercises,
            "codeExamples": self.code_examples,
            "totalSize": self.total_size,
            "fileCount": self.file_count,
        }


class GodojoExporter:
    """Enriches built topics and assembles the upload package.

    The export directory is recreated on every run. Missing per-topic build
    files and unrenderable optional fields are reported as warnings and the
    affected field or topic is left out; a missing build manifest or topics
    index aborts the export.

    Args:
        config: Validated content configuration.
        build_dir: Output directory of the build step.
        output_dir: Export directory to (re)create.
        clock: Callable returning the export timestamp.
    """

    def __init__(
        self,
        config: ContentConfig,
        build_dir: str | Path,
        output_dir: str | Path,
        clock: Any = None,
    ) -> None:
        self._config = config
        self._build_dir = Path(build_dir)
        self._output_dir = Path(output_dir)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def export(self) -> ExportResult:
        """Run the full export.

        Raises:
            ExportError: If the build manifest or topics index is missing or
                unreadable.
        """
        manifest = self._load_build_file(MANIFEST_FILE)
        topics_index = self._load_build_file(TOPICS_INDEX_FILE)
        if not isinstance(topics_index, list):
            raise ExportError(f"{TOPICS_INDEX_FILE} must contain a list of topics")

        result = ExportResult(output_dir=self._output_dir)
        generated = self._clock().isoformat()

        self._prepare_output()
        self._write_platform_metadata(manifest, generated)
        topics = self._export_topics(topics_index, result)
        self._copy_metadata(result)
        self._write_search_indexes(topics, generated)
        self._write_package(generated, result)
        self._write_report(generated, result)

        logger.info(
            "Exported %d topics to %s (%d warnings)",
            result.topics,
            self._output_dir,
            len(result.warnings),
        )
        return result

    def enrich_topic(self, topic: dict[str, Any], warnings: list[str]) -> dict[str, Any]:
        """Add rendered sections, playground data, hints and tests to a topic record.

        A derived field that cannot be computed is left out and a warning is
        recorded; the topic itself is still exported.
        """
        topic_id = f"{topic.get('category')}/{topic.get('slug')}"
        content = dict(topic.get("content") or {})

        def derive(label: str, func: Callable[..., Any], *args: Any) -> Any:
            try:
                return func(*args)
            except DERIVATION_ERRORS as exc:
                logger.warning("%s: cannot derive %s: %s", topic_id, label, exc)
                warnings.append(f"{topic_id}: {label} left out ({exc})")
                return None

        for section in RENDERED_SECTIONS:
            rendered = derive(f"section '{section}'", render, content.get(section, ""))
            if rendered is not None:
                content[f"{section}Html"], content[f"{section}Nodes"] = rendered

        examples = []
        for number, example in enumerate(content.get("examples") or [], start=1):
            if not isinstance(example, dict):
                warnings.append(f"{topic_id}: example {number} is not a record, skipped")
                continue
            example = dict(example)
            code = example.get("code") or ""
            explanation = example.get("explanation") or ""
            html = derive(f"example {number} explanation", render_html, explanation)
            if html is not None:
                example["explanationHtml"] = html
            playground = derive(f"example {number} playground", build_playground, code, explanation)
            if playground is not None:
                example["playground"] = playground.model_dump(by_alias=True, exclude_none=True)
            examples.append(example)
        content["examples"] = examples

        exercises = []
        for number, exercise in enumerate(content.get("exercises") or [], start=1):
            if not isinstance(exercise, dict):
                warnings.append(f"{topic_id}: exercise {number} is not a record, skipped")
                continue
            exercise = dict(exercise)
            body = exercise.get("content") or ""
            html = derive(f"exercise {number} content", render_html, body)
            if html is not None:
                exercise["contentHtml"] = html
            hints = derive(f"exercise {number} hints", extract_hints, body)
            if hints is not None:
                exercise["hints"] = hints
            tests = derive(f"exercise {number} tests", exercise_tests, exercise.get("title"))
            if tests is not None:
                exercise["tests"] = [test.model_dump(by_alias=True) for test in tests]
            exercises.append(exercise)
        content["exercises"] = exercises

        enriched = dict(topic)
        enriched["content"] = content
        module = topic.get("module")
        enriched["progress"] = {
            "estimatedMinutes": topic.get("estimatedMinutes") or DEFAULT_ESTIMATED_MINUTES,
            "difficulty": topic.get("difficulty"),
            "requiredForCertificate": isinstance(module, int)
            and module <= self._config.godojo.certificate_modules,
            "bonusContent": isinstance(module, int)
            and module > self._config.godojo.certificate_modules,
        }
        return enriched

    def search_document(self, topic: dict[str, Any]) -> dict[str, Any]:
        content = topic.get("content") or {}
        tags = topic.get("tags") or []
        parts = [
            topic.get("title"),
            topic.get("description"),
            content.get("theory"),
            content.get("summary"),
            *tags,
        ]
        return {
            "id": f"{topic.get('category')}_{topic.get('slug')}",
            "title": topic.get("title"),
            "description": topic.get("description"),
            "category": topic.get("category"),
            "module": topic.get("module"),
            "difficulty": topic.get("difficulty"),
            "tags": tags,
            "searchText": plain_text(" ".join(str(p) for p in parts if p)),
            "weight": {
                "module": topic.get("module"),
                "difficulty": difficulty_weight(topic.get("difficulty")),
                "popularity": 1.0,
            },
        }

    def _load_build_file(self, name: str) -> Any:
        path = self._build_dir / name
        if not path.is_file():
            raise ExportError(f"Build output not found: {path} (run the build first)")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ExportError(f"Cannot read {path}: {exc}") from exc

    def _prepare_output(self) -> None:
        if self._output_dir.exists():
            shutil.rmtree(self._output_dir)
        for name in EXPORT_SUBDIRS:
            (self._output_dir / name).mkdir(parents=True, exist_ok=True)

    def _write_platform_metadata(self, manifest: dict[str, Any], generated: str) -> None:
        godojo = self._config.godojo
        stats = manifest.get("stats") or {}
        structure = manifest.get("structure") or {}
        platform = {
            "version": godojo.api_version,
            "generated": generated,
            "source": {
                "repository": godojo.repository,
                "language": self._config.structure.default_language,
                "version": manifest.get("version"),
            },
            "content": {
                "type": "tutorial",
                "subject": self._config.structure.code_language,
                "modules": {
                    "total": self._config.structure.total_modules,
                    "available": stats.get("topics", 0),
                    "range": structure.get("modulesRange"),
                },
            },
            "features": {
                "exercises": True,
                "codePlayground": True,
                "progressTracking": True,
                "certificates": False,
                "multiLanguage": len(self._config.structure.languages) > 1,
            },
            "requirements": {
                "estimatedHours": sum(c.estimated_hours for c in self._config.categories),
            },
        }
        write_json(self._output_dir / "metadata" / PLATFORM_FILE, platform)

    def _export_topics(
        self, topics_index: list[dict[str, Any]], result: ExportResult
    ) -> list[dict[str, Any]]:
        loaded = []
        for entry in topics_index:
            if not isinstance(entry, dict):
                result.warnings.append(f"Malformed entry in {TOPICS_INDEX_FILE}: {entry!r}")
                continue
            category, slug = entry.get("category"), entry.get("slug")
            if not (is_slug(category) and is_slug(slug)):
                result.warnings.append(f"Invalid topic id {category}/{slug}, not exported")
                continue
            path = self._build_dir / "topics" / str(category) / f"{slug}.json"
            if not path.is_file():
                result.warnings.append(f"Missing build file for topic {category}/{slug}")
                continue
            try:
                topic = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Cannot read %s: %s", path, exc)
                result.warnings.append(f"Unreadable build file for topic {category}/{slug}")
                continue
            if not isinstance(topic, dict):
                result.warnings.append(f"Build file for topic {category}/{slug} is not a record")
                continue
            # Output paths come from the index entry, not the record
            topic["category"], topic["slug"] = category, slug
            loaded.append(topic)

        ordered = sorted(loaded, key=_sort_key)
        exported = []
        for position, topic in enumerate(ordered):
            enriched = self.enrich_topic(topic, result.warnings)
            enriched["navigation"] = {
                "previous": _topic_ref(ordered[position - 1] if position > 0 else None),
                "next": _topic_ref(ordered[position + 1] if position + 1 < len(ordered) else None),
                "category": topic.get("category"),
            }
            category_dir = self._output_dir / "content" / str(topic.get("category"))
            path = category_dir / f"{topic.get('slug')}.json"
            write_json(path, enriched)
            exported.append(enriched)

            content = enriched["content"]
            result.topics += 1
            result.exercises += len(content.get("exercises", []))
            result.code_examples += len(content.get("examples", []))
        return exported

    def _copy_metadata(self, result: ExportResult) -> None:
        metadata = self._output_dir / "metadata"
        for name in (TOPICS_INDEX_FILE, CATEGORIES_INDEX_FILE, MANIFEST_FILE):
            source = self._build_dir / name
            if source.is_file():
                shutil.copyfile(source, metadata / name)
            else:
                result.warnings.append(f"Missing build index {name}")

        categories = self._build_dir / "categories"
        if not categories.is_dir():
            result.warnings.append("No category records in build output")
            return
        target = metadata / "categories"
        target.mkdir(parents=True, exist_ok=True)
        for source in sorted(categories.glob("*.yaml")):
            shutil.copyfile(source, target / source.name)

    def _write_search_indexes(self, topics: list[dict[str, Any]], generated: str) -> None:
        documents = [self.search_document(topic) for topic in topics]
        search = self._output_dir / "search"
        write_json(
            search / SEARCH_INDEX_FILE,
            {"version": "1.0", "generated": generated, "documents": documents},
        )
        write_json(
            search / AUTOCOMPLETE_FILE,
            [
                {
                    "id": doc["id"],
                    "title": doc["title"],
                    "category": doc["category"],
                    "module": doc["module"],
                }
                for doc in documents
            ],
        )

    def _write_package(self, generated: str, result: ExportResult) -> None:
        files = [path for path in self._output_dir.rglob("*") if path.is_file()]
        result.file_count = len(files)
        result.total_size = sum(path.stat().st_size for path in files)
        result.checksum = package_checksum(self._output_dir, files)

        godojo = self._config.godojo
        package = {
            "type": PACKAGE_TYPE,
            "version": "1.0",
            "created": generated,
            "repository": godojo.repository,
            "language": self._config.structure.default_language,
            "contents": {name: f"{name}/" for name in EXPORT_SUBDIRS},
            "instructions": {
                "endpoint": f"{godojo.api_endpoint.rstrip('/')}/content/upload",
                "method": "POST",
                "authentication": "Bearer token required",
                "format": "multipart/form-data",
            },
            "validation": {
                "checksum": result.checksum,
                "totalSize": result.total_size,
                "fileCount": result.file_count,
            },
        }
        write_json(self._output_dir / PACKAGE_FILE, package)

    def _write_report(self, generated: str, result: ExportResult) -> None:
        report = {
            "generated": generated,
            "exportDirectory": self._output_dir.as_posix(),
            "stats": result.stats(),
            "warnings": result.warnings,
            "readyForUpload": result.topics > 0,
            "nextSteps": [
                "Review the exported content",
                "Run godojo:validate for a final check",
                f"Upload the package to {self._config.godojo.platform}",
            ],
        }
        write_json(self._output_dir / REPORT_FILE, report)