"""Platform compatibility checks for the source tree or the exported package."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from godojo_content.config import DIFFICULTY_VALUES, ContentConfig
from godojo_content.errors import FrontMatterError
from godojo_content.export.exporter import (
    PACKAGE_FILE,
    PACKAGE_TYPE,
    PLATFORM_FILE,
    SEARCH_INDEX_FILE,
)
from godojo_content.ingestion.markdown import code_blocks
from godojo_content.ingestion.parser import DocumentParser, read_text
from godojo_content.ingestion.scanner import scan_files, suffix_filter
from godojo_content.models.document import Document
from godojo_content.models.finding import Finding, Report
from godojo_content.quality.checker import QualityChecker

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "module",
    "category",
    "difficulty",
    "authorId",
    "language",
)
MAX_TOPIC_CHARS = 50_000
MAX_CODE_BLOCK_CHARS = 5_000
MAX_NESTING = 3
MAX_PACKAGE_BYTES = 100 * 1024 * 1024
EXPECTED_API_VERSION = "v1"

FORBIDDEN_IMPORTS: tuple[str, ...] = ("os/exec", "syscall", "unsafe")
RISKY_PATTERNS: dict[str, re.Pattern[str]] = {
    "os.Exit": re.compile(r"os\.Exit"),
    "panic(": re.compile(r"panic\("),
    "for {}": re.compile(r"for\s*\{\s*\}"),
    "go func": re.compile(r"go\s+func"),
}
_NAME_RE = re.compile(r"^[a-z0-9-]+$")


def imports_package(code: str, package: str) -> bool:
    """True if ``code`` imports ``package`` in single or grouped form."""
    quoted = re.escape(f'"{package}"')
    single = re.compile(rf"^\s*import\s+(?:\w+\s+)?{quoted}", re.MULTILINE)
    grouped = re.compile(
        rf"^\s*import\s*\((?:[^)]*?)^\s*(?:\w+\s+)?{quoted}", re.MULTILINE | re.DOTALL
    )
    return bool(single.search(code) or grouped.search(code))


class GodojoValidator:
    """Checks content against the platform's ingestion requirements.

    When an export package exists its files are validated; otherwise the
    source tree is checked against the same requirements.

    Args:
        config: Validated content configuration.
        content_dir: Root of the Markdown tree.
        export_dir: Export directory produced by the exporter.
    """

    def __init__(
        self,
        config: ContentConfig,
        content_dir: str | Path,
        export_dir: str | Path,
    ) -> None:
        self._config = config
        self._content_dir = Path(content_dir)
        self._export_dir = Path(export_dir)
        self._parser = DocumentParser(display_root=self._content_dir.parent)
        self._quality = QualityChecker(
            config.quality,
            content_root=self._content_dir,
            code_language=config.structure.code_language,
        )

    @property
    def has_export(self) -> bool:
        return (self._export_dir / PACKAGE_FILE).is_file()

    def validate(self) -> Report:
        if self.has_export:
            logger.info("Validating export package in %s", self._export_dir)
            return self.validate_export()
        logger.info("No export package found, validating %s", self._content_dir)
        return self.validate_source()

    # Export package

    def validate_export(self) -> Report:
        report = Report(title="Platform (export)")
        root = self._export_dir.as_posix()

        package, findings = self._read_json(self._export_dir / PACKAGE_FILE)
        report = report.with_findings(findings)
        if package is not None:
            findings = []
            package_type = package.get("type")
            if package_type != PACKAGE_TYPE:
                findings.append(Finding.blocking(root, f"Wrong package type: {package_type!r}"))
            if not (package.get("validation") or {}).get("checksum"):
                findings.append(Finding.advisory(root, "Package has no checksum"))
            report = report.with_findings(findings, checked=0)
            if not findings:
                report = report.with_passed("Export package is valid")

        report = report.merge(self._validate_platform_metadata())
        report = report.merge(self._validate_exported_topics())
        report = report.merge(self._validate_search_index())

        total = sum(p.stat().st_size for p in self._export_dir.rglob("*") if p.is_file())
        if total > MAX_PACKAGE_BYTES:
            report = report.with_findings(
                [Finding.advisory(root, f"Export is {total / 2**20:.1f} MiB (limit 100 MiB)")],
                checked=0,
            )
        return report

    def _read_json(self, path: Path) -> tuple[Any, list[Finding]]:
        try:
            return json.loads(path.read_text(encoding="utf-8")), []
        except (OSError, json.JSONDecodeError) as exc:
            return None, [Finding.blocking(path.as_posix(), f"Cannot read JSON: {exc}")]

    def _validate_platform_metadata(self) -> Report:
        report = Report()
        path = self._export_dir / "metadata" / PLATFORM_FILE
        if not path.is_file():
            missing = Finding.blocking(path.as_posix(), "Platform metadata missing")
            return report.with_findings([missing])

        meta, findings = self._read_json(path)
        if meta is None:
            return report.with_findings(findings)

        display = path.as_posix()
        if meta.get("version") != EXPECTED_API_VERSION:
            findings.append(
                Finding.advisory(
                    display,
                    f"API version {meta.get('version')!r}, {EXPECTED_API_VERSION} recommended",
                )
            )
        language = (meta.get("source") or {}).get("language")
        expected = self._config.structure.default_language
        if language != expected:
            findings.append(
                Finding.blocking(display, f"Content language {language!r}, expected {expected!r}")
            )
        report = report.with_findings(findings)
        return report if findings else report.with_passed("Platform metadata is valid")

    def _validate_exported_topics(self) -> Report:
        report = Report()
        content_dir = self._export_dir / "content"
        if not content_dir.is_dir():
            return report.with_findings(
                [Finding.blocking(content_dir.as_posix(), "Exported content directory missing")]
            )

        for path in scan_files(content_dir, suffix_filter(".json")):
            topic, findings = self._read_json(path)
            if topic is not None:
                content = topic.get("content") if isinstance(topic, dict) else None
                if not isinstance(content, dict) or "theoryHtml" not in content:
                    findings.append(
                        Finding.blocking(
                            path.as_posix(), "Topic has no rendered theory (theoryHtml)"
                        )
                    )
            report = report.with_findings(findings)
        if report.ok:
            report = report.with_passed(f"{report.checked} exported topics are valid")
        return report

    def _validate_search_index(self) -> Report:
        report = Report()
        path = self._export_dir / "search" / SEARCH_INDEX_FILE
        if not path.is_file():
            return report.with_findings([Finding.advisory(path.as_posix(), "Search index missing")])

        index, findings = self._read_json(path)
        if index is not None and not (index.get("documents") if isinstance(index, dict) else None):
            findings.append(Finding.blocking(path.as_posix(), "Search index is empty"))
        report = report.with_findings(findings)
        return report if findings else report.with_passed("Search index is valid")

    # Source tree

    def validate_source(self) -> Report:
        report = Report(title="Platform (source)")
        if not self._content_dir.is_dir():
            return report.with_findings(
                [Finding.blocking(self._content_dir.as_posix(), "Content directory not found")]
            )

        report = report.with_findings(self.check_directories(self._content_dir), checked=0)
        for path in scan_files(self._content_dir, suffix_filter(".md")):
            if path.name == "index.md":
                continue
            report = report.with_findings(self.check_topic_file(path))
        if report.ok:
            report = report.with_passed(f"{report.checked} topics meet platform requirements")
        return report

    def check_directories(self, directory: Path, level: int = 0) -> list[Finding]:
        """Nesting depth and lowercase names of content directories."""
        findings = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            display = self._parser.display_path(entry)
            if level + 1 > MAX_NESTING:
                findings.append(
                    Finding.advisory(display, f"Nested deeper than {MAX_NESTING} levels")
                )
            if not _NAME_RE.match(entry.name):
                findings.append(Finding.advisory(display, "Directory name is not lowercase-dashed"))
            findings.extend(self.check_directories(entry, level + 1))
        return findings

    def check_topic_file(self, path: Path) -> list[Finding]:
        display = self._parser.display_path(path)
        try:
            text = read_text(path)
            document = self._parser.parse(path)
        except FrontMatterError as exc:
            return [Finding.blocking(display, f"Front matter missing or invalid: {exc}")]
        except OSError as exc:
            return [Finding.blocking(display, f"Could not read file: {exc}")]

        findings = []
        if len(text) > MAX_TOPIC_CHARS:
            findings.append(
                Finding.blocking(
                    display, f"File exceeds {MAX_TOPIC_CHARS} characters ({len(text)})"
                )
            )
        findings.extend(self.check_metadata(document))
        findings.extend(self._quality.check_word_count(document))
        findings.extend(f for f in self._quality.check_code_examples(document) if f.is_blocking)
        findings.extend(self._quality.check_exercises(document))
        findings.extend(self.check_code(document))
        return findings

    def check_metadata(self, document: Document) -> list[Finding]:
        path = document.file_path
        findings = [
            Finding.blocking(path, f"Missing required field '{field}'")
            for field in REQUIRED_FIELDS
            if not document.get(field)
        ]

        difficulty = document.get("difficulty")
        if difficulty and difficulty not in DIFFICULTY_VALUES:
            findings.append(Finding.blocking(path, f"Invalid difficulty '{difficulty}'"))

        language = document.get("language")
        if language and language not in self._config.structure.languages:
            findings.append(Finding.blocking(path, f"Unsupported language '{language}'"))

        module = document.get("module")
        total = self._config.structure.total_modules
        if module is not None and module != "":
            is_int = isinstance(module, int) and not isinstance(module, bool)
            if not (is_int and 1 <= module <= total):
                findings.append(
                    Finding.blocking(path, f"Invalid module number '{module}' (1-{total})")
                )
        return findings

    def check_code(self, document: Document) -> list[Finding]:
        """Playground compatibility of the tutorial's code blocks."""
        path = document.file_path
        language = self._config.structure.code_language.lower()
        findings = []
        for index, block in enumerate(code_blocks(document.body), start=1):
            if not block.language:
                findings.append(Finding.advisory(path, f"Code block {index} has no language tag"))
                continue
            if block.language != language:
                continue
            if len(block.code) > MAX_CODE_BLOCK_CHARS:
                findings.append(
                    Finding.advisory(
                        path, f"Code block {index} is {len(block.code)} characters long"
                    )
                )
            for package in FORBIDDEN_IMPORTS:
                if imports_package(block.code, package):
                    findings.append(
                        Finding.blocking(
                            path, f"Code block {index} imports forbidden package '{package}'"
                        )
                    )
            for label, pattern in RISKY_PATTERNS.items():
                if pattern.search(block.code):
                    findings.append(
                        Finding.advisory(
                            path, f"Code block {index} uses '{label}' (may fail in playground)"
                        )
                    )
        return findings
