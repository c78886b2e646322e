"""Cross-checks the on-disk content tree against the configuration."""

import logging
import re
from pathlib import Path

from godojo_content.config import CategoryConfig, ContentConfig
from godojo_content.errors import FrontMatterError
from godojo_content.ingestion.parser import DocumentParser
from godojo_content.ingestion.scanner import list_dirs
from godojo_content.models.document import Document
from godojo_content.models.finding import Finding, Report

logger = logging.getLogger(__name__)

CATEGORY_INDEX_FIELDS: tuple[str, ...] = ("title", "description", "difficulty", "authorId")
TOPIC_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "module",
    "category",
    "slug",
    "difficulty",
    "authorId",
)

TOPIC_DIR_RE = re.compile(r"^(\d{2})-")
DIR_NAME_RE = re.compile(r"^[a-z0-9-]+$")
MD_NAME_RE = re.compile(r"^[a-z0-9-]+\.md$")


class StructureValidator:
    """Reports missing files, naming problems and numbering gaps.

    The validator never modifies the tree. Findings are accumulated into a
    single report; parse errors of individual files become findings.

    Args:
        config: Validated content configuration.
        content_dir: Root of the content tree.
        config_path: Location of the configuration file, checked for presence.
    """

    def __init__(
        self,
        config: ContentConfig,
        content_dir: str | Path,
        config_path: str | Path | None = None,
    ) -> None:
        self._config = config
        self._content_dir = Path(content_dir)
        self._config_path = Path(config_path) if config_path else None
        self._parser = DocumentParser(display_root=self._content_dir.parent)

    def validate(self) -> Report:
        report = Report(title="Structure")

        if self._config_path is not None and not self._config_path.is_file():
            report = report.with_findings(
                [Finding.blocking(self._config_path.as_posix(), "Configuration file not found")],
                checked=0,
            )
        if not self._content_dir.is_dir():
            return report.with_findings(
                [Finding.blocking(self._content_dir.as_posix(), "Content directory not found")],
                checked=0,
            )

        for category in self._config.categories:
            report = report.with_findings(self.validate_category(category))

        report = report.with_findings(self.check_unconfigured(), checked=0)
        report = report.with_findings(self.check_naming(self._content_dir), checked=0)
        if report.ok:
            report = report.with_passed("Project structure is valid")
        logger.info("Validated %d categories", report.checked)
        return report

    def validate_category(self, category: CategoryConfig) -> list[Finding]:
        """Check one configured category directory and its topics."""
        category_dir = self._content_dir / category.slug
        display = self._parser.display_path(category_dir)
        if not category_dir.is_dir():
            return [Finding.blocking(display, f"Category directory missing: {category.slug}")]

        findings = []
        index_path = category_dir / "index.md"
        if not index_path.is_file():
            findings.append(
                Finding.blocking(display, f"index.md missing in category {category.slug}")
            )
        else:
            findings.extend(self._check_index(index_path, category))

        topic_dirs = list_dirs(category_dir)
        if not topic_dirs:
            findings.append(Finding.advisory(display, f"No topics in category {category.slug}"))

        numbers = []
        for topic_dir in topic_dirs:
            match = TOPIC_DIR_RE.match(topic_dir.name)
            if match:
                numbers.append(int(match.group(1)))
            else:
                findings.append(
                    Finding.advisory(
                        self._parser.display_path(topic_dir),
                        "Topic directory name should start with a two-digit number: "
                        f"{topic_dir.name}",
                    )
                )
            findings.extend(self._check_topic(topic_dir, category))

        findings.extend(self._check_numbering(display, numbers))
        return findings

    def _parse(self, path: Path) -> tuple[Document | None, list[Finding]]:
        try:
            return self._parser.parse(path), []
        except (FrontMatterError, OSError, ValueError) as exc:
            return None, [Finding.blocking(self._parser.display_path(path), str(exc))]

    def _check_index(self, index_path: Path, category: CategoryConfig) -> list[Finding]:
        document, findings = self._parse(index_path)
        if document is None:
            return findings

        path = document.file_path
        if document.get("category") != category.slug:
            findings.append(
                Finding.blocking(
                    path,
                    f"Category mismatch: index declares '{document.get('category')}', "
                    f"expected '{category.slug}'",
                )
            )
        findings.extend(
            Finding.blocking(path, f"Missing field '{field}'")
            for field in CATEGORY_INDEX_FIELDS
            if not document.get(field)
        )
        return findings

    def _check_topic(self, topic_dir: Path, category: CategoryConfig) -> list[Finding]:
        topic_path = topic_dir / "topic.md"
        if not topic_path.is_file():
            return [Finding.blocking(self._parser.display_path(topic_dir), "topic.md missing")]

        document, findings = self._parse(topic_path)
        if document is None:
            return findings

        path = document.file_path
        findings.extend(
            Finding.blocking(path, f"Missing field '{field}'")
            for field in TOPIC_FIELDS
            if not document.get(field)
        )

        module = document.get("module")
        if module is None or module == "":
            return findings
        if not isinstance(module, int) or isinstance(module, bool):
            findings.append(Finding.advisory(path, f"Module number is not an integer: {module!r}"))
            return findings

        total = self._config.structure.total_modules
        if not 1 <= module <= total:
            findings.append(
                Finding.advisory(path, f"Module number {module} outside 1-{total}")
            )
        elif not category.contains_module(module):
            findings.append(
                Finding.advisory(
                    path,
                    f"Module number {module} outside the range {category.modules} "
                    f"of category {category.slug}",
                )
            )
        return findings

    @staticmethod
    def _check_numbering(display: str, numbers: list[int]) -> list[Finding]:
        for expected, found in enumerate(sorted(numbers), start=1):
            if found != expected:
                return [
                    Finding.advisory(
                        display,
                        f"Topic numbering gap: expected {expected:02d}, found {found:02d}",
                    )
                ]
        return []

    def check_unconfigured(self) -> list[Finding]:
        """Content directories that no configured category claims."""
        configured = set(self._config.slugs)
        return [
            Finding.advisory(
                self._parser.display_path(directory),
                f"Directory is not a configured category: {directory.name}",
            )
            for directory in list_dirs(self._content_dir)
            if directory.name not in configured
        ]

    def check_naming(self, directory: Path) -> list[Finding]:
        """Lowercase ``[a-z0-9-]`` names for directories and Markdown files."""
        findings = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                if not DIR_NAME_RE.match(entry.name):
                    findings.append(
                        Finding.advisory(
                            self._parser.display_path(entry),
                            "Directory name is not lowercase-dashed",
                        )
                    )
                findings.extend(self.check_naming(entry))
            elif entry.suffix == ".md" and not MD_NAME_RE.match(entry.name):
                findings.append(
                    Finding.advisory(
                        self._parser.display_path(entry), "File name is not lowercase-dashed"
                    )
                )
        return findings
