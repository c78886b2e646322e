"""Heuristic quality rules for tutorial documents."""

import logging
import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

from godojo_content.config import DIFFICULTY_VALUES, QualityStandards
from godojo_content.errors import FrontMatterError
from godojo_content.ingestion.markdown import code_blocks, count_words, headings, links
from godojo_content.ingestion.parser import DocumentParser
from godojo_content.ingestion.scanner import scan_files, suffix_filter
from godojo_content.ingestion.sections import (
    RECOMMENDED_SECTIONS,
    SECTION_HEADINGS,
    count_exercises,
    section_names,
)
from godojo_content.models.document import Document
from godojo_content.models.finding import Finding, Report

logger = logging.getLogger(__name__)

TOPIC_REQUIRED_FIELDS: tuple[str, ...] = ("title", "description", "authorId", "category")
CATEGORY_REQUIRED_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "difficulty",
    "authorId",
    "category",
)

MIN_DESCRIPTION_LENGTH = 50
ESTIMATED_MINUTES_RANGE = (5, 120)
MIN_HEADINGS = 3

PLACEHOLDER_RE = re.compile(r"lorem\s+ipsum", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_SKIPPED_SCHEMES = ("mailto:", "tel:", "data:")


def is_well_formed_url(url: str) -> bool:
    """True if ``url`` has an http(s) scheme and a host."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(hostname) and " " not in url


class QualityChecker:
    """Applies independent quality rules to a parsed document.

    Every rule is a pure function of the document text except the internal
    link check, which probes the filesystem at call time.

    Args:
        standards: Minimum word, code example and exercise counts.
        content_root: Directory internal links may be relative to.
        code_language: Fence tag of the tutorial's code examples.
    """

    def __init__(
        self,
        standards: QualityStandards,
        content_root: str | Path | None = None,
        code_language: str = "go",
    ) -> None:
        self._standards = standards
        self._content_root = Path(content_root) if content_root else None
        self._code_language = code_language.lower()

    def check(self, document: Document, source_path: str | Path | None = None) -> list[Finding]:
        """Run all rules applicable to ``document``.

        Category index files only get the front matter rule.

        Args:
            document: The parsed document.
            source_path: Location of the document on disk, used to resolve
                relative links. Defaults to ``document.file_path``.

        Returns:
            Findings in rule order.
        """
        if document.is_category_index:
            return self.check_front_matter(document)

        base_dir = Path(source_path or document.file_path).parent
        rules: list[Callable[[Document], list[Finding]]] = [
            self.check_front_matter,
            self.check_word_count,
            self.check_code_examples,
            self.check_exercises,
            self.check_structure,
            self.check_content_markers,
        ]
        findings: list[Finding] = []
        for rule in rules:
            findings.extend(rule(document))
        findings.extend(self.check_links(document, base_dir))
        logger.debug("%s: %d findings", document.file_path, len(findings))
        return findings

    def check_front_matter(self, document: Document) -> list[Finding]:
        path = document.file_path
        required = (
            CATEGORY_REQUIRED_FIELDS if document.is_category_index else TOPIC_REQUIRED_FIELDS
        )
        findings = [
            Finding.blocking(path, f"Missing required front matter field: {field}")
            for field in required
            if not document.get(field)
        ]

        description = document.get("description")
        if isinstance(description, str) and 0 < len(description) < MIN_DESCRIPTION_LENGTH:
            findings.append(
                Finding.advisory(
                    path,
                    f"Description is too short (under {MIN_DESCRIPTION_LENGTH} characters)",
                )
            )

        minutes = document.get("estimatedMinutes")
        low, high = ESTIMATED_MINUTES_RANGE
        if isinstance(minutes, int | float) and not low <= minutes <= high:
            findings.append(
                Finding.advisory(
                    path, f"Unusual estimatedMinutes {minutes} (expected {low}-{high})"
                )
            )

        difficulty = document.get("difficulty")
        if difficulty and difficulty not in DIFFICULTY_VALUES:
            findings.append(
                Finding.advisory(
                    path,
                    f"Unknown difficulty '{difficulty}' "
                    f"(expected one of {', '.join(DIFFICULTY_VALUES)})",
                )
            )
        return findings

    def check_word_count(self, document: Document) -> list[Finding]:
        words = count_words(document.body)
        if words < self._standards.min_words:
            return [
                Finding.blocking(
                    document.file_path,
                    f"Not enough content: {words} words (minimum {self._standards.min_words})",
                )
            ]
        return []

    def check_code_examples(self, document: Document) -> list[Finding]:
        path = document.file_path
        blocks = [b for b in code_blocks(document.body) if b.language == self._code_language]
        findings = []
        if len(blocks) < self._standards.min_code_examples:
            findings.append(
                Finding.blocking(
                    path,
                    f"Not enough code examples: {len(blocks)} "
                    f"(minimum {self._standards.min_code_examples})",
                )
            )

        for index, block in enumerate(blocks, start=1):
            if "package " not in block.code:
                findings.append(
                    Finding.advisory(path, f"Code example {index} has no package declaration")
                )
            if "err :=" in block.code and "if err != nil" not in block.code:
                findings.append(
                    Finding.advisory(path, f"Code example {index} does not check errors")
                )
        return findings

    def check_exercises(self, document: Document) -> list[Finding]:
        found = count_exercises(document.body)
        if found < self._standards.min_exercises:
            return [
                Finding.blocking(
                    document.file_path,
                    f"Not enough exercises: {found} (minimum {self._standards.min_exercises})",
                )
            ]
        return []

    def check_structure(self, document: Document) -> list[Finding]:
        path = document.file_path
        findings = []
        if len(headings(document.body)) < MIN_HEADINGS:
            findings.append(
                Finding.advisory(path, f"Too few headings (at least {MIN_HEADINGS} recommended)")
            )

        present = section_names(document.body)
        for name in RECOMMENDED_SECTIONS:
            if name not in present:
                findings.append(
                    Finding.advisory(path, f"Missing section: ## {SECTION_HEADINGS[name][0]}")
                )
        return findings

    def check_content_markers(self, document: Document) -> list[Finding]:
        path = document.file_path
        findings = []
        if "TODO" in document.body:
            findings.append(Finding.advisory(path, "Unfinished TODO markers found"))
        if PLACEHOLDER_RE.search(document.body):
            findings.append(Finding.advisory(path, "Placeholder text (Lorem Ipsum) found"))
        return findings

    def check_links(self, document: Document, base_dir: Path) -> list[Finding]:
        """Check internal link targets exist and external URLs are well formed."""
        path = document.file_path
        findings = []
        for _, target in links(document.body):
            lowered = target.lower()
            if target.startswith("#") or lowered.startswith(_SKIPPED_SCHEMES):
                continue

            if lowered.startswith(("http://", "https://")) or "://" in target:
                if not is_well_formed_url(target):
                    findings.append(Finding.advisory(path, f"Malformed URL: {target}"))
                continue
            if _SCHEME_RE.match(target):
                continue

            relative = target.split("#", 1)[0].split("?", 1)[0]
            if relative and not self._link_exists(relative, base_dir):
                findings.append(Finding.advisory(path, f"Broken internal link: {relative}"))
        return findings

    def _link_exists(self, relative: str, base_dir: Path) -> bool:
        candidates = [base_dir / relative]
        if self._content_root is not None:
            candidates.append(self._content_root / relative.lstrip("/"))
        return any(candidate.exists() for candidate in candidates)


def check_content(
    content_dir: str | Path,
    standards: QualityStandards,
    code_language: str = "go",
    display_root: str | Path | None = None,
) -> Report:
    """Check every Markdown file under ``content_dir``.

    Unreadable files and files without front matter become one blocking
    finding each; the run always covers the whole tree.

    Raises:
        DirectoryNotFound: If ``content_dir`` does not exist.
    """
    parser = DocumentParser(display_root=display_root)
    checker = QualityChecker(standards, content_root=content_dir, code_language=code_language)
    report = Report(title="Content quality")

    for path in scan_files(content_dir, suffix_filter(".md")):
        try:
            document = parser.parse(path)
        except FrontMatterError as exc:
            report = report.with_findings([Finding.blocking(parser.display_path(path), str(exc))])
            continue
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            report = report.with_findings(
                [Finding.blocking(parser.display_path(path), f"Could not read file: {exc}")]
            )
            continue
        report = report.with_findings(checker.check(document, source_path=path))

    logger.info("Checked %d files", report.checked)
    return report
