"""Rule-based Markdown normalizer for tutorial documents."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from godojo_content.errors import FrontMatterError, MissingFrontMatter
from godojo_content.ingestion.frontmatter import dump_front_matter, parse_front_matter
from godojo_content.ingestion.markdown import split_fenced
from godojo_content.ingestion.parser import read_text
from godojo_content.ingestion.scanner import scan_files, suffix_filter
from godojo_content.ingestion.sections import SECTION_HEADINGS

logger = logging.getLogger(__name__)

_OPEN_FENCE_RE = re.compile(r"\A(`{3,}|~{3,})[ \t]*\n")
_BULLET_RE = re.compile(r"^( {0,4})\* ", re.MULTILINE)
_HEADING_GAP_RE = re.compile(r"([^\n])\n(#{1,6} )")
_FENCE_HEADING_GAP_RE = re.compile(r"\A\n(#{1,6} )")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_DOMAIN_RE = re.compile(r"^(?:[a-z0-9-]+\.)+[a-z]{2,}$", re.IGNORECASE)

FILE_EXTENSIONS = frozenset(
    {"md", "go", "json", "yaml", "yml", "txt", "html", "png", "jpg", "jpeg", "gif", "svg", "mod"}
)


def _plain_heading_map() -> dict[str, str]:
    """Heading text without its emoji -> full vocabulary heading."""
    mapping = {}
    for variants in SECTION_HEADINGS.values():
        for heading in variants:
            _, _, plain = heading.partition(" ")
            mapping[plain] = heading
    return mapping


def fix_link_target(target: str) -> str:
    """Prefix bare-domain targets (``example.com/x``) with ``https://``."""
    if target.startswith(("#", "/", ".")) or _SCHEME_RE.match(target):
        return target
    path = target.split("#", 1)[0].split("?", 1)[0]
    if path.lower().endswith(".md"):
        return target
    host = path.split("/", 1)[0]
    if not _DOMAIN_RE.match(host):
        return target
    if "/" not in path and host.rsplit(".", 1)[-1].lower() in FILE_EXTENSIONS:
        return target
    return f"https://{target}"


class MarkdownFormatter:
    """Applies the house formatting rules to a document body.

    Rules only touch prose; fenced code is left as written except that an
    opening fence without a language gets the tutorial's code language.

    Args:
        code_language: Language tag added to untagged code fences.
    """

    def __init__(self, code_language: str = "go") -> None:
        self._code_language = code_language
        self._headings = _plain_heading_map()
        self._heading_re = re.compile(
            r"^## ("
            + "|".join(re.escape(plain) for plain in sorted(self._headings, key=len, reverse=True))
            + r")[ \t]*$",
            re.MULTILINE,
        )

    def format_body(self, body: str) -> str:
        parts = []
        for is_code, segment in split_fenced(body):
            if is_code:
                parts.append(self.tag_fence(segment))
                continue
            if parts:
                # Prose after a closing fence starts with that fence's line break
                segment = _FENCE_HEADING_GAP_RE.sub(r"\n\n\1", segment, count=1)
            parts.append(self.format_prose(segment))
        return "".join(parts)

    def tag_fence(self, block: str) -> str:
        return _OPEN_FENCE_RE.sub(lambda m: f"{m.group(1)}{self._code_language}\n", block, count=1)

    def format_prose(self, text: str) -> str:
        text = self._heading_re.sub(lambda m: f"## {self._headings[m.group(1)]}", text)
        text = _BULLET_RE.sub(r"\1- ", text)
        text = _HEADING_GAP_RE.sub(r"\1\n\n\2", text)
        text = _LINK_RE.sub(lambda m: f"[{m.group(1)}]({fix_link_target(m.group(2))})", text)
        text = _BLANK_RUN_RE.sub("\n\n", text)
        return text

    def format_text(self, text: str) -> str:
        """Format a whole document, keeping its front matter."""
        try:
            front_matter, body = parse_front_matter(text)
        except MissingFrontMatter:
            return self.format_body(text)
        formatted = self.format_body(body)
        if formatted == body:
            return text
        return dump_front_matter(front_matter, formatted)


@dataclass
class FormatResult:
    formatted: list[Path] = field(default_factory=list)
    unchanged: int = 0
    errors: list[tuple[Path, str]] = field(default_factory=list)


def format_tree(
    content_dir: str | Path,
    code_language: str = "go",
    check: bool = False,
) -> FormatResult:
    """Format every Markdown file under ``content_dir``.

    With ``check`` set nothing is written; ``formatted`` then lists the files
    that would change.

    Raises:
        DirectoryNotFound: If ``content_dir`` does not exist.
    """
    formatter = MarkdownFormatter(code_language)
    result = FormatResult()
    for path in scan_files(content_dir, suffix_filter(".md")):
        try:
            original = read_text(path)
            formatted = formatter.format_text(original)
        except (FrontMatterError, OSError) as exc:
            logger.warning("Cannot format %s: %s", path, exc)
            result.errors.append((path, str(exc)))
            continue

        if formatted == original:
            result.unchanged += 1
            continue
        result.formatted.append(path)
        if not check:
            path.write_text(formatted, encoding="utf-8")
            logger.debug("Formatted %s", path)
    return result
