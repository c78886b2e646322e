"""Small Markdown helpers shared by the checker, extractor and formatter.

These are line-oriented regex helpers, not a Markdown parser. Fenced code
blocks are the only construct they understand structurally: headings, links
and words inside a fence are never counted as prose.
"""

import re
from dataclasses import dataclass

FENCE_RE = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^\n]*)\n(?P<code>.*?)^(?P=fence)[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
HEADING_RE = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*$", re.MULTILINE)
LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)(?:[ \t]+\"[^\"]*\")?\)")
LEADING_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n.*?^---[ \t]*$", re.MULTILINE | re.DOTALL)


@dataclass(frozen=True)
class CodeBlock:
    """A fenced block: its language tag, code and position in the text."""

    language: str
    code: str
    start: int
    end: int


def code_blocks(text: str) -> list[CodeBlock]:
    """Return all fenced code blocks in document order."""
    blocks = []
    for match in FENCE_RE.finditer(text):
        info = match.group("info").strip()
        code = match.group("code")
        if code.endswith("\n"):
            code = code[:-1]
        blocks.append(
            CodeBlock(
                language=info.split()[0].lower() if info else "",
                code=code,
                start=match.start(),
                end=match.end(),
            )
        )
    return blocks


def fenced_spans(text: str) -> list[tuple[int, int]]:
    """Character ranges covered by fenced code blocks."""
    return [(block.start, block.end) for block in code_blocks(text)]


def in_spans(position: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)


def strip_code_blocks(text: str) -> str:
    """Remove fenced code blocks, keeping the surrounding prose."""
    return FENCE_RE.sub("", text)


def split_fenced(text: str) -> list[tuple[bool, str]]:
    """Split text into ``(is_code, segment)`` pieces that concatenate back to ``text``."""
    segments: list[tuple[bool, str]] = []
    position = 0
    for block in code_blocks(text):
        if block.start > position:
            segments.append((False, text[position:block.start]))
        segments.append((True, text[block.start:block.end]))
        position = block.end
    if position < len(text):
        segments.append((False, text[position:]))
    return segments


def count_words(text: str) -> int:
    """Count whitespace-separated words outside front matter and code blocks."""
    cleaned = LEADING_FRONT_MATTER_RE.sub("", text, count=1)
    cleaned = strip_code_blocks(cleaned)
    return len(cleaned.split())


def headings(text: str, level: int | None = None) -> list[tuple[int, str, int]]:
    """Return ``(level, title, position)`` for headings outside code blocks."""
    spans = fenced_spans(text)
    found = []
    for match in HEADING_RE.finditer(text):
        if in_spans(match.start(), spans):
            continue
        heading_level = len(match.group(1))
        if level is not None and heading_level != level:
            continue
        found.append((heading_level, match.group(2).strip(), match.start()))
    return found


def links(text: str) -> list[tuple[str, str]]:
    """Return ``(label, target)`` for inline links outside code blocks."""
    return [(m.group(1), m.group(2)) for m in LINK_RE.finditer(strip_code_blocks(text))]


def slugify(value: str) -> str:
    """Lowercase ASCII slug: letters and digits joined by single dashes."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
