"""Markdown to display form: HTML plus nested display nodes."""

import logging
import re
from typing import Any

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

from godojo_content.ingestion.markdown import strip_code_blocks

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

_WHITESPACE_RE = re.compile(r"\s+")
_MARKUP_RE = re.compile(r"[*_`#>\[\]|]+")


def render_html(text: str) -> str:
    """Render a Markdown fragment to HTML."""
    if not text.strip():
        return ""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def _node(element: Tag) -> dict[str, Any]:
    node: dict[str, Any] = {"tag": element.name}
    if element.attrs:
        node["attrs"] = {
            key: " ".join(value) if isinstance(value, list) else value
            for key, value in element.attrs.items()
        }

    children: list[dict[str, Any]] = []
    for child in element.children:
        if isinstance(child, Tag):
            children.append(_node(child))
        elif isinstance(child, NavigableString) and child.strip():
            children.append({"tag": "#text", "text": str(child)})

    # A single text child is folded into the element itself
    if len(children) == 1 and children[0]["tag"] == "#text":
        node["text"] = children[0]["text"]
    elif children:
        node["children"] = children
    return node


def html_to_nodes(html: str) -> list[dict[str, Any]]:
    """Convert rendered HTML into a list of ``{tag, text?, attrs?, children?}`` nodes."""
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml")
    root = soup.body or soup
    return [_node(child) for child in root.children if isinstance(child, Tag)]


def render(text: str) -> tuple[str, list[dict[str, Any]]]:
    """Render ``text`` to ``(html, nodes)``."""
    html = render_html(text)
    return html, html_to_nodes(html)


def plain_text(text: str) -> str:
    """Lowercase searchable text: code removed, HTML and Markdown markup stripped."""
    without_code = strip_code_blocks(text)
    stripped = BeautifulSoup(without_code, "lxml").get_text(separator=" ")
    stripped = _MARKUP_RE.sub(" ", stripped)
    return _WHITESPACE_RE.sub(" ", stripped).strip().lower()
