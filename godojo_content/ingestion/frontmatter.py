"""Front matter splitting and serialization."""

import re
from datetime import date, datetime
from typing import Any

import yaml

from godojo_content.errors import InvalidFrontMatter, MissingFrontMatter

FRONT_MATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<meta>.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def _normalize(value: Any) -> Any:
    """Make YAML-decoded values JSON friendly (dates become ISO strings)."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    return value


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a document into its front matter mapping and body.

    Args:
        text: Full document text.

    Returns:
        ``(front_matter, body)``; the body starts right after the closing
        delimiter line.

    Raises:
        MissingFrontMatter: If the text does not start with a ``---`` line or
            the block is never closed.
        InvalidFrontMatter: If the block is not a YAML mapping.
    """
    match = FRONT_MATTER_RE.match(text)
    if not match:
        raise MissingFrontMatter("Document does not start with a '---' delimited block")

    try:
        data = yaml.safe_load(match.group("meta"))
    except yaml.YAMLError as exc:
        raise InvalidFrontMatter(f"Front matter is not valid YAML: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidFrontMatter(
            f"Front matter must be a mapping, got {type(data).__name__}"
        )

    return _normalize(data), text[match.end():]


def dump_front_matter(front_matter: dict[str, Any], body: str) -> str:
    """Serialize ``front_matter`` and ``body`` back into document text."""
    meta = yaml.safe_dump(
        front_matter,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{meta}---\n{body}"
