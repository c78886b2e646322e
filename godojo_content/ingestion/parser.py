"""Document reader: text decoding plus front matter splitting."""

import logging
from pathlib import Path

import chardet

from godojo_content.ingestion.frontmatter import parse_front_matter
from godojo_content.models.document import Document

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".md": "markdown",
    ".markdown": "markdown",
}


def read_text(file_path: str | Path) -> str:
    """Read a text file with encoding detection.

    Tries UTF-8 first, then uses chardet for fallback detection.

    Args:
        file_path: Path to the text file.

    Returns:
        The file content as a string.
    """
    path = Path(file_path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        pass

    # Fallback to encoding detection
    raw_bytes = path.read_bytes()
    detected = chardet.detect(raw_bytes)
    encoding = detected.get("encoding") or "utf-8"
    confidence = detected.get("confidence", 0)

    if confidence < 0.7:
        logger.warning(
            "Low confidence encoding detection for %s: %s (%.0f%%)",
            path,
            encoding,
            confidence * 100,
        )

    try:
        return raw_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        # Last resort: the corpus is Russian, try the common Cyrillic code page
        try:
            return raw_bytes.decode("windows-1251")
        except UnicodeDecodeError:
            logger.error("Failed to decode file: %s", path)
            return raw_bytes.decode("utf-8", errors="replace")


class DocumentParser:
    """Parses Markdown files into Document records.

    Args:
        display_root: Optional directory that ``Document.file_path`` is made
            relative to, so findings and outputs do not leak absolute paths.
    """

    def __init__(self, display_root: str | Path | None = None) -> None:
        self._display_root = Path(display_root) if display_root else None

    def parse(self, file_path: str | Path) -> Document:
        """Read a file and split it into front matter and body.

        Args:
            file_path: Path to the Markdown file.

        Returns:
            The parsed Document.

        Raises:
            FileNotFoundError: If file_path does not exist.
            ValueError: If the file format is not supported.
            MissingFrontMatter: If the file has no front matter block.
            InvalidFrontMatter: If the block is not a YAML mapping.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        self._detect_format(path)
        front_matter, body = parse_front_matter(read_text(path))

        return Document(
            file_path=self.display_path(path),
            front_matter=front_matter,
            body=body,
        )

    def display_path(self, path: Path) -> str:
        """Path as shown in reports: relative to ``display_root`` when possible."""
        if self._display_root is not None:
            try:
                return path.resolve().relative_to(self._display_root.resolve()).as_posix()
            except ValueError:
                pass
        return path.as_posix()

    def _detect_format(self, file_path: Path) -> str:
        """Determine file format from extension.

        Raises:
            ValueError: If extension is not supported.
        """
        ext = file_path.suffix.lower()
        if ext not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
            )
        return SUPPORTED_FORMATS[ext]
