"""Content ingestion: scanning, parsing and section extraction."""

from godojo_content.ingestion.frontmatter import dump_front_matter, parse_front_matter
from godojo_content.ingestion.parser import DocumentParser, read_text
from godojo_content.ingestion.scanner import scan_files, suffix_filter
from godojo_content.ingestion.sections import SectionExtractor

__all__ = [
    "DocumentParser",
    "SectionExtractor",
    "dump_front_matter",
    "parse_front_matter",
    "read_text",
    "scan_files",
    "suffix_filter",
]
