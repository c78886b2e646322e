"""Per-category content statistics for the author dashboard."""

import logging
from dataclasses import dataclass
from pathlib import Path

from godojo_content.config import ContentConfig
from godojo_content.errors import FrontMatterError
from godojo_content.ingestion.markdown import code_blocks, count_words
from godojo_content.ingestion.parser import DocumentParser
from godojo_content.ingestion.scanner import list_dirs
from godojo_content.ingestion.sections import count_exercises

logger = logging.getLogger(__name__)


@dataclass
class CategoryStats:
    slug: str
    title: str
    modules: str
    topics: int = 0
    words: int = 0
    code_examples: int = 0
    exercises: int = 0


def content_stats(config: ContentConfig, content_dir: str | Path) -> list[CategoryStats]:
    """Count topics, words, code examples and exercises per configured category."""
    root = Path(content_dir)
    parser = DocumentParser(display_root=root.parent)
    language = config.structure.code_language.lower()
    results = []
    for category in config.categories:
        stats = CategoryStats(
            slug=category.slug,
            title=category.title(config.structure.default_language),
            modules=category.modules,
        )
        for topic_dir in list_dirs(root / category.slug):
            path = topic_dir / "topic.md"
            if not path.is_file():
                continue
            try:
                document = parser.parse(path)
            except (FrontMatterError, OSError) as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue
            stats.topics += 1
            stats.words += count_words(document.body)
            stats.code_examples += sum(
                1 for block in code_blocks(document.body) if block.language == language
            )
            stats.exercises += count_exercises(document.body)
        results.append(stats)
    return results
