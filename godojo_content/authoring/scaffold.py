"""Scaffolding of new topics and category index files from templates."""

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from string import Template
from typing import Any

from godojo_content.config import CategoryConfig, ContentConfig
from godojo_content.errors import TemplateError, ValidationError
from godojo_content.ingestion.frontmatter import dump_front_matter
from godojo_content.ingestion.markdown import slugify
from godojo_content.ingestion.scanner import list_dirs
from godojo_content.ingestion.sections import SECTION_HEADINGS
from godojo_content.models.author import AuthorProfile

logger = logging.getLogger(__name__)

TOPIC_TEMPLATE = Template(
    """
# $title

$description

## $objectives

-

## $theory

## $examples

### $example_title

```$code_language
package main

func main() {
}
```

## $exercises

### $exercise 1: $first_exercise

## $best_practices

## $common_mistakes

## $real_world

## $summary
"""
)

CATEGORY_TEMPLATE = Template(
    """
# $title

$description

$modules_label: $modules
"""
)

_TOPIC_DIR_RE = re.compile(r"^(\d{2})-")

# (example title, exercise word, first exercise title, modules label) per language
_LABELS: dict[str, tuple[str, str, str, str]] = {
    "ru": ("Базовый пример", "Упражнение", "Базовая реализация", "Модули"),
    "en": ("Basic example", "Exercise", "Basic implementation", "Modules"),
}


def render_template(template: Template, **values: Any) -> str:
    """Substitute ``values`` into ``template``.

    Raises:
        TemplateError: If a placeholder has no value or is malformed.
    """
    try:
        return template.substitute(values)
    except KeyError as exc:
        raise TemplateError(f"Template placeholder has no value: {exc.args[0]}") from exc
    except ValueError as exc:
        raise TemplateError(f"Malformed template: {exc}") from exc


def _heading(section: str, language: str) -> str:
    ru, en = SECTION_HEADINGS[section]
    return en if language == "en" else ru


@dataclass
class ScaffoldResult:
    path: Path
    module: int | None = None


class Scaffolder:
    """Creates new content files for a configured category.

    Existing files are never overwritten.

    Args:
        config: Validated content configuration.
        content_dir: Root of the content tree.
    """

    def __init__(self, config: ContentConfig, content_dir: str | Path) -> None:
        self._config = config
        self._content_dir = Path(content_dir)

    def _category(self, slug: str) -> CategoryConfig:
        category = self._config.category(slug)
        if category is None:
            raise ValidationError(
                f"Unknown category '{slug}' (configured: {', '.join(self._config.slugs)})"
            )
        return category

    def next_number(self, category_slug: str) -> int:
        """Next topic number after the highest existing ``NN-`` prefix."""
        numbers = []
        for directory in list_dirs(self._content_dir / category_slug):
            match = _TOPIC_DIR_RE.match(directory.name)
            if match:
                numbers.append(int(match.group(1)))
        return max(numbers, default=0) + 1

    def new_topic(
        self,
        profile: AuthorProfile,
        category_slug: str,
        title: str,
        description: str = "",
        slug: str | None = None,
    ) -> ScaffoldResult:
        """Create ``<category>/<NN>-<slug>/topic.md``.

        Raises:
            ValidationError: Unknown category, no usable slug or existing target.
            TemplateError: If the template cannot be rendered.
        """
        category = self._category(category_slug)
        topic_slug = slugify(slug or title)
        if not topic_slug:
            raise ValidationError(f"Cannot derive a slug from '{title}', pass one explicitly")

        number = self.next_number(category.slug)
        start, end = category.module_range
        module = start + number - 1
        if module > end:
            logger.warning(
                "Module %d is outside the range %s of category %s",
                module,
                category.modules,
                category.slug,
            )

        path = self._content_dir / category.slug / f"{number:02d}-{topic_slug}" / "topic.md"
        if path.exists():
            raise ValidationError(f"Refusing to overwrite {path}")

        language = profile.default_language
        example_title, exercise, first_exercise, _ = _LABELS.get(language, _LABELS["en"])
        body = render_template(
            TOPIC_TEMPLATE,
            title=title,
            description=description,
            objectives=_heading("objectives", language),
            theory=_heading("theory", language),
            examples=_heading("examples", language),
            exercises=_heading("exercises", language),
            best_practices=_heading("bestPractices", language),
            common_mistakes=_heading("commonMistakes", language),
            real_world=_heading("realWorld", language),
            summary=_heading("summary", language),
            example_title=example_title,
            exercise=exercise,
            first_exercise=first_exercise,
            code_language=self._config.structure.code_language,
        )
        front_matter = {
            "title": title,
            "description": description,
            "category": category.slug,
            "slug": topic_slug,
            "module": module,
            "difficulty": category.difficulty.value,
            "authorId": profile.author_id,
            "language": language,
            "estimatedMinutes": 45,
            "tags": [self._config.structure.code_language, category.slug],
            "lastUpdated": date.today().isoformat(),
        }
        self._write(path, dump_front_matter(front_matter, body))
        return ScaffoldResult(path=path, module=module)

    def new_category_index(
        self,
        profile: AuthorProfile,
        category_slug: str,
        title: str | None = None,
        description: str = "",
    ) -> ScaffoldResult:
        """Create ``<category>/index.md`` from the configured category."""
        category = self._category(category_slug)
        path = self._content_dir / category.slug / "index.md"
        if path.exists():
            raise ValidationError(f"Refusing to overwrite {path}")

        language = profile.default_language
        heading = title or category.title(language)
        text = description or category.description
        body = render_template(
            CATEGORY_TEMPLATE,
            title=heading,
            description=text,
            modules_label=_LABELS.get(language, _LABELS["en"])[3],
            modules=category.modules,
        )
        front_matter = {
            "title": heading,
            "description": text,
            "category": category.slug,
            "difficulty": category.difficulty.value,
            "authorId": profile.author_id,
            "language": language,
            "modules": category.modules,
            "estimatedHours": category.estimated_hours,
        }
        self._write(path, dump_front_matter(front_matter, body))
        return ScaffoldResult(path=path)

    @staticmethod
    def _write(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info("Created %s", path)
