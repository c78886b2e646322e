"""Bootstraps a content repository: config, directories, docs and a sample topic."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from godojo_content.config import (
    DEFAULT_CONFIG_FILE,
    ContentConfig,
    load_content_config,
    parse_content_config,
)
from godojo_content.ingestion.frontmatter import dump_front_matter

logger = logging.getLogger(__name__)

TARGETS = ("directories", "config", "docs", "sample", "all")

DEFAULT_CONFIG: dict[str, Any] = {
    "structure": {
        "defaultLanguage": "ru",
        "languages": ["ru", "en"],
        "totalModules": 79,
        "codeLanguage": "go",
    },
    "godojo": {
        "platform": "godojo.dev",
        "apiEndpoint": "https://api.godojo.dev/v1",
    },
    "categories": [
        {
            "slug": "basics",
            "titleLocalized": {"ru": "Основы Go", "en": "Go Basics"},
            "description": "Learn fundamental Go language concepts",
            "modules": "1-15",
            "difficulty": "Beginner",
            "estimatedHours": 20,
        },
        {
            "slug": "advanced",
            "titleLocalized": {"ru": "Продвинутый Go", "en": "Advanced Go"},
            "description": "Deep dive into advanced Go features",
            "modules": "16-30",
            "difficulty": "Intermediate",
            "estimatedHours": 30,
        },
        {
            "slug": "web",
            "titleLocalized": {"ru": "Web-разработка", "en": "Web Development"},
            "description": "Building web applications with Go",
            "modules": "31-45",
            "difficulty": "Intermediate",
            "estimatedHours": 25,
        },
        {
            "slug": "concurrency",
            "titleLocalized": {"ru": "Конкурентность", "en": "Concurrency"},
            "description": "Mastering concurrent programming in Go",
            "modules": "46-60",
            "difficulty": "Advanced",
            "estimatedHours": 35,
        },
        {
            "slug": "testing",
            "titleLocalized": {"ru": "Тестирование", "en": "Testing"},
            "description": "Professional testing of Go applications",
            "modules": "61-79",
            "difficulty": "Advanced",
            "estimatedHours": 30,
        },
    ],
    "quality": {"minWords": 800, "minCodeExamples": 3, "minExercises": 2},
}

GITIGNORE = """# Build output
build/
godojo-export/
*.log

# Python
__pycache__/
*.egg-info/
.venv/

# OS files
.DS_Store
Thumbs.db

# Local configs
.env
.content-author-config.json
"""

README = """# Go tutorial content

Markdown sources of the Go tutorial published on godojo.dev.

- `content/<category>/index.md` describes a category.
- `content/<category>/<NN>-<slug>/topic.md` is one lesson.

Run `godojo-content check` before opening a pull request and
`godojo-content build` to produce the JSON records under `build/`.
"""

CONTRIBUTING = """# Contributing

1. Create your author profile: `godojo-content init --name NAME --email EMAIL`.
2. Scaffold a topic: `godojo-content new --category basics --title "..." --slug my-topic`.
3. Write at least 800 words, three Go examples and two exercises.
4. Run `godojo-content format` and `godojo-content validate`.
"""

SAMPLE_INDEX_BODY = """
# Основы Go

Добро пожаловать в раздел "Основы Go"! Здесь вы изучите фундаментальные
концепции языка программирования Go.
"""

SAMPLE_TOPIC_BODY = """
# Введение в Go

## 🎯 Что вы изучите

Язык Go, его философию и первую программу.

## 📚 Теоретическая часть

Go это статически типизированный компилируемый язык, разработанный в Google.

## 💻 Практические примеры

### Пример 1: Hello, World!

```go
package main

import "fmt"

func main() {
    fmt.Println("Привет, мир!")
}
```

## 🎯 Практические упражнения

### Упражнение 1: Модификация приветствия

**Задача:** Измените программу, чтобы она приветствовала пользователя по имени.

## 📝 Резюме

Вы написали свою первую программу на Go.
"""


@dataclass
class GenerateResult:
    created: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


class StructureGenerator:
    """Creates missing repository scaffolding. Existing files are left alone.

    Args:
        root: Repository root.
        content_dir: Content directory, relative to ``root`` unless absolute.
        config_path: Configuration file, relative to ``root`` unless absolute.
    """

    def __init__(
        self,
        root: str | Path = ".",
        content_dir: str | Path = "content",
        config_path: str | Path = DEFAULT_CONFIG_FILE,
    ) -> None:
        self._root = Path(root)
        self._content_dir = self._root / content_dir
        self._config_path = self._root / config_path

    def generate(self, what: str = "all") -> GenerateResult:
        if what not in TARGETS:
            raise ValueError(f"Unknown target '{what}' (expected one of {', '.join(TARGETS)})")

        result = GenerateResult()
        if what in ("config", "all"):
            self.create_config(result)
        if what in ("directories", "all"):
            self.create_directories(result)
        if what in ("docs", "all"):
            self.create_docs(result)
        if what in ("sample", "all"):
            self.create_sample(result)
        logger.info("Created %d items, skipped %d", len(result.created), len(result.skipped))
        return result

    def _config(self) -> ContentConfig:
        if self._config_path.is_file():
            return load_content_config(self._config_path)
        return parse_content_config(DEFAULT_CONFIG)

    def _write(self, path: Path, text: str, result: GenerateResult) -> None:
        if path.exists():
            result.skipped.append(path)
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        result.created.append(path)

    def create_config(self, result: GenerateResult) -> None:
        self._write(
            self._config_path,
            json.dumps(DEFAULT_CONFIG, indent=2, ensure_ascii=False) + "\n",
            result,
        )
        self._write(self._root / ".gitignore", GITIGNORE, result)

    def create_directories(self, result: GenerateResult) -> None:
        for directory in [self._content_dir] + [
            self._content_dir / slug for slug in self._config().slugs
        ]:
            if directory.is_dir():
                result.skipped.append(directory)
            else:
                directory.mkdir(parents=True)
                result.created.append(directory)

    def create_docs(self, result: GenerateResult) -> None:
        self._write(self._root / "README.md", README, result)
        self._write(self._root / "CONTRIBUTING.md", CONTRIBUTING, result)

    def create_sample(self, result: GenerateResult) -> None:
        """An index and first topic for the first configured category."""
        config = self._config()
        category = config.categories[0]
        language = config.structure.default_language
        start, _ = category.module_range

        index = {
            "title": category.title(language),
            "description": category.description or category.title(language),
            "category": category.slug,
            "difficulty": category.difficulty.value,
            "authorId": "system",
            "language": language,
            "modules": category.modules,
            "estimatedHours": category.estimated_hours,
        }
        self._write(
            self._content_dir / category.slug / "index.md",
            dump_front_matter(index, SAMPLE_INDEX_BODY),
            result,
        )

        topic = {
            "title": "Введение в Go",
            "description": "Познакомьтесь с языком Go и напишите первую программу",
            "module": start,
            "category": category.slug,
            "slug": "introduction",
            "language": language,
            "difficulty": category.difficulty.value,
            "estimatedMinutes": 30,
            "tags": ["golang", category.slug],
            "authorId": "system",
        }
        self._write(
            self._content_dir / category.slug / "01-introduction" / "topic.md",
            dump_front_matter(topic, SAMPLE_TOPIC_BODY),
            result,
        )
