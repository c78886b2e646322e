"""Shared fixtures: a minimal valid content repository."""

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from godojo_content.config import ContentConfig, parse_content_config
from godojo_content.ingestion.frontmatter import dump_front_matter


def _config_data() -> dict[str, Any]:
    return {
        "structure": {"defaultLanguage": "ru", "languages": ["ru", "en"]},
        "categories": [
            {
                "slug": "basics",
                "titleLocalized": {"ru": "Основы Go", "en": "Go Basics"},
                "description": "Fundamental Go language concepts",
                "modules": "1-15",
                "difficulty": "Beginner",
                "estimatedHours": 20,
            }
        ],
        "quality": {"minWords": 800, "minCodeExamples": 3, "minExercises": 2},
    }


def _prose(words: int) -> str:
    return " ".join(f"слово{i}" for i in range(words))


def _topic_body(words: int = 850) -> str:
    return f"""
# Переменные в Go

## 🎯 Что вы изучите

- Объявление переменных
- Короткое объявление

## 📚 Теоретическая часть

{_prose(words)}

## 💻 Практические примеры

### Пример 1: Объявление

```go
package main

import "fmt"

func main() {{
    var x int = 1
    fmt.Println(x)
}}
```

Программа печатает:

```text
1
```

### Пример 2: Короткое объявление

```go
package main

import "fmt"

func main() {{
    y := 2
    fmt.Println(y)
}}
```

### Пример 3: Константы

```go
package main

import "fmt"

const pi = 3.14

func main() {{
    fmt.Println(pi)
}}
```

## 🎯 Практические упражнения

### Упражнение 1: Базовые переменные

**Задача:** Объявите три переменные разных типов.

**Подсказки:**
- Используйте var
- Используйте :=

### Упражнение 2: Функция обмена

**Задача:** Напишите функцию, меняющую два значения местами.

## 🔧 Лучшие практики

Используйте короткое объявление внутри функций.

## 📝 Резюме

Мы разобрали объявление переменных.
"""


TOPIC_FRONT_MATTER: dict[str, Any] = {
    "title": "Переменные",
    "description": "Объявление переменных, короткое объявление и константы в языке Go",
    "module": 1,
    "category": "basics",
    "slug": "variables",
    "difficulty": "Beginner",
    "authorId": "tester",
    "language": "ru",
    "estimatedMinutes": 30,
    "tags": ["golang", "basics"],
}

INDEX_FRONT_MATTER: dict[str, Any] = {
    "title": "Основы Go",
    "description": "Фундаментальные концепции языка Go для начинающих разработчиков",
    "category": "basics",
    "difficulty": "Beginner",
    "authorId": "tester",
}


@dataclass
class Project:
    root: Path
    content_dir: Path
    config_path: Path
    config: ContentConfig

    def write_doc(self, relative: str, front_matter: dict[str, Any], body: str) -> Path:
        path = self.content_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dump_front_matter(front_matter, body), encoding="utf-8")
        return path


@pytest.fixture
def config_data() -> dict[str, Any]:
    return _config_data()


@pytest.fixture
def config(config_data: dict[str, Any]) -> ContentConfig:
    return parse_content_config(config_data)


@pytest.fixture
def topic_body() -> Callable[..., str]:
    return _topic_body


@pytest.fixture
def topic_front_matter() -> dict[str, Any]:
    return dict(TOPIC_FRONT_MATTER)


@pytest.fixture
def project(tmp_path: Path, config_data: dict[str, Any]) -> Project:
    """One category with an index and one topic meeting every threshold."""
    config_path = tmp_path / "content.config.json"
    config_path.write_text(json.dumps(config_data, ensure_ascii=False), encoding="utf-8")
    project = Project(
        root=tmp_path,
        content_dir=tmp_path / "content",
        config_path=config_path,
        config=parse_content_config(config_data),
    )
    project.write_doc("basics/index.md", dict(INDEX_FRONT_MATTER), "\n# Основы Go\n")
    project.write_doc("basics/01-variables/topic.md", dict(TOPIC_FRONT_MATTER), _topic_body())
    return project
