"""Configuration loaders for the content pipeline.

Two layers are involved:

* ``content.config.json`` describes the corpus itself (categories, quality
  thresholds, languages). It is validated against a closed schema and any
  problem aborts the command.
* ``godojo.yaml`` plus environment variables describe where the pipeline
  reads and writes (content, build and export directories).
"""

import json
import logging
import os
import re
from enum import Enum
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from godojo_content.errors import ConfigInvalidJSON, ConfigNotFound, ConfigSchemaInvalid

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "content.config.json"
DEFAULT_SETTINGS_FILE = "godojo.yaml"

_MODULE_RANGE_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")
_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_slug(value: object) -> bool:
    """True if ``value`` is a lowercase dash-separated slug, safe to use as a file name."""
    return isinstance(value, str) and _SLUG_RE.match(value) is not None


class Difficulty(str, Enum):
    """Difficulty tier of a category or topic."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


DIFFICULTY_VALUES: tuple[str, ...] = tuple(d.value for d in Difficulty)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class StructureConfig(_ConfigModel):
    """Language and numbering settings of the corpus."""

    default_language: str = Field(alias="defaultLanguage", min_length=1)
    languages: list[str] = Field(min_length=1)
    total_modules: int = Field(default=79, alias="totalModules", ge=1)
    code_language: str = Field(default="go", alias="codeLanguage", min_length=1)

    @model_validator(mode="after")
    def _default_language_listed(self) -> "StructureConfig":
        if self.default_language not in self.languages:
            raise ValueError(
                f"defaultLanguage '{self.default_language}' is not in languages"
            )
        return self


def parse_module_range(value: str) -> tuple[int, int]:
    """Parse a ``"1-15"`` style module range into an ordered pair.

    A single number (``"7"``) is a one-module range.

    Raises:
        ValueError: If the string is not a range or the bounds are inverted.
    """
    match = _MODULE_RANGE_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid module range '{value}' (expected e.g. '1-15')")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    if start < 1 or end < start:
        raise ValueError(f"invalid module range '{value}'")
    return start, end


class CategoryConfig(BaseModel):
    """One category of the corpus. Unknown keys are rejected."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    slug: str
    title_localized: dict[str, str] = Field(alias="titleLocalized", min_length=1)
    description: str = ""
    modules: str
    difficulty: Difficulty
    estimated_hours: float = Field(alias="estimatedHours", gt=0)

    @field_validator("slug")
    @classmethod
    def _slug_format(cls, value: str) -> str:
        if not is_slug(value):
            raise ValueError(f"slug '{value}' must be lowercase letters, digits and dashes")
        return value

    @field_validator("modules")
    @classmethod
    def _modules_format(cls, value: str) -> str:
        parse_module_range(value)
        return value

    @property
    def module_range(self) -> tuple[int, int]:
        return parse_module_range(self.modules)

    def title(self, language: str) -> str:
        """Title in the given language, falling back to any available title."""
        if language in self.title_localized:
            return self.title_localized[language]
        return next(iter(self.title_localized.values()))

    def contains_module(self, module: int) -> bool:
        start, end = self.module_range
        return start <= module <= end


class QualityStandards(_ConfigModel):
    """Minimum thresholds a topic must meet."""

    min_words: int = Field(default=800, alias="minWords", ge=0)
    min_code_examples: int = Field(default=3, alias="minCodeExamples", ge=0)
    min_exercises: int = Field(default=2, alias="minExercises", ge=0)


class GodojoConfig(_ConfigModel):
    """Settings of the target platform."""

    platform: str = "godojo.dev"
    api_endpoint: str = Field(default="https://api.godojo.dev/v1", alias="apiEndpoint")
    api_version: str = Field(default="v1", alias="apiVersion")
    repository: str = "golang-book-ru"
    certificate_modules: int = Field(default=60, alias="certificateModules", ge=0)


class ContentConfig(_ConfigModel):
    """Root of ``content.config.json``."""

    structure: StructureConfig
    categories: list[CategoryConfig] = Field(min_length=1)
    quality: QualityStandards
    godojo: GodojoConfig = Field(default_factory=GodojoConfig)

    @model_validator(mode="after")
    def _categories_consistent(self) -> "ContentConfig":
        seen: set[str] = set()
        for category in self.categories:
            if category.slug in seen:
                raise ValueError(f"duplicate category slug '{category.slug}'")
            seen.add(category.slug)

        ordered = sorted(self.categories, key=lambda c: c.module_range)
        for prev, current in zip(ordered, ordered[1:]):
            if current.module_range[0] <= prev.module_range[1]:
                raise ValueError(
                    f"module ranges of '{prev.slug}' ({prev.modules}) and "
                    f"'{current.slug}' ({current.modules}) overlap"
                )
        return self

    @property
    def slugs(self) -> list[str]:
        return [category.slug for category in self.categories]

    def category(self, slug: str) -> CategoryConfig | None:
        """Look up a category by slug."""
        for category in self.categories:
            if category.slug == slug:
                return category
        return None

    def category_for_module(self, module: int) -> CategoryConfig | None:
        for category in self.categories:
            if category.contains_module(module):
                return category
        return None


def _format_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "config"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(f"{location}: {message}")
    return errors


def parse_content_config(data: object) -> ContentConfig:
    """Validate already-decoded configuration data.

    Raises:
        ConfigSchemaInvalid: With one entry per offending field.
    """
    if not isinstance(data, dict):
        raise ConfigSchemaInvalid(["config: expected a JSON object at the top level"])
    try:
        return ContentConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigSchemaInvalid(_format_pydantic_errors(exc)) from exc


def load_content_config(config_path: str | Path = DEFAULT_CONFIG_FILE) -> ContentConfig:
    """Load and validate ``content.config.json``.

    Args:
        config_path: Path to the JSON configuration file.

    Returns:
        The immutable, validated configuration.

    Raises:
        ConfigNotFound: If the file does not exist.
        ConfigInvalidJSON: If the file is not valid UTF-8 JSON.
        ConfigSchemaInvalid: If required sections are missing or mistyped.
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigNotFound(f"Configuration file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigInvalidJSON(f"{path}: {exc}") from exc

    config = parse_content_config(data)
    logger.debug("Loaded %d categories from %s", len(config.categories), path)
    return config


class PipelineSettings(BaseModel):
    """Where the pipeline reads and writes."""

    content_dir: str = "content"
    build_dir: str = "build"
    export_dir: str = "godojo-export"
    config_path: str = DEFAULT_CONFIG_FILE
    author_profile: str = ".content-author-config.json"
    log_level: str = "INFO"


_ENV_OVERRIDES: dict[str, str] = {
    "GODOJO_CONTENT_DIR": "content_dir",
    "GODOJO_BUILD_DIR": "build_dir",
    "GODOJO_EXPORT_DIR": "export_dir",
    "GODOJO_CONFIG": "config_path",
    "GODOJO_AUTHOR_PROFILE": "author_profile",
    "GODOJO_LOG_LEVEL": "log_level",
}


def load_settings(settings_path: str | Path = DEFAULT_SETTINGS_FILE) -> PipelineSettings:
    """Load pipeline settings from a YAML file and environment variables.

    Args:
        settings_path: Path to the optional YAML settings file.

    Returns:
        Fully populated PipelineSettings instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    settings_file = Path(settings_path)
    if settings_file.exists():
        with open(settings_file, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    settings = PipelineSettings(**yaml_data)

    # Environment wins over the file
    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            setattr(settings, field_name, value)

    return settings
