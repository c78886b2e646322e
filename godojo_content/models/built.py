"""Output records of the build step."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from godojo_content.models.sections import ParsedSections

# Fields derived at export time, not part of build output
_BUILD_EXCLUDE = {
    "examples": {"__all__": {"playground"}},
    "exercises": {"__all__": {"hints", "tests"}},
}


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TopicStats(_Record):
    """Computed statistics of one topic."""

    word_count: int = 0
    code_example_count: int = 0
    exercise_count: int = 0
    reading_time_minutes: int = 0


class BuiltTopic(_Record):
    """Front matter, parsed sections and stats of one topic."""

    slug: str
    category: str
    front_matter: dict[str, Any] = Field(default_factory=dict)
    content: ParsedSections = Field(default_factory=ParsedSections)
    stats: TopicStats = Field(default_factory=TopicStats)

    @property
    def module(self) -> int | None:
        value = self.front_matter.get("module")
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    def to_record(self) -> dict[str, Any]:
        """Serializable record: front matter first, then derived fields."""
        record = dict(self.front_matter)
        record["category"] = self.category
        record["slug"] = self.slug
        record["content"] = self.content.model_dump(by_alias=True, exclude=_BUILD_EXCLUDE)
        record["stats"] = self.stats.model_dump(by_alias=True)
        return record

    def index_entry(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.front_matter.get("title"),
            "category": self.category,
            "module": self.front_matter.get("module"),
            "difficulty": self.front_matter.get("difficulty"),
            "estimatedMinutes": self.front_matter.get("estimatedMinutes"),
            "tags": self.front_matter.get("tags", []),
        }


class TopicRef(_Record):
    slug: str
    title: str | None = None
    module: int | None = None


class BuiltCategory(_Record):
    """Category index front matter plus the topics found under it."""

    slug: str
    front_matter: dict[str, Any] = Field(default_factory=dict)
    topics: list[TopicRef] = Field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"slug": self.slug}
        record.update(self.front_matter)
        record["slug"] = self.slug
        record["topics"] = [t.model_dump(by_alias=True) for t in self.topics]
        return record

    def index_entry(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.front_matter.get("title"),
            "description": self.front_matter.get("description"),
            "difficulty": self.front_matter.get("difficulty"),
            "topicsCount": len(self.topics),
        }


class ManifestStats(_Record):
    categories: int = 0
    topics: int = 0
    exercises: int = 0
    code_examples: int = 0
    failed: int = 0


class Manifest(_Record):
    """Aggregate summary of one build pass."""

    version: str = "1.0.0"
    generated: str
    platform: str
    language: str
    repository: str
    stats: ManifestStats = Field(default_factory=ManifestStats)
    categories: list[str] = Field(default_factory=list)
    modules_range: tuple[int, int] | None = None

    def to_record(self) -> dict[str, Any]:
        modules_range = None
        if self.modules_range is not None:
            modules_range = {"min": self.modules_range[0], "max": self.modules_range[1]}
        return {
            "version": self.version,
            "generated": self.generated,
            "platform": self.platform,
            "language": self.language,
            "repository": self.repository,
            "stats": self.stats.model_dump(by_alias=True),
            "structure": {"categories": list(self.categories), "modulesRange": modules_range},
        }
