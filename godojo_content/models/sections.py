"""Structured records extracted from a document body."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Playground(_Record):
    """Playground metadata derived for one code example at export time."""

    template: str
    runnable: bool
    expected_output: str | None = None


class CodeExample(_Record):
    """One ``###`` subsection of the examples section."""

    title: str
    code: str = ""
    explanation: str = ""
    playground: Playground | None = None


class ExerciseTest(_Record):
    """A synthesized check attached to an exercise."""

    name: str
    kind: str = Field(serialization_alias="type")
    description: str


class Exercise(_Record):
    """One ``### Exercise N: Title`` subsection."""

    number: int = Field(ge=1)
    title: str
    content: str = ""
    hints: list[str] = Field(default_factory=list)
    tests: list[ExerciseTest] = Field(default_factory=list)


class ParsedSections(_Record):
    """Canonical sections of a topic body.

    Text sections hold the raw Markdown of the section; ``examples`` and
    ``exercises`` hold the decomposed subsections.
    """

    theory: str = ""
    examples: list[CodeExample] = Field(default_factory=list)
    exercises: list[Exercise] = Field(default_factory=list)
    best_practices: str = ""
    common_mistakes: str = ""
    real_world: str = ""
    summary: str = ""
