"""Data models for the content pipeline."""

from godojo_content.models.author import AuthorProfile
from godojo_content.models.built import (
    BuiltCategory,
    BuiltTopic,
    Manifest,
    ManifestStats,
    TopicRef,
    TopicStats,
)
from godojo_content.models.document import Document
from godojo_content.models.finding import Finding, Report, Severity
from godojo_content.models.sections import (
    CodeExample,
    Exercise,
    ExerciseTest,
    ParsedSections,
    Playground,
)

__all__ = [
    "AuthorProfile",
    "BuiltCategory",
    "BuiltTopic",
    "CodeExample",
    "Document",
    "Exercise",
    "ExerciseTest",
    "Finding",
    "Manifest",
    "ManifestStats",
    "ParsedSections",
    "Playground",
    "Report",
    "Severity",
    "TopicRef",
    "TopicStats",
]
