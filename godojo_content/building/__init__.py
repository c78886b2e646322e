"""Build step: Markdown tree to normalized JSON/YAML records."""

from godojo_content.building.builder import BuildFailure, BuildResult, ContentBuilder

__all__ = ["BuildFailure", "BuildResult", "ContentBuilder"]
