"""Authoring tools: profile, scaffolding, formatting, repository setup and git."""

from godojo_content.authoring.formatter import FormatResult, MarkdownFormatter, format_tree
from godojo_content.authoring.generator import GenerateResult, StructureGenerator
from godojo_content.authoring.profile import ProfileStore, author_id
from godojo_content.authoring.scaffold import Scaffolder, ScaffoldResult, render_template
from godojo_content.authoring.stats import CategoryStats, content_stats
from godojo_content.authoring.sync import ChangeSummary, GitSync, suggest_commit_message

__all__ = [
    "CategoryStats",
    "ChangeSummary",
    "FormatResult",
    "GenerateResult",
    "GitSync",
    "MarkdownFormatter",
    "ProfileStore",
    "ScaffoldResult",
    "Scaffolder",
    "StructureGenerator",
    "author_id",
    "content_stats",
    "format_tree",
    "render_template",
    "suggest_commit_message",
]
