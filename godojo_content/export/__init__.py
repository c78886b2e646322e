"""Export step: enrich built topics and package them for the platform."""

from godojo_content.export.exporter import ExportResult, GodojoExporter
from godojo_content.export.playground import (
    build_playground,
    exercise_tests,
    expected_output,
    extract_hints,
    is_runnable,
    playground_template,
)
from godojo_content.export.render import html_to_nodes, plain_text, render, render_html

__all__ = [
    "ExportResult",
    "GodojoExporter",
    "build_playground",
    "exercise_tests",
    "expected_output",
    "extract_hints",
    "html_to_nodes",
    "is_runnable",
    "plain_text",
    "playground_template",
    "render",
    "render_html",
]
