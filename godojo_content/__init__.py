"""Content pipeline for the godojo.dev Go tutorial corpus."""

__version__ = "2.0.0"
