"""Content quality rules."""

from godojo_content.quality.checker import QualityChecker, check_content

__all__ = ["QualityChecker", "check_content"]
