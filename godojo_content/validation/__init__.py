"""Structure and platform validators."""

from godojo_content.validation.godojo import GodojoValidator
from godojo_content.validation.structure import StructureValidator

__all__ = ["GodojoValidator", "StructureValidator"]
