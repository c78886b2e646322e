"""Document data model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """A topic or category-index file split into front matter and body."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    front_matter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""

    @property
    def is_category_index(self) -> bool:
        return self.file_path.replace("\\", "/").rsplit("/", 1)[-1] == "index.md"

    def get(self, key: str, default: Any = None) -> Any:
        """Front matter value for ``key``."""
        return self.front_matter.get(key, default)
