"""Author profile data model."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthorProfile(BaseModel):
    """Identity of a content author and their running statistics."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    author_id: str
    default_language: str = "ru"
    content_focus: str = "all"  # "beginner", "intermediate", "advanced", "all"
    experience_level: str = "intermediate"
    setup_date: datetime = Field(default_factory=datetime.now)
    content_created: int = 0
    target_audience: str = "global"
    platform: str = "godojo.dev"
