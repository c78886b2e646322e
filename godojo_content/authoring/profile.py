"""Local author profile persisted between scaffolding runs."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from godojo_content.errors import ValidationError
from godojo_content.ingestion.markdown import slugify
from godojo_content.models.author import AuthorProfile

logger = logging.getLogger(__name__)


def author_id(name: str) -> str:
    """Stable identifier derived from the author's name."""
    return slugify(name) or "author"


class ProfileStore:
    """Reads and writes the author profile JSON file.

    Args:
        path: Location of the profile file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> AuthorProfile | None:
        """Return the stored profile, or None if there is none.

        Raises:
            ValidationError: If the file exists but is not a valid profile.
        """
        if not self.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return AuthorProfile.model_validate(data)
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            raise ValidationError(f"Author profile {self.path} is invalid: {exc}") from exc

    def save(self, profile: AuthorProfile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(profile.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
            + "\n",
            encoding="utf-8",
        )
        logger.debug("Saved author profile to %s", self.path)

    def create(
        self,
        name: str,
        email: str,
        language: str = "ru",
        focus: str = "all",
        experience: str = "intermediate",
        force: bool = False,
    ) -> tuple[AuthorProfile, bool]:
        """Create a profile unless one exists.

        Returns:
            ``(profile, created)``; an existing profile is returned unchanged
            with ``created`` False unless ``force`` is set.

        Raises:
            ValidationError: If the name or email is rejected.
        """
        existing = self.load() if not force else None
        if existing is not None:
            return existing, False

        try:
            profile = AuthorProfile(
                name=name.strip(),
                email=email.strip(),
                author_id=author_id(name),
                default_language=language,
                content_focus=focus,
                experience_level=experience,
            )
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid author profile: {exc}") from exc
        self.save(profile)
        logger.info("Created author profile for %s", profile.name)
        return profile, True

    def record_created(self, profile: AuthorProfile) -> AuthorProfile:
        """Increment the created-content counter and persist it."""
        updated = profile.model_copy(update={"content_created": profile.content_created + 1})
        self.save(updated)
        return updated
