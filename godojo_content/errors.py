"""Error taxonomy for the content pipeline."""


class ContentPipelineError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(ContentPipelineError):
    """The content configuration could not be loaded."""


class ConfigNotFound(ConfigError):
    """The configuration file does not exist."""


class ConfigInvalidJSON(ConfigError):
    """The configuration file is not valid JSON."""


class ConfigSchemaInvalid(ConfigError):
    """The configuration file does not match the expected schema.

    Attributes:
        errors: Itemized field errors, e.g. ``"categories.0.slug: ..."``.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in self.errors)
        )


class ValidationError(ContentPipelineError):
    """Content or structure fails a declared rule."""


class FrontMatterError(ValidationError):
    """The front matter block of a document cannot be used."""


class MissingFrontMatter(FrontMatterError):
    """The document has no (or a malformed) ``---`` delimited block."""


class InvalidFrontMatter(FrontMatterError):
    """The front matter block is present but is not a YAML mapping."""


class DirectoryNotFound(ValidationError, FileNotFoundError):
    """A directory the pipeline needs to walk does not exist."""


class TemplateError(ContentPipelineError):
    """An output template is missing or fails to render."""


class BuildError(ContentPipelineError):
    """The build cannot start (e.g. no content directory)."""


class ExportError(ContentPipelineError):
    """The export cannot start (e.g. no build output)."""
