"""
Utilities for building output file paths from templates.
"""

from pathlib import Path
from typing import Any

from pathvalidate import sanitize_filename, sanitize_filepath

from maguro.exceptions import ConfigurationError

TEMPLATE_KEYS = ("id", "title", "author", "itag", "ext")


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


class PathFormatter:
    """
    Formats an output path template such as ``{author}/{title} [{id}].{ext}``.
    """

    def __init__(self, template: str) -> None:
        self.template = template

    @property
    def is_per_video(self) -> bool:
        """Whether the template yields a distinct path for every video."""
        return "{id}" in self.template or "{title}" in self.template

    def format_path(self, **values: Any) -> Path:
        """
        Generates a final, sanitized file path from the template.

        Raises:
            ConfigurationError: If the template uses an unknown placeholder.
        """
        template_vars = {key: "" for key in TEMPLATE_KEYS}
        template_vars.update(
            {
                key: sanitize_filename(str(value))
                for key, value in values.items()
                if value is not None
            }
        )
        try:
            formatted = self.template.format(**template_vars)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid output template '{self.template}': {e}. "
                f"Available placeholders: {', '.join(TEMPLATE_KEYS)}."
            ) from e
        return Path(sanitize_filepath(formatted, platform="auto"))
