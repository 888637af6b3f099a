"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, field_validator

from maguro.media.downloader import DEFAULT_CHUNK_SIZE
from maguro.media.transport import DEFAULT_USER_AGENT

DEFAULT_INFO_ENDPOINT = "https://www.youtube.com/get_video_info?video_id={video_id}"
DEFAULT_OUTPUT_TEMPLATE = "{id}.{ext}"

MIN_CHUNK_SIZE = 1024  # 1 KB
MAX_CHUNK_SIZE = 8388608  # 8 MB


class ClientConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    info_endpoint: str = DEFAULT_INFO_ENDPOINT
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    connect_timeout: float = 15.0
    read_timeout: float = 90.0
    output_template: str = DEFAULT_OUTPUT_TEMPLATE

    @field_validator("info_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """The endpoint must be an HTTP(S) URL templated on the video ID."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Info endpoint must be an http(s) URL.")
        if "{video_id}" not in v:
            raise ValueError("Info endpoint must contain the {video_id} placeholder.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < MIN_CHUNK_SIZE or v > MAX_CHUNK_SIZE:
            raise ValueError(
                f"Chunk size must be between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE} bytes."
            )
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @field_validator("output_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        """Validates the output path template."""
        if not v:
            raise ValueError("Output template cannot be empty.")
        if ".." in v:
            raise ValueError("Output template cannot contain relative '..' paths.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
