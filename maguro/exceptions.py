"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class MaguroError(Exception):
    """Base exception for all application-specific errors."""


# Manifest parsing


class ParseError(MaguroError):
    """Raised when a manifest document is malformed or incomplete."""


class MissingFieldError(ParseError):
    """Raised when a required element or attribute is absent from a manifest."""

    def __init__(self, path: str):
        super().__init__(f"Missing required field: {path}")
        self.path = path


class InvalidValueError(ParseError):
    """Raised when a manifest field cannot be converted to its expected type."""

    def __init__(self, path: str, raw: str):
        super().__init__(f"Invalid value {raw!r} at {path}")
        self.path = path
        self.raw = raw


# Segment resolution


class ResolutionError(MaguroError):
    """Raised when a representation cannot be resolved to segment URLs."""


class UnsupportedAddressingError(ResolutionError):
    """Raised for representations addressed by SegmentBase or SegmentTemplate."""

    def __init__(self, representation_id: str, scheme: str):
        super().__init__(
            f"Representation '{representation_id}' uses unsupported addressing "
            f"scheme '{scheme}'."
        )
        self.representation_id = representation_id
        self.scheme = scheme


class MissingBaseUrlError(ResolutionError):
    """Raised when neither a representation nor its ancestors define a BaseURL."""

    def __init__(self, representation_id: str):
        super().__init__(f"Representation '{representation_id}' has no BaseURL.")
        self.representation_id = representation_id


# Transport and retrieval


class TransportError(MaguroError):
    """Raised by a transport when a request for a URL fails."""

    def __init__(self, url: str, cause: BaseException | str):
        super().__init__(f"Request for '{url}' failed: {cause}")
        self.url = url
        self.cause = cause


class RetrievalError(MaguroError):
    """Base class for failures while streaming bytes to a sink."""


class TransportFailureError(RetrievalError):
    """
    Raised when fetching the URL at a given ordinal position fails.

    Everything before `index` has been written to the sink; nothing from
    `index + 1` onward was requested.
    """

    def __init__(self, index: int, url: str, cause: BaseException):
        super().__init__(f"Fetching segment {index} ('{url}') failed: {cause}")
        self.index = index
        self.url = url
        self.cause = cause


class SinkWriteError(RetrievalError):
    """Raised when the output sink rejects a write."""

    def __init__(self, index: int, cause: BaseException):
        super().__init__(f"Writing segment {index} to the output failed: {cause}")
        self.index = index
        self.cause = cause


# Metadata endpoint


class MetadataError(MaguroError):
    """Base class for failures while resolving video metadata."""


class MetadataTransportError(MetadataError):
    """Raised when the metadata endpoint cannot be reached."""


class EnvelopeDecodeError(MetadataError):
    """Raised when the URL-encoded response envelope cannot be unwrapped."""


class PayloadSchemaError(MetadataError):
    """Raised when the embedded JSON payload does not match the expected schema."""


# Selection and configuration


class FormatNotFoundError(MaguroError):
    """Raised when a requested format or representation does not exist."""


class ConfigurationError(MaguroError):
    """Raised for issues related to configuration loading or validation."""
