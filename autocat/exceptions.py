"""
Exception classes for the categorization engine.
"""


class CategorizationError(Exception):
    """Base exception for all categorization errors."""

    pass


class ContentUnavailableError(CategorizationError):
    """Source file is missing, unreadable or corrupt. Fatal for the request."""

    pass


class ExternalServiceError(CategorizationError):
    """An OCR, detection or transcription provider failed or timed out."""

    pass


class MalformedPatternError(CategorizationError):
    """A stored annotation pattern lacks the fields required by its kind."""

    pass


class UnsupportedFileTypeError(CategorizationError):
    """The candidate file does not belong to a supported modality."""

    pass


class CorpusUnavailableError(CategorizationError):
    """The annotation corpus or category directory could not be read."""

    pass
