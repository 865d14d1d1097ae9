"""
SwachhSathi - Error taxonomy.
"""


class SwachhSathiError(Exception):
    """Base class for all application errors."""


class ValidationError(SwachhSathiError):
    """A required input is missing or malformed."""


class ExternalServiceError(SwachhSathiError):
    """A collaborator call (vision, generative model, store, push) failed."""


class NotFoundError(SwachhSathiError):
    """An expected record does not exist."""


class ClassificationError(SwachhSathiError):
    """Neither the primary nor the fallback classifier produced a result."""
