"""Exceptions for the annotation batch client."""

from __future__ import annotations


class AcdBatchError(Exception):
    """Base exception for all acd-batch errors."""

    pass


class ConfigError(AcdBatchError):
    """Raised when the configuration or request template cannot be loaded."""

    pass


class AnnotationError(AcdBatchError):
    """Base exception for failed annotation requests."""

    pass


class AnnotationServerError(AnnotationError):
    """Raised when the service answers with a 5xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Server returned {status_code}: {body or 'No error message provided'}")
        self.status_code = status_code
        self.body = body


class AnnotationStatusError(AnnotationError):
    """Raised when the service answers with a status that is not retried."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Service returned {status_code}: {body or 'No error message provided'}")
        self.status_code = status_code
        self.body = body


class AnnotationTransportError(AnnotationError):
    """Raised when the request fails before a response is received."""

    pass


class AnnotationResponseError(AnnotationError):
    """Raised when a 200 response does not carry a JSON object."""

    pass
