"""
Error taxonomy for the API.

Every error carries the HTTP status it maps to; the handler registered in
``create_app`` renders it as ``{"message": ...}``.
"""


class APIError(Exception):
    """Base API error class."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(APIError):
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class AuthorizationError(APIError):
    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class NotFoundError(APIError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class UpstreamError(APIError):
    """A dependency (PDF parser, language model, database) failed.

    The message is what the client sees; the cause is only logged.
    """

    status_code = 500


class ExtractionError(UpstreamError):
    def __init__(self, message: str = "File upload failed"):
        super().__init__(message)


class SummarizationError(UpstreamError):
    def __init__(self, message: str = "Summarization failed"):
        super().__init__(message)


class AnswerError(UpstreamError):
    def __init__(self, message: str = "Q&A failed"):
        super().__init__(message)
