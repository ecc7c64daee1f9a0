from typing import Any, Dict, List, Optional


class RepositoryException(Exception):
    """Exception raised when a repository is misconfigured or misused."""

    def __init__(self, message: str = "Repository error."):
        super().__init__(message)


class ConfigurationError(RepositoryException):
    """Exception raised when required transport settings are missing."""

    def __init__(self, message: str = "Repository configuration is incomplete."):
        super().__init__(message)


class UnacceptableFieldsError(RepositoryException):
    """Exception raised when none of the requested search fields are accepted."""

    def __init__(self, fields: List[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(
            message or f"Fields {','.join(self.fields)} are not accepted for search."
        )


class ValidationError(RepositoryException):
    """Exception raised when attributes fail validation before a mutation."""

    def __init__(
        self,
        field_errors: Dict[str, List[str]],
        message: str = "The given attributes failed validation.",
    ):
        self.field_errors = field_errors
        super().__init__(message)


class TransportError(RepositoryException):
    """Exception raised by a transport when the backend reports a failure."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.errors = errors or []
        self.status_code = status_code
        super().__init__(message)
