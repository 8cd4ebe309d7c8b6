"""Exceptions raised when talking to the Salesforce REST API."""


class SalesforceError(Exception):
    """Base class for Salesforce API failures."""


class ApiError(SalesforceError):
    """A non-2xx response that is not an expired session."""

    def __init__(self, status_code: int, message: str, error_code: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"Salesforce API error ({status_code}): {message}")


class TokenExpiredError(SalesforceError):
    """The bearer token was rejected; the caller must reauthorize."""

    def __init__(self, message: str = "Token expired or invalid") -> None:
        self.message = message
        super().__init__(message)
