from typing import Optional

class AirstackError(Exception):
    """Base class for every error raised by the Airstack client."""

class TransportError(AirstackError):
    """The HTTP exchange itself failed: no connection, timeout or a truncated body."""

class MalformedErrorBody(AirstackError):
    """A non-success response whose body is not valid JSON.

    Only ever attached to ``RawResponse.error``; the transport does not raise it.
    """

class EnvelopeError(AirstackError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class APIError(EnvelopeError):
    """The API answered with a non-200 status or a GraphQL ``errors`` member."""

class QueryError(AirstackError):
    """The query could not be sent (bad variables or a transport failure)."""

class DecodeError(AirstackError):
    """The response payload does not have the expected shape."""
