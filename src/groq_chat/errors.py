"""Package specific exception hierarchy."""

from __future__ import annotations


class GroqChatError(Exception):
    """Base exception for groq_chat package."""


class InvalidParameterError(GroqChatError, ValueError):
    """Raised when a generation parameter is outside its accepted range."""

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(message)
        self.parameter = parameter


class ChatAPIError(GroqChatError):
    """Represents an error reported by the service in a structured error body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        type: str,
        param: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(f"Chat error: {message} (status {status_code})")
        self.message = message
        self.status_code = status_code
        self.type = type
        self.param = param
        self.code = code


class ErrorBodyDecodeError(GroqChatError):
    """Raised when a failed response carries a body that is not a service error."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Undecodable error body (status {status_code}): {body[:200]}")
        self.status_code = status_code
        self.body = body


class ResponseDecodeError(GroqChatError):
    """Raised when a successful response does not match the response schema."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class MissingMessageError(ResponseDecodeError):
    """Raised when a choice carries neither a `delta` nor a `message` field."""
