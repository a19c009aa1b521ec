"""Turn raw response bodies into typed responses and errors."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from groq_chat.errors import ChatAPIError, ErrorBodyDecodeError, MissingMessageError, ResponseDecodeError
from groq_chat.types import MISSING_MESSAGE_ERROR, ChatResponse, ErrorBody

logger = logging.getLogger(__name__)


def decode_response(text: str) -> ChatResponse:
    """Decode a buffered body or a single stream frame as a `ChatResponse`."""
    try:
        return ChatResponse.model_validate_json(text)
    except ValidationError as exc:
        if any(err["type"] == MISSING_MESSAGE_ERROR for err in exc.errors()):
            raise MissingMessageError(f"Choice without `delta` or `message`: {exc}", text) from exc
        raise ResponseDecodeError(f"Malformed chat response: {exc}", text) from exc


def decode_error(status_code: int, text: str) -> ChatAPIError:
    """Build the exception for a failed request from its body.

    Raises `ErrorBodyDecodeError` if the body is not a service error object.
    """
    try:
        body = ErrorBody.model_validate_json(text)
    except ValidationError as exc:
        logger.debug("Error body did not match the error schema: %s", exc)
        raise ErrorBodyDecodeError(status_code, text) from exc
    details = body.error
    return ChatAPIError(
        details.message,
        status_code=status_code,
        type=details.type,
        param=details.param,
        code=details.code,
    )
