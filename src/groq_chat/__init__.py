"""Async client for OpenAI-style chat-completion endpoints."""

from .client import DEFAULT_API_URL, Chat
from .errors import (
    ChatAPIError,
    ErrorBodyDecodeError,
    GroqChatError,
    InvalidParameterError,
    MissingMessageError,
    ResponseDecodeError,
)
from .streaming import ChatStream
from .types import (
    ChatChoice,
    ChatRequest,
    ChatResponse,
    ChatUsage,
    FunctionDefinition,
    Message,
    NamedToolChoice,
    ResponseFormat,
    ServiceTier,
    Tool,
    ToolCall,
    ToolCallFunction,
)

__all__ = [
    "DEFAULT_API_URL",
    "Chat",
    "ChatStream",
    "ChatAPIError",
    "ErrorBodyDecodeError",
    "GroqChatError",
    "InvalidParameterError",
    "MissingMessageError",
    "ResponseDecodeError",
    "ChatChoice",
    "ChatRequest",
    "ChatResponse",
    "ChatUsage",
    "FunctionDefinition",
    "Message",
    "NamedToolChoice",
    "ResponseFormat",
    "ServiceTier",
    "Tool",
    "ToolCall",
    "ToolCallFunction",
]
