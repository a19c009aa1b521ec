"""Request, conversation and response models for the chat-completions API."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic_core import PydanticCustomError

Role = Literal["system", "user", "assistant", "tool"]
ToolType = Literal["function"]
ToolChoiceMode = Literal["none", "auto", "required"]

MISSING_MESSAGE_ERROR = "missing_message"


class ToolCallFunction(BaseModel):
    """Function reference inside a service-issued tool call."""

    name: str
    # raw JSON text produced by the model, forwarded untouched to handlers
    arguments: str


class ToolCall(BaseModel):
    """A request from the service to run a local function."""

    id: str
    type: ToolType = "function"
    function: ToolCallFunction


class Message(BaseModel):
    """Single chat message."""

    role: Role
    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str | None = None, tool_calls: list[ToolCall] | None = None) -> Message:
        return cls(role="assistant", content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> Message:
        """Wrap a tool handler's result for the call identified by `tool_call_id`."""
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


class FunctionDefinition(BaseModel):
    """Callable function advertised to the service."""

    name: str | None = None
    description: str | None = None
    # JSON schema of the arguments; passed through as-is
    parameters: Any = None


class Tool(BaseModel):
    """Tool declaration attached to a request."""

    type: ToolType = "function"
    function: FunctionDefinition

    @classmethod
    def function_tool(
        cls,
        name: str,
        description: str | None = None,
        parameters: Any = None,
    ) -> Tool:
        return cls(function=FunctionDefinition(name=name, description=description, parameters=parameters))


class ToolChoiceFunction(BaseModel):
    name: str | None = None


class NamedToolChoice(BaseModel):
    """Forces the model to call one specific function."""

    type: ToolType = "function"
    function: ToolChoiceFunction

    @classmethod
    def for_function(cls, name: str) -> NamedToolChoice:
        return cls(function=ToolChoiceFunction(name=name))


# Either a bare policy keyword or a forced function, sharing the `tool_choice` field.
ToolChoice = Union[ToolChoiceMode, NamedToolChoice]


class ResponseFormat(str, Enum):
    TEXT = "text"
    JSON_OBJECT = "json_object"
    JSON_ARRAY = "json_array"


class ServiceTier(str, Enum):
    ON_DEMAND = "on_demand"
    AUTO = "auto"
    FLEX = "flex"


class ChatRequest(BaseModel):
    """Wire-level chat completion request, including the conversation."""

    # builder setters rely on assignment being validated
    model_config = ConfigDict(validate_assignment=True)

    model: str
    messages: list[Message] = Field(default_factory=list)
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    max_completion_tokens: int | None = None
    parallel_tool_calls: bool = True
    presence_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    reasoning_format: str | None = None
    response_format: ResponseFormat | None = None
    seed: int | None = None
    service_tier: ServiceTier | None = None
    stream: bool = False
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    tool_choice: ToolChoice | None = None
    tools: list[Tool] = Field(default_factory=list)

    @field_validator("response_format", mode="before")
    @classmethod
    def unwrap_response_format(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("type")
        return value

    @field_serializer("response_format")
    def wrap_response_format(self, value: ResponseFormat | None) -> dict[str, str] | None:
        if value is None:
            return None
        return {"type": value.value}

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the service."""
        payload = self.model_dump(mode="json", exclude_none=True)
        if not self.tools:
            payload.pop("tools", None)
        return payload


class ChatChoice(BaseModel):
    """One candidate completion.

    Buffered responses carry the candidate under `message`, streamed chunks
    under `delta`. Both are resolved into `message` here, `delta` taking
    precedence. A choice with neither fails validation with the
    ``missing_message`` error type.
    """

    index: int
    message: Message
    logprobs: Any = None
    finish_reason: str | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_message(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        delta = data.pop("delta", None)
        message = data.pop("message", None)
        if delta is None and message is None:
            raise PydanticCustomError(MISSING_MESSAGE_ERROR, "missing field `delta` or `message`")
        if delta is None:
            data["message"] = message
        elif isinstance(delta, dict) and "role" not in delta:
            # continuation fragments omit the role
            data["message"] = {**delta, "role": "assistant"}
        else:
            data["message"] = delta
        return data


class ChatUsage(BaseModel):
    """Token counts and timings (seconds) reported for a completion."""

    queue_time: float = 0.0
    prompt_tokens: int = 0
    prompt_time: float = 0.0
    completion_tokens: int = 0
    completion_time: float = 0.0
    total_tokens: int = 0
    total_time: float = 0.0


class XGroq(BaseModel):
    id: str


class ChatResponse(BaseModel):
    """Decoded completion, or one chunk of a streamed completion."""

    id: str
    object: str
    created: int
    model: str
    choices: list[ChatChoice] = Field(min_length=1)
    usage: ChatUsage | None = None
    system_fingerprint: str | None = None
    x_groq: XGroq | None = None

    @property
    def first_message(self) -> Message:
        return self.choices[0].message


class ErrorDetails(BaseModel):
    message: str
    type: str
    param: str | None = None
    code: str | None = None

    @field_validator("param", "code", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class ErrorBody(BaseModel):
    """Structured body of a failed request."""

    error: ErrorDetails
