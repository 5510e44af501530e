from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class FunctionCall(BaseModel):
    """
    Function invocation requested by the model. ``arguments`` is raw JSON text.
    """

    name: str = ""
    arguments: str = "{}"


class ToolCall(BaseModel):
    id: str = ""
    type: str = "function"
    function: FunctionCall = Field(default_factory=FunctionCall)


class ChatCompletionMessage(BaseModel):
    role: str
    content: Optional[str] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None


class ChatCompletionDelta(BaseModel):
    """
    Incremental fields carried by one streamed chunk.
    """

    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ChatCompletionChoice(BaseModel):
    """
    One choice of a chat completion.

    Streamed choices carry both the ``delta`` and a ``message`` view built
    from it, so consumers can read either.
    """

    index: int = 0
    message: ChatCompletionMessage
    delta: Optional[ChatCompletionDelta] = None
    finish_reason: Optional[str] = None


class ChatCompletionUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletion(BaseModel):
    """
    Canonical chat completion, also used for every streamed chunk.
    """

    id: str
    object: Literal["chat.completion", "chat.completion.chunk"]
    created: int
    model: str
    choices: List[ChatCompletionChoice]
    usage: Optional[ChatCompletionUsage] = None


ChatCompletionChunk = ChatCompletion
