"""
Mapping of raw, possibly partial, completion payloads into canonical models.

Every default for a missing wire field is substituted here, once, for both
streamed and non-streamed responses.
"""

from __future__ import annotations

import time
from typing import Any, List, Optional

from .exceptions import GravixLayerError
from .models.chat import (
    ChatCompletion,
    ChatCompletionChoice,
    ChatCompletionDelta,
    ChatCompletionMessage,
    ChatCompletionUsage,
    FunctionCall,
    ToolCall,
)
from .models.completions import Completion, CompletionChoice, CompletionUsage


def _now_ms() -> int:
    return int(time.time() * 1000)


def _parse_tool_calls(raw: Any) -> Optional[List[ToolCall]]:
    if not isinstance(raw, list):
        return None

    tool_calls = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        function = item.get("function")
        if not isinstance(function, dict):
            function = {}
        tool_calls.append(
            ToolCall(
                id=item.get("id") or "",
                type=item.get("type") or "function",
                function=FunctionCall(
                    name=function.get("name") or "",
                    arguments=function.get("arguments") or "{}",
                ),
            )
        )
    return tool_calls


def _stream_choice(choice: dict) -> ChatCompletionChoice:
    # Some servers send full messages even while streaming.
    source = choice.get("delta")
    if not isinstance(source, dict):
        source = choice.get("message")
    if not isinstance(source, dict):
        source = {}

    role = source.get("role") or None
    content = source.get("content") or None
    tool_calls = _parse_tool_calls(source.get("tool_calls"))

    return ChatCompletionChoice(
        index=choice.get("index") or 0,
        delta=ChatCompletionDelta(role=role, content=content, tool_calls=tool_calls),
        message=ChatCompletionMessage(
            role=role or "assistant",
            content=content or "",
            tool_calls=tool_calls,
        ),
        finish_reason=choice.get("finish_reason") or None,
    )


def _message_choice(choice: dict) -> ChatCompletionChoice:
    message = choice.get("message")
    if not isinstance(message, dict):
        message = {}

    return ChatCompletionChoice(
        index=choice.get("index") or 0,
        message=ChatCompletionMessage(
            role=message.get("role") or "assistant",
            content=message.get("content") or None,
            tool_calls=_parse_tool_calls(message.get("tool_calls")),
            tool_call_id=message.get("tool_call_id"),
        ),
        finish_reason=choice.get("finish_reason") or None,
    )


def _usage_fields(data: dict) -> Optional[dict]:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    return {
        "prompt_tokens": usage.get("prompt_tokens") or 0,
        "completion_tokens": usage.get("completion_tokens") or 0,
        "total_tokens": usage.get("total_tokens") or 0,
    }


def normalize_chat_completion(data: Any, is_stream: bool = False) -> ChatCompletion:
    """
    Build a ``ChatCompletion`` from a decoded JSON payload.

    Args:
        data: The decoded response body, or one decoded stream frame.
        is_stream: Whether ``data`` is a streamed chunk. Controls the
            ``object`` kind, the delta view and the defaults of synthetic
            choices.

    Raises:
        GravixLayerError: If ``data`` is not a JSON object.
    """
    if not isinstance(data, dict):
        raise GravixLayerError("Invalid response data")

    choices: List[ChatCompletionChoice] = []
    raw_choices = data.get("choices")
    if isinstance(raw_choices, list):
        for choice in raw_choices:
            if not isinstance(choice, dict):
                continue
            if is_stream:
                choices.append(_stream_choice(choice))
            else:
                choices.append(_message_choice(choice))

    if not choices:
        content = data.get("content") or ""
        message = ChatCompletionMessage(role="assistant", content=content)
        if is_stream:
            choices.append(
                ChatCompletionChoice(
                    index=0,
                    message=message,
                    delta=ChatCompletionDelta(content=content),
                    finish_reason=None,
                )
            )
        else:
            choices.append(
                ChatCompletionChoice(index=0, message=message, finish_reason="stop")
            )

    usage = _usage_fields(data)

    return ChatCompletion(
        id=data.get("id") or f"chatcmpl-{_now_ms()}",
        object="chat.completion.chunk" if is_stream else "chat.completion",
        created=data.get("created") or int(time.time()),
        model=data.get("model") or "unknown",
        choices=choices,
        usage=ChatCompletionUsage(**usage) if usage is not None else None,
    )


def normalize_completion(data: Any, is_stream: bool = False) -> Completion:
    """
    Build a text ``Completion`` from a decoded JSON payload.

    Same envelope rules as ``normalize_chat_completion``; choices carry
    ``text`` instead of messages.
    """
    if not isinstance(data, dict):
        raise GravixLayerError("Invalid response data")

    choices: List[CompletionChoice] = []
    raw_choices = data.get("choices")
    if isinstance(raw_choices, list):
        for choice in raw_choices:
            if not isinstance(choice, dict):
                continue
            text = ""
            if is_stream:
                delta = choice.get("delta")
                if isinstance(delta, dict):
                    text = delta.get("content") or delta.get("text") or ""
                elif choice.get("text") is not None:
                    text = choice["text"]
            else:
                text = choice.get("text") or ""

            choices.append(
                CompletionChoice(
                    text=text,
                    index=choice.get("index") or 0,
                    logprobs=choice.get("logprobs") or None,
                    finish_reason=choice.get("finish_reason") or None,
                )
            )

    if not choices:
        choices.append(
            CompletionChoice(
                text=data.get("text") or data.get("content") or "",
                index=0,
                finish_reason=None if is_stream else "stop",
            )
        )

    usage = _usage_fields(data)

    return Completion(
        id=data.get("id") or f"cmpl-{_now_ms()}",
        object="text_completion.chunk" if is_stream else "text_completion",
        created=data.get("created") or int(time.time()),
        model=data.get("model") or "unknown",
        choices=choices,
        usage=CompletionUsage(**usage) if usage is not None else None,
    )
