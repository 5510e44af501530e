"""
Chat completions (``POST chat/completions``).
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Union,
)

from .._normalize import normalize_chat_completion
from .._utils import _drop_none
from ..models.chat import ChatCompletion, ChatCompletionMessage, ToolCall
from ..streaming import AsyncStream, Stream, aiter_stream, iter_stream

if TYPE_CHECKING:
    from .._base import _BaseClient

Message = Union[ChatCompletionMessage, Dict[str, Any]]


def _serialize_tool_call(call: Any) -> Dict[str, Any]:
    if isinstance(call, ToolCall):
        call = call.model_dump()
    function = call.get("function") or {}
    return {
        "id": call.get("id"),
        "type": call.get("type"),
        "function": {
            "name": function.get("name"),
            "arguments": function.get("arguments"),
        },
    }


def _serialize_message(message: Message) -> Dict[str, Any]:
    if isinstance(message, ChatCompletionMessage):
        message = message.model_dump()
    if not isinstance(message, dict):
        return message

    out = {"role": message.get("role"), "content": message.get("content")}
    if message.get("name"):
        out["name"] = message["name"]
    if message.get("tool_call_id"):
        out["tool_call_id"] = message["tool_call_id"]
    if message.get("tool_calls"):
        out["tool_calls"] = [_serialize_tool_call(c) for c in message["tool_calls"]]
    return out


def _stream_chunk(frame: dict) -> ChatCompletion:
    return normalize_chat_completion(frame, is_stream=True)


class ChatCompletions:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    def _body(
        self,
        model: str,
        messages: List[Message],
        stream: bool,
        temperature: Optional[float],
        max_tokens: Optional[int],
        top_p: Optional[float],
        frequency_penalty: Optional[float],
        presence_penalty: Optional[float],
        stop: Optional[Union[str, List[str]]],
        tools: Optional[List[Dict[str, Any]]],
        tool_choice: Optional[Union[str, Dict[str, Any]]],
        extra: Dict[str, Any],
    ) -> Dict[str, Any]:
        body = _drop_none(
            {
                **extra,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "top_p": top_p,
                "frequency_penalty": frequency_penalty,
                "presence_penalty": presence_penalty,
                "stop": stop,
                "tools": tools,
                "tool_choice": tool_choice,
            }
        )
        body["model"] = model
        body["messages"] = [_serialize_message(m) for m in messages]
        body["stream"] = stream
        return body

    def create(
        self,
        model: str,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        presence_penalty: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> ChatCompletion:
        """
        Create a chat completion.

        Args:
            model: Model identifier.
            messages: Conversation so far, as dicts or ``ChatCompletionMessage``.
            kwargs: Additional request fields, sent as-is when not None.
        """
        body = self._body(
            model, messages, False, temperature, max_tokens, top_p,
            frequency_penalty, presence_penalty, stop, tools, tool_choice, kwargs,
        )
        response = self._client._request("POST", "chat/completions", body=body)
        return normalize_chat_completion(response.json())

    async def create_async(
        self,
        model: str,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        presence_penalty: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> ChatCompletion:
        """
        Create a chat completion asynchronously.
        """
        body = self._body(
            model, messages, False, temperature, max_tokens, top_p,
            frequency_penalty, presence_penalty, stop, tools, tool_choice, kwargs,
        )
        response = await self._client._arequest("POST", "chat/completions", body=body)
        return normalize_chat_completion(response.json())

    def create_stream(
        self,
        model: str,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        presence_penalty: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> Stream[ChatCompletion]:
        """
        Stream a chat completion.

        The request is sent (and retried) before this method returns; the
        returned iterator yields one ``ChatCompletion`` chunk per frame and
        closes the response when exhausted or abandoned.
        """
        body = self._body(
            model, messages, True, temperature, max_tokens, top_p,
            frequency_penalty, presence_penalty, stop, tools, tool_choice, kwargs,
        )
        response = self._client._request(
            "POST", "chat/completions", body=body, stream=True
        )
        return iter_stream(
            response.iter_bytes(), _stream_chunk, on_close=response.close
        )

    async def create_stream_async(
        self,
        model: str,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        presence_penalty: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        **kwargs: Any,
    ) -> AsyncStream[ChatCompletion]:
        """
        Asynchronous counterpart of ``create_stream``.
        """
        body = self._body(
            model, messages, True, temperature, max_tokens, top_p,
            frequency_penalty, presence_penalty, stop, tools, tool_choice, kwargs,
        )
        response = await self._client._arequest(
            "POST", "chat/completions", body=body, stream=True
        )
        return aiter_stream(
            response.aiter_bytes(), _stream_chunk, on_close=response.aclose
        )


class ChatResource:
    def __init__(self, client: "_BaseClient"):
        self.completions = ChatCompletions(client)
