"""
Legacy text completions (``POST completions``).
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

from .._normalize import normalize_completion
from .._utils import _drop_none
from ..models.completions import Completion
from ..streaming import AsyncStream, Stream, aiter_stream, iter_stream

if TYPE_CHECKING:
    from .._base import _BaseClient

Prompt = Union[str, List[str]]


def _stream_chunk(frame: dict) -> Completion:
    return normalize_completion(frame, is_stream=True)


class Completions:
    def __init__(self, client: "_BaseClient"):
        self._client = client

    @staticmethod
    def _body(
        model: str, prompt: Prompt, stream: bool, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        body = _drop_none(params)
        body["model"] = model
        body["prompt"] = prompt
        body["stream"] = stream
        return body

    def create(
        self,
        model: str,
        prompt: Prompt,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        n: Optional[int] = None,
        logprobs: Optional[int] = None,
        echo: Optional[bool] = None,
        stop: Optional[Union[str, List[str]]] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        best_of: Optional[int] = None,
        logit_bias: Optional[Dict[str, float]] = None,
        user: Optional[str] = None,
    ) -> Completion:
        """
        Create a text completion for ``prompt``.
        """
        body = self._body(
            model,
            prompt,
            False,
            {
                "max_tokens": max_tokens,
                "temperature": temperature,
                "top_p": top_p,
                "n": n,
                "logprobs": logprobs,
                "echo": echo,
                "stop": stop,
                "presence_penalty": presence_penalty,
                "frequency_penalty": frequency_penalty,
                "best_of": best_of,
                "logit_bias": logit_bias,
                "user": user,
            },
        )
        response = self._client._request("POST", "completions", body=body)
        return normalize_completion(response.json())

    async def create_async(
        self,
        model: str,
        prompt: Prompt,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        n: Optional[int] = None,
        logprobs: Optional[int] = None,
        echo: Optional[bool] = None,
        stop: Optional[Union[str, List[str]]] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        best_of: Optional[int] = None,
        logit_bias: Optional[Dict[str, float]] = None,
        user: Optional[str] = None,
    ) -> Completion:
        """
        Create a text completion asynchronously.
        """
        body = self._body(
            model,
            prompt,
            False,
            {
                "max_tokens": max_tokens,
                "temperature": temperature,
                "top_p": top_p,
                "n": n,
                "logprobs": logprobs,
                "echo": echo,
                "stop": stop,
                "presence_penalty": presence_penalty,
                "frequency_penalty": frequency_penalty,
                "best_of": best_of,
                "logit_bias": logit_bias,
                "user": user,
            },
        )
        response = await self._client._arequest("POST", "completions", body=body)
        return normalize_completion(response.json())

    def create_stream(
        self,
        model: str,
        prompt: Prompt,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        user: Optional[str] = None,
    ) -> Stream[Completion]:
        """
        Stream a text completion. The request is sent before this returns.
        """
        body = self._body(
            model,
            prompt,
            True,
            {
                "max_tokens": max_tokens,
                "temperature": temperature,
                "top_p": top_p,
                "stop": stop,
                "presence_penalty": presence_penalty,
                "frequency_penalty": frequency_penalty,
                "user": user,
            },
        )
        response = self._client._request("POST", "completions", body=body, stream=True)
        return iter_stream(
            response.iter_bytes(), _stream_chunk, on_close=response.close
        )

    async def create_stream_async(
        self,
        model: str,
        prompt: Prompt,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        user: Optional[str] = None,
    ) -> AsyncStream[Completion]:
        body = self._body(
            model,
            prompt,
            True,
            {
                "max_tokens": max_tokens,
                "temperature": temperature,
                "top_p": top_p,
                "stop": stop,
                "presence_penalty": presence_penalty,
                "frequency_penalty": frequency_penalty,
                "user": user,
            },
        )
        response = await self._client._arequest(
            "POST", "completions", body=body, stream=True
        )
        return aiter_stream(
            response.aiter_bytes(), _stream_chunk, on_close=response.aclose
        )
