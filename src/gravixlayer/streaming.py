"""
Incremental decoding of newline-delimited ``data: <json>`` response streams.
"""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Generic,
    Iterator,
    List,
    Optional,
    TypeVar,
)

from .exceptions import GravixLayerError, GravixLayerStreamingError

T = TypeVar("T")

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

# Chunk size used when pulling from file-like sources.
READ_SIZE = 64 * 1024


def _frame_payload(line: str) -> Optional[str]:
    line = line.strip()
    if line.startswith(DATA_PREFIX):
        line = line[len(DATA_PREFIX) :]
    if not line or line == DONE_SENTINEL:
        return None
    return line


class StreamDecoder:
    """
    Reassembles complete lines from arbitrarily split byte chunks.

    Multi-byte UTF-8 characters split across chunks are decoded correctly.
    The unterminated tail is kept until the next ``feed``; a trailing frame
    without a newline is never emitted.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def buffer(self) -> str:
        return self._buffer

    def feed(self, data: bytes) -> List[dict]:
        """
        Consume one chunk and return the JSON objects of all lines it completes.

        Empty lines, the ``[DONE]`` sentinel and malformed JSON are skipped.
        """
        self._buffer += self._decoder.decode(data)
        *lines, self._buffer = self._buffer.split("\n")

        frames = []
        for line in lines:
            payload = _frame_payload(line)
            if payload is None:
                continue
            try:
                frame = json.loads(payload)
            except ValueError:
                continue
            if isinstance(frame, dict):
                frames.append(frame)
        return frames


class SourceKind(str, Enum):
    """How bytes are obtained from a response body."""

    # Iterable that yields byte chunks.
    PUSH = "push"
    # Object with a ``read(size)`` method returning ``b""`` at the end.
    PULL = "pull"


def _detect_kind(body: Any, iter_attr: str) -> SourceKind:
    if body is None:
        raise GravixLayerError("No response body for streaming")
    if hasattr(body, iter_attr):
        return SourceKind.PUSH
    if callable(getattr(body, "read", None)):
        return SourceKind.PULL
    raise GravixLayerError("Streaming not supported with this transport")


@dataclass(frozen=True)
class ByteSource:
    """
    A synchronous body whose delivery mechanism is resolved once.
    """

    kind: SourceKind
    body: Any

    @classmethod
    def detect(cls, body: Any) -> "ByteSource":
        if isinstance(body, (bytes, bytearray)):
            body = [bytes(body)]
        return cls(kind=_detect_kind(body, "__iter__"), body=body)

    def chunks(self) -> Iterator[bytes]:
        if self.kind == SourceKind.PUSH:
            yield from self.body
            return

        try:
            while True:
                chunk = self.body.read(READ_SIZE)
                if not chunk:
                    return
                yield chunk
        finally:
            close = getattr(self.body, "close", None)
            if callable(close):
                close()


@dataclass(frozen=True)
class AsyncByteSource:
    """
    An asynchronous body whose delivery mechanism is resolved once.
    """

    kind: SourceKind
    body: Any

    @classmethod
    def detect(cls, body: Any) -> "AsyncByteSource":
        return cls(kind=_detect_kind(body, "__aiter__"), body=body)

    async def chunks(self) -> AsyncIterator[bytes]:
        if self.kind == SourceKind.PUSH:
            async for chunk in self.body:
                yield chunk
            return

        try:
            while True:
                chunk = await self.body.read(READ_SIZE)
                if not chunk:
                    return
                yield chunk
        finally:
            close = getattr(self.body, "close", None)
            if callable(close):
                result = close()
                if hasattr(result, "__await__"):
                    await result


def _read_chunks(source: ByteSource) -> Iterator[bytes]:
    chunks = source.chunks()
    while True:
        try:
            chunk = next(chunks)
        except StopIteration:
            return
        except Exception as e:
            raise GravixLayerStreamingError(str(e)) from e
        yield chunk


async def _aread_chunks(source: AsyncByteSource) -> AsyncIterator[bytes]:
    chunks = source.chunks()
    while True:
        try:
            chunk = await chunks.__anext__()
        except StopAsyncIteration:
            return
        except Exception as e:
            raise GravixLayerStreamingError(str(e)) from e
        yield chunk


def _has_choices(item: Any) -> bool:
    return bool(getattr(item, "choices", None))


def _close(on_close: Optional[Callable[[], None]]) -> None:
    if on_close is not None:
        on_close()


async def _aclose(on_close: Optional[Callable[[], Any]]) -> None:
    if on_close is not None:
        result = on_close()
        if hasattr(result, "__await__"):
            await result


class Stream(Generic[T]):
    """
    Iterator over decoded stream chunks.

    Owns the underlying response: ``on_close`` runs exactly once, when the
    chunks are exhausted, when reading fails, or when ``close()`` is called,
    even if iteration never started.
    """

    def __init__(
        self,
        source: ByteSource,
        parse: Callable[[dict], T],
        on_close: Optional[Callable[[], None]] = None,
    ):
        self._on_close = on_close
        self._closed = False
        self._iterator = self._decode(source, parse)

    def __iter__(self) -> "Stream[T]":
        return self

    def __next__(self) -> T:
        return next(self._iterator)

    def __enter__(self) -> "Stream[T]":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self):
        if not getattr(self, "_closed", True):
            self.close()

    def close(self) -> None:
        self._iterator.close()
        self._release()

    def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        _close(self._on_close)

    def _decode(self, source: ByteSource, parse: Callable[[dict], T]) -> Iterator[T]:
        decoder = StreamDecoder()
        try:
            for data in _read_chunks(source):
                for frame in decoder.feed(data):
                    chunk = parse(frame)
                    if _has_choices(chunk):
                        yield chunk
        finally:
            self._release()


class AsyncStream(Generic[T]):
    """
    Asynchronous counterpart of ``Stream``. ``on_close`` may be a coroutine
    function.
    """

    def __init__(
        self,
        source: AsyncByteSource,
        parse: Callable[[dict], T],
        on_close: Optional[Callable[[], Any]] = None,
    ):
        self._on_close = on_close
        self._closed = False
        self._iterator = self._decode(source, parse)

    def __aiter__(self) -> "AsyncStream[T]":
        return self

    async def __anext__(self) -> T:
        return await self._iterator.__anext__()

    async def __aenter__(self) -> "AsyncStream[T]":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._iterator.aclose()
        await self._release()

    async def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        await _aclose(self._on_close)

    async def _decode(
        self, source: AsyncByteSource, parse: Callable[[dict], T]
    ) -> AsyncIterator[T]:
        decoder = StreamDecoder()
        try:
            async for data in _aread_chunks(source):
                for frame in decoder.feed(data):
                    chunk = parse(frame)
                    if _has_choices(chunk):
                        yield chunk
        finally:
            await self._release()


def iter_stream(
    body: Any,
    parse: Callable[[dict], T],
    on_close: Optional[Callable[[], None]] = None,
) -> Stream[T]:
    """
    Lazily decode a byte stream into parsed chunks.

    Args:
        body: Iterable of byte chunks, or an object with ``read(size)``.
        parse: Maps one decoded JSON frame to a chunk, typically a
            normalizer in streaming mode. Chunks without choices are dropped.
        on_close: Called once when the sequence ends or is closed.

    Raises:
        GravixLayerError: Immediately, if ``body`` is missing or cannot be
            read incrementally.
        GravixLayerStreamingError: While iterating, if reading from ``body``
            fails.
    """
    try:
        source = ByteSource.detect(body)
    except GravixLayerError:
        _close(on_close)
        raise
    return Stream(source, parse, on_close)


def aiter_stream(
    body: Any,
    parse: Callable[[dict], T],
    on_close: Optional[Callable[[], Any]] = None,
) -> AsyncStream[T]:
    """
    Asynchronous counterpart of ``iter_stream``.

    ``on_close`` may be a coroutine function. The caller keeps ownership of
    ``body`` if it is rejected up front.
    """
    source = AsyncByteSource.detect(body)
    return AsyncStream(source, parse, on_close)
