# -*- coding: utf-8 -*-
"""Chat — incremental Server-Sent-Events decoding of completion deltas.

The relay forwards the provider's SSE stream untouched, so the client has to
reassemble ``data:`` lines from arbitrarily split byte chunks and pull
``choices[0].delta.content`` out of each JSON payload.

The decoder is a small explicit state machine:

* ``ACCUMULATING``: waiting for a newline in the text buffer;
* ``LINE_COMPLETE``: at least one full line is buffered and being drained;
* ``TERMINATED``: ``data: [DONE]`` was seen or the stream was closed.
  Terminal: later input is ignored.

It is transport independent; :func:`iter_content_deltas` and
:func:`aiter_content_deltas` drive it from any (async) byte iterator.
"""

from __future__ import annotations

import codecs
import json
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List, Optional

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamState(str, Enum):
    ACCUMULATING = "accumulating"
    LINE_COMPLETE = "line_complete"
    TERMINATED = "terminated"


def extract_delta(payload: object) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) and content else None


class SSEDeltaDecoder:
    def __init__(self) -> None:
        self.state = StreamState.ACCUMULATING
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def terminated(self) -> bool:
        return self.state is StreamState.TERMINATED

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one chunk and return the content deltas it completed."""
        if self.terminated:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def close(self) -> List[str]:
        """Flush the decoder and treat any unterminated tail as a last line."""
        if self.terminated:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer:
            self._buffer += "\n"
        deltas = self._drain()
        self.state = StreamState.TERMINATED
        self._buffer = ""
        return deltas

    def _drain(self) -> List[str]:
        deltas: List[str] = []
        while not self.terminated:
            newline = self._buffer.find("\n")
            if newline == -1:
                self.state = StreamState.ACCUMULATING
                break
            self.state = StreamState.LINE_COMPLETE
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1 :]
            delta = self._handle_line(line)
            if delta:
                deltas.append(delta)
        return deltas

    def _handle_line(self, line: str) -> Optional[str]:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip() or line.startswith(":"):
            return None
        if not line.startswith(DATA_PREFIX):
            return None
        data = line[len(DATA_PREFIX) :].strip()
        if data == DONE_SENTINEL:
            self.state = StreamState.TERMINATED
            self._buffer = ""
            return None
        try:
            payload = json.loads(data)
        except ValueError:
            # A partial or garbled event must not end the stream.
            return None
        return extract_delta(payload)


def iter_content_deltas(chunks: Iterable[bytes]) -> Iterator[str]:
    decoder = SSEDeltaDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
        if decoder.terminated:
            return
    yield from decoder.close()


async def aiter_content_deltas(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    decoder = SSEDeltaDecoder()
    async for chunk in chunks:
        for delta in decoder.feed(chunk):
            yield delta
        if decoder.terminated:
            return
    for delta in decoder.close():
        yield delta
