"""
Server-Sent-Events decoding and encoding.

The decoder accepts an async iterable of byte chunks with arbitrary boundaries
(a line, a field name or even a multi-byte UTF-8 character may be split across
reads) and yields one EventSourceMessage per properly terminated record.
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, List, Optional, Union

from ..core.run import AbortSignal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventSourceMessage:
    """One decoded SSE record."""
    data: str
    event: Optional[str] = None
    id: Optional[str] = None
    retry: Optional[int] = None


class EventSourceParser:
    """
    Incremental SSE parser.

    Feed decoded text with `feed()` and call `finish()` at end of stream.
    Records that are not terminated by a blank line are discarded.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._started = False
        self._reset_record()

    def _reset_record(self) -> None:
        self._data_lines: List[str] = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None
        self._retry: Optional[int] = None

    def feed_bytes(self, chunk: bytes) -> List[EventSourceMessage]:
        return self.feed(self._decoder.decode(chunk))

    def feed(self, text: str) -> List[EventSourceMessage]:
        """Consume text and return the records completed by it."""
        if not self._started and text:
            self._started = True
            if text.startswith("\ufeff"):
                text = text[1:]

        self._buffer += text
        messages: List[EventSourceMessage] = []

        while True:
            cr = self._buffer.find("\r")
            lf = self._buffer.find("\n")
            if cr == -1 and lf == -1:
                break

            if cr != -1 and (lf == -1 or cr < lf):
                # a trailing CR may be the first half of a CRLF split across reads
                if cr + 1 == len(self._buffer):
                    break
                skip = 2 if self._buffer[cr + 1] == "\n" else 1
                end = cr
            else:
                skip = 1
                end = lf

            line = self._buffer[:end]
            self._buffer = self._buffer[end + skip:]
            message = self._process_line(line)
            if message is not None:
                messages.append(message)

        return messages

    def finish(self) -> List[EventSourceMessage]:
        """Flush at end of stream. Unterminated records are dropped."""
        messages = self.feed(self._decoder.decode(b"", final=True))
        if self._buffer.endswith("\r"):
            message = self._process_line(self._buffer[:-1])
            if message is not None:
                messages.append(message)
        if self._buffer or self._data_lines:
            logger.debug("Discarding unterminated event-source record at end of stream")
        self._buffer = ""
        self._reset_record()
        return messages

    def _process_line(self, line: str) -> Optional[EventSourceMessage]:
        if line == "":
            return self._dispatch()

        if line.startswith(":"):
            return None

        if ":" in line:
            field, value = line.split(":", 1)
            if value.startswith(" "):
                value = value[1:]
        else:
            field, value = line, ""

        if field == "data":
            self._data_lines.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self._id = value
        elif field == "retry":
            if value.isascii() and value.isdigit():
                self._retry = int(value)
            else:
                logger.debug(f"Ignoring invalid retry field: {value!r}")

        return None

    def _dispatch(self) -> Optional[EventSourceMessage]:
        if not self._data_lines:
            self._reset_record()
            return None

        message = EventSourceMessage(
            data="\n".join(self._data_lines),
            event=self._event or None,
            id=self._id,
            retry=self._retry,
        )
        self._reset_record()
        return message


async def parse_event_source_stream(
    stream: AsyncIterable[Union[bytes, str]],
    abort_signal: Optional[AbortSignal] = None,
) -> AsyncIterator[EventSourceMessage]:
    """
    Decode an SSE byte stream into messages.

    Args:
        stream: Async iterable of byte (or text) chunks
        abort_signal: Stops decoding once aborted

    Yields:
        EventSourceMessage for every terminated record
    """
    parser = EventSourceParser()

    async for chunk in stream:
        if abort_signal is not None and abort_signal.aborted:
            return
        if isinstance(chunk, str):
            messages = parser.feed(chunk)
        else:
            messages = parser.feed_bytes(chunk)
        for message in messages:
            yield message

    for message in parser.finish():
        yield message


def format_event_source_message(
    data: str,
    event: Optional[str] = None,
    id: Optional[str] = None,
    retry: Optional[int] = None,
) -> bytes:
    """Encode one SSE record (terminated by a blank line)."""
    lines = []
    if event is not None:
        lines.append(f"event: {event}")
    if id is not None:
        lines.append(f"id: {id}")
    if retry is not None:
        lines.append(f"retry: {retry}")
    for data_line in data.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        lines.append(f"data: {data_line}")
    return ("\n".join(lines) + "\n\n").encode("utf-8")
