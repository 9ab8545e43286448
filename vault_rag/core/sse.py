"""
Server-Sent Events framing.

SSEParser is an incremental state machine: bytes arrive in arbitrary
slices, a carry-over buffer holds the unterminated tail, and complete
frames are split on the blank-line delimiter. Multi-byte characters split
across reads are reassembled by an incremental UTF-8 decoder.

Dependencies: codecs, json (stdlib)
System role: Streaming wire protocol (provider input and caller output)
"""

import codecs
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"


def format_sse(payload: dict[str, Any]) -> str:
    """Render one payload as a data-only SSE frame."""
    return f"data: {json.dumps(payload, default=str)}{FRAME_DELIMITER}"


class SSEParser:
    """Incremental SSE frame parser with a carry-over buffer."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Unterminated text carried to the next read."""
        return self._buffer

    def feed(self, data: bytes | str) -> list[str]:
        """
        Consume one read and return the data payloads of completed frames.

        Args:
            data: Raw bytes (or already-decoded text) from one I/O read

        Returns:
            list[str]: Data field of every frame completed by this read
        """
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        buffered = self._buffer + text

        # A trailing CR may be the first half of a CRLF split across reads.
        held = ""
        if buffered.endswith("\r"):
            buffered, held = buffered[:-1], "\r"
        buffered = buffered.replace("\r\n", "\n").replace("\r", "\n")

        *frames, rest = buffered.split(FRAME_DELIMITER)
        self._buffer = rest + held
        return [payload for payload in map(self._frame_data, frames) if payload is not None]

    def close(self) -> list[str]:
        """Flush the decoder and treat any unterminated tail as a final frame."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        payload = self._frame_data(tail.replace("\r\n", "\n").replace("\r", "\n"))
        return [payload] if payload is not None else []

    @staticmethod
    def _frame_data(frame: str) -> str | None:
        data_lines = []
        for line in frame.split("\n"):
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if field == "data":
                data_lines.append(value[1:] if value.startswith(" ") else value)
        if not data_lines:
            return None
        return "\n".join(data_lines)


def parse_json_payloads(payloads: list[str]) -> list[dict[str, Any]]:
    """Decode JSON payloads, skipping malformed ones without failing the stream."""
    decoded = []
    for payload in payloads:
        try:
            value = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed SSE payload", extra={"payload_preview": payload[:80]})
            continue
        if isinstance(value, dict):
            decoded.append(value)
    return decoded
