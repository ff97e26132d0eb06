"""Incremental newline-delimited JSON decoding."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class NDJSONDecoder:
    """Turn arbitrary byte chunks into parsed JSON records.

    A record may be split across chunks; the trailing partial line is held
    until its newline arrives or finish() is called.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._buffer = b""
        self.skipped = 0  # Lines that were not valid JSON

    def feed(self, chunk: bytes | str) -> list[Any]:
        if isinstance(chunk, str):
            chunk = chunk.encode(self._encoding)
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split(b"\n")
        return self._parse_lines(lines)

    def finish(self) -> list[Any]:
        """Flush a final line that arrived without a trailing newline."""
        rest, self._buffer = self._buffer, b""
        return self._parse_lines([rest])

    def _parse_lines(self, lines: list[bytes]) -> list[Any]:
        records = []
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line.decode(self._encoding)))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                self.skipped += 1
                logger.warning(f"Skipping undecodable NDJSON line: {e}")
        return records
