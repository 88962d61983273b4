"""
Bulk line protocol parser.

A bulk body is newline-delimited JSON, two lines per action: the action line
names the verb and its metadata, the next line carries the document. Delete
actions have no document line.

    { "index": {"_index": "logs", "_id": "1"} }
    { "message": "hello" }
    { "delete": {"_index": "logs", "_id": "2"} }

Only the action line is decoded. Documents are handed on as raw bytes.
"""

from __future__ import annotations

import gzip
import io
import json
import logging
import zlib
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from mockes.exceptions import MalformedActionError, UpstreamDecodeError

logger = logging.getLogger(__name__)

VERBS = ("index", "create", "update", "delete")
VERBS_WITHOUT_DOCUMENT = frozenset({"delete"})


@dataclass(frozen=True)
class Action:
    """
    One parsed bulk action.

    Attributes:
        verb: index, create, update or delete.
        metadata: Action metadata as sent (``_index``, ``_id``, ...).
        document: Raw document line, None for delete or a truncated stream.
        line: 1-based line number of the action line.
    """

    verb: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    document: Optional[bytes] = None
    line: int = 0

    @property
    def index(self) -> Optional[str]:
        value = self.metadata.get("_index")
        return value if isinstance(value, str) else None

    @property
    def doc_id(self) -> Optional[str]:
        value = self.metadata.get("_id")
        return value if isinstance(value, str) else None


def is_gzip(content_encoding: Optional[str]) -> bool:
    return content_encoding is not None and content_encoding.strip().lower() == "gzip"


def decode_body(body: bytes, content_encoding: Optional[str] = None) -> bytes:
    """
    Return the decompressed body.

    Used where the whole text is needed at once (verbose logging).

    Raises:
        UpstreamDecodeError: If a gzip body cannot be decompressed.
    """
    if not is_gzip(content_encoding):
        return body
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as e:
        raise UpstreamDecodeError(
            f"cannot read gzipped request body: {e}", encoding=content_encoding
        ) from e


def parse_action_line(raw: bytes, line: int) -> Action:
    """
    Decode an action line into an Action without its document.

    Raises:
        MalformedActionError: If the line is not a JSON object with exactly
            one key naming a known verb.
    """
    try:
        record = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedActionError(f"cannot decode action: {e}", line=line) from e
    if not isinstance(record, dict):
        raise MalformedActionError(
            f"action must be a JSON object, got {type(record).__name__}", line=line
        )
    if len(record) != 1:
        raise MalformedActionError(
            f"number of keys off: {len(record)} should be 1", line=line
        )
    verb, metadata = next(iter(record.items()))
    if verb not in VERBS:
        raise MalformedActionError(f"unknown action verb {verb!r}", line=line)
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedActionError(
            f"metadata for {verb!r} must be a JSON object", line=line
        )
    return Action(verb=verb, metadata=metadata, line=line)


class BulkStream:
    """
    Iterates the actions of one bulk body.

    Use as a context manager so the decompressor is closed on every path,
    including an early exit on a malformed line:

        with BulkStream(body, "gzip") as stream:
            for action in stream:
                ...

    ``consumed`` holds the raw lines read so far, in order.
    """

    def __init__(self, body: bytes, content_encoding: Optional[str] = None) -> None:
        self._encoding = content_encoding
        self._raw: BinaryIO = io.BytesIO(body)
        self._reader: BinaryIO = self._raw
        if is_gzip(content_encoding):
            self._reader = gzip.GzipFile(fileobj=self._raw, mode="rb")
        self.consumed: List[bytes] = []
        self._line_no = 0

    def __enter__(self) -> "BulkStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._reader is not self._raw:
            self._reader.close()
        self._raw.close()

    def _next_line(self) -> Optional[bytes]:
        try:
            raw = self._reader.readline()
        except (OSError, EOFError, zlib.error) as e:
            raise UpstreamDecodeError(
                f"cannot read gzipped request body: {e}", encoding=self._encoding
            ) from e
        if not raw:
            return None
        self._line_no += 1
        line = raw.rstrip(b"\r\n")
        return line

    def _next_document(self) -> Optional[bytes]:
        """Next non-blank line; blank lines between an action and its document are skipped."""
        while True:
            raw = self._next_line()
            if raw is None or raw.strip():
                return raw
            self.consumed.append(raw)

    def __iter__(self) -> Iterator[Action]:
        while True:
            raw = self._next_line()
            if raw is None:
                return
            if not raw.strip():
                self.consumed.append(raw)
                continue

            try:
                action = parse_action_line(raw, self._line_no)
            except MalformedActionError as e:
                logger.warning("error parsing bulk body: %s", e.message)
                raise
            self.consumed.append(raw)

            document = None
            if action.verb not in VERBS_WITHOUT_DOCUMENT:
                document = self._next_document()
                if document is not None:
                    self.consumed.append(document)
            if document is not None:
                action = Action(
                    verb=action.verb,
                    metadata=action.metadata,
                    document=document,
                    line=action.line,
                )
            yield action

    @property
    def consumed_text(self) -> str:
        return "\n".join(line.decode("utf-8", errors="replace") for line in self.consumed)


def iter_actions(body: bytes, content_encoding: Optional[str] = None) -> Iterator[Action]:
    """Yield the actions of a bulk body in input order."""
    with BulkStream(body, content_encoding) as stream:
        yield from stream
