"""JSON and JSON Lines evidence document readers.

Each record is a mapping with the document text under ``raw_text`` (or
``text``) and its origin under ``source_url`` (or ``url``).  ``index``,
``platform_hint`` and ``handle_hint`` are optional; a missing index is
replaced by the record's position.  Records that are not mappings, or whose
fields have the wrong type, raise :class:`MalformedDocumentError` naming the
offending position.  ``FileNotFoundError`` and other I/O errors propagate to
the caller.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

from ...preprocess.evidence import EvidenceDocument
from ...utils.errors import MalformedDocumentError

PathLikeStr = os.PathLike[str]


def _optional_str(record: Mapping[str, Any], key: str, position: int) -> str | None:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedDocumentError(f"record {position}: '{key}' must be a string")
    return value


def parse_record(record: Any, position: int) -> EvidenceDocument:
    """Return the :class:`EvidenceDocument` described by ``record``."""

    if not isinstance(record, Mapping):
        raise MalformedDocumentError(f"record {position}: expected an object")
    index = record.get("index", position)
    if isinstance(index, bool) or not isinstance(index, int):
        raise MalformedDocumentError(f"record {position}: 'index' must be an integer")
    text = record.get("raw_text", record.get("text", ""))
    url = record.get("source_url", record.get("url", ""))
    if text is None:
        text = ""
    if not isinstance(text, str) or not isinstance(url, str):
        raise MalformedDocumentError(f"record {position}: text and url must be strings")
    return EvidenceDocument(
        index=index,
        source_url=url,
        raw_text=text,
        platform_hint=_optional_str(record, "platform_hint", position),
        handle_hint=_optional_str(record, "handle_hint", position),
    )


def read_jsonl(path: str | PathLikeStr, *, encoding: str = "utf-8-sig") -> list[EvidenceDocument]:
    """Read one document per non-blank line of ``path``."""

    documents: list[EvidenceDocument] = []
    with open(path, "r", encoding=encoding) as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise MalformedDocumentError(f"line {line_no}: {exc.msg}") from exc
            documents.append(parse_record(record, len(documents)))
    return documents


def read_json(path: str | PathLikeStr, *, encoding: str = "utf-8-sig") -> list[EvidenceDocument]:
    """Read a JSON list of documents, or an object with a ``documents`` list."""

    with open(path, "r", encoding=encoding) as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedDocumentError(f"{path}: {exc.msg}") from exc
    if isinstance(payload, Mapping):
        payload = payload.get("documents")
    if not isinstance(payload, list):
        raise MalformedDocumentError(f"{path}: expected a list of documents")
    return [parse_record(record, position) for position, record in enumerate(payload)]


__all__ = ["parse_record", "read_json", "read_jsonl"]
