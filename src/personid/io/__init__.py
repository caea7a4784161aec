"""Extension based registry for document and result files.

``.jsonl`` and ``.json`` readers and a ``.json`` writer are registered by
default.  The registry dispatches based on the file extension only.

``UnsupportedFormatError`` is raised when attempting to read or write a file
whose extension has no registered handler.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

from ..preprocess.evidence import EvidenceDocument
from ..utils.errors import UnsupportedFormatError
from .readers.json_reader import read_json, read_jsonl
from .writers.json_writer import write_json

ReaderFunc = Callable[..., list[EvidenceDocument]]
WriterFunc = Callable[..., None]

_READERS: dict[str, ReaderFunc] = {}
_WRITERS: dict[str, WriterFunc] = {}


def register_reader(ext: str, func: ReaderFunc) -> None:
    """Register a reader for files ending with ``ext``.

    Parameters
    ----------
    ext:
        File extension including the dot (e.g. ``".jsonl"``).  Matching is
        case-insensitive.
    func:
        Callable that reads a file and returns evidence documents.
    """

    _READERS[ext.lower()] = func


def register_writer(ext: str, func: WriterFunc) -> None:
    """Register a writer for files ending with ``ext``."""

    _WRITERS[ext.lower()] = func


def get_extension(path: str | os.PathLike[str]) -> str:
    """Return the lower-cased file extension of ``path`` (including the dot)."""

    suffix = Path(path).suffix
    return suffix.lower() if suffix else ""


def read_documents(path: str | os.PathLike[str], **kwargs: Any) -> list[EvidenceDocument]:
    """Read evidence documents from ``path`` using the registered reader.

    Raises
    ------
    UnsupportedFormatError
        If no reader is registered for the file extension.
    """

    ext = get_extension(path)
    reader = _READERS.get(ext)
    if reader is None:
        raise UnsupportedFormatError(f"Unsupported file extension: '{ext}'") from None
    return reader(path, **kwargs)


def write_result(path: str | os.PathLike[str], payload: Any, **kwargs: Any) -> None:
    """Write ``payload`` to ``path`` using the registered writer.

    Raises
    ------
    UnsupportedFormatError
        If no writer is registered for the file extension.
    """

    ext = get_extension(path)
    writer = _WRITERS.get(ext)
    if writer is None:
        raise UnsupportedFormatError(f"Unsupported file extension: '{ext}'") from None
    writer(path, payload, **kwargs)


register_reader(".jsonl", read_jsonl)
register_reader(".json", read_json)
register_writer(".json", write_json)

__all__ = [
    "ReaderFunc",
    "WriterFunc",
    "register_reader",
    "register_writer",
    "get_extension",
    "read_documents",
    "write_result",
    "write_json",
]
