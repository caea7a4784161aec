"""Tests for the extension-based I/O registry and the JSON readers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from personid.io import get_extension, read_documents, register_reader, write_result
from personid.io.readers.json_reader import parse_record
from personid.preprocess.evidence import EvidenceDocument
from personid.utils.errors import MalformedDocumentError, UnsupportedFormatError


def test_unknown_extension_raises(tmp_path: Path) -> None:
    path = tmp_path / "file.unknown"
    with pytest.raises(UnsupportedFormatError):
        read_documents(path)
    with pytest.raises(UnsupportedFormatError):
        write_result(path, {})


def test_jsonl_reader(tmp_path: Path) -> None:
    path = tmp_path / "DOCS.JSONL"
    lines = [
        json.dumps({"raw_text": "Jane Doe", "source_url": "https://janedoe.dev"}),
        "",
        json.dumps({"text": "John", "url": "https://example.com", "handle_hint": "@john"}),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    docs = read_documents(path)
    assert docs == [
        EvidenceDocument(0, "https://janedoe.dev", "Jane Doe"),
        EvidenceDocument(1, "https://example.com", "John", handle_hint="@john"),
    ]


def test_json_reader_list_and_object(tmp_path: Path) -> None:
    records = [{"index": 0, "raw_text": "a", "source_url": ""}]
    listed = tmp_path / "list.json"
    listed.write_text(json.dumps(records), encoding="utf-8")
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"documents": records}), encoding="utf-8")
    assert read_documents(listed) == read_documents(wrapped) == [EvidenceDocument(0, "", "a")]


def test_malformed_json_line(tmp_path: Path) -> None:
    path = tmp_path / "bad.jsonl"
    path.write_text('{"raw_text": "ok"}\n{not json}\n', encoding="utf-8")
    with pytest.raises(MalformedDocumentError, match="line 2"):
        read_documents(path)


def test_json_without_documents(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"items": []}', encoding="utf-8")
    with pytest.raises(MalformedDocumentError):
        read_documents(path)


@pytest.mark.parametrize(
    "record",
    [
        "just text",
        {"index": "3", "raw_text": "a"},
        {"index": True, "raw_text": "a"},
        {"raw_text": 5},
        {"raw_text": "a", "platform_hint": 1},
    ],
)
def test_malformed_records(record: object) -> None:
    with pytest.raises(MalformedDocumentError, match="record 0"):
        parse_record(record, 0)


def test_null_text_is_empty() -> None:
    assert parse_record({"raw_text": None}, 2) == EvidenceDocument(2, "", "")


def test_writer_creates_parents(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "out.json"
    write_result(path, {"name": "Zoë"})
    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert json.loads(text) == {"name": "Zoë"}


def test_custom_reader_registration(tmp_path: Path) -> None:
    def read_lines(path: Path) -> list[EvidenceDocument]:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        return [EvidenceDocument(i, "", line) for i, line in enumerate(lines)]

    register_reader(".Lines", read_lines)
    path = tmp_path / "docs.lines"
    path.write_text("one\ntwo\n", encoding="utf-8")
    assert [d.raw_text for d in read_documents(path)] == ["one", "two"]
    assert get_extension(path) == ".lines"
    assert get_extension(tmp_path / "noext") == ""
