from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from personid.cli import app


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: Any) -> None:
    monkeypatch.delenv("PERSONID_CONFIG", raising=False)


def _docs(tmp_path: Path) -> Path:
    in_path = tmp_path / "in.jsonl"
    in_path.write_text(json.dumps({"raw_text": "hello"}) + "\n", encoding="utf-8")
    return in_path


def test_missing_file(tmp_path: Path) -> None:
    out_path = tmp_path / "out.json"
    missing = tmp_path / "missing.jsonl"
    runner = CliRunner()
    result = runner.invoke(app, ["run", "--in", str(missing), "--out", str(out_path)])
    assert result.exit_code == 3
    assert str(missing) in result.stderr


def test_unsupported_extension(tmp_path: Path) -> None:
    in_path = tmp_path / "foo.bin"
    in_path.write_text("data", encoding="utf-8")
    out_path = tmp_path / "out.json"
    runner = CliRunner()
    result = runner.invoke(app, ["run", "--in", str(in_path), "--out", str(out_path)])
    assert result.exit_code == 3


def test_unsupported_output_extension(tmp_path: Path) -> None:
    out_path = tmp_path / "out.txt"
    runner = CliRunner()
    result = runner.invoke(app, ["run", "--in", str(_docs(tmp_path)), "--out", str(out_path)])
    assert result.exit_code == 3
    assert not out_path.exists()


def test_malformed_documents(tmp_path: Path) -> None:
    in_path = tmp_path / "in.jsonl"
    in_path.write_text("{broken\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app, ["run", "--in", str(in_path), "--out", str(tmp_path / "out.json")]
    )
    assert result.exit_code == 3
    assert "line 1" in result.stderr


def test_bad_config(tmp_path: Path) -> None:
    bad_cfg = tmp_path / "bad.yml"
    bad_cfg.write_text("unknown: true\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "run",
            "--in",
            str(_docs(tmp_path)),
            "--out",
            str(tmp_path / "out.json"),
            "--config",
            str(bad_cfg),
        ],
    )
    assert result.exit_code == 4


def test_bad_override(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "run",
            "--in",
            str(_docs(tmp_path)),
            "--out",
            str(tmp_path / "out.json"),
            "--metric",
            "manhattan",
        ],
    )
    assert result.exit_code == 4


def test_invalid_document_index(tmp_path: Path) -> None:
    in_path = tmp_path / "in.jsonl"
    in_path.write_text(json.dumps({"index": 7, "raw_text": "hello"}) + "\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app, ["run", "--in", str(in_path), "--out", str(tmp_path / "out.json")]
    )
    assert result.exit_code == 5
    assert "index 7" in result.stderr
