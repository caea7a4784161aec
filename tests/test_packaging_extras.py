"""Tests for packaging metadata and optional dependencies."""

from __future__ import annotations

import importlib
import tomllib
from pathlib import Path
from typing import Any, cast


def _load_pyproject() -> dict[str, Any]:
    path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _extras(pyproject: dict[str, Any]) -> dict[str, list[str]]:
    return cast(dict[str, list[str]], pyproject.get("project", {}).get("optional-dependencies", {}))


def _flatten_mypy_overrides(pyproject: dict[str, Any]) -> set[str]:
    overrides = pyproject.get("tool", {}).get("mypy", {}).get("overrides", [])
    modules: set[str] = set()
    for entry in overrides:
        modules.update(entry.get("module", []))
    return modules


def test_optional_dependency_groups() -> None:
    extras = _extras(_load_pyproject())
    assert {"test", "dev"}.issubset(extras)
    assert any(req.startswith("pytest") for req in extras["test"])


def test_runtime_dependencies() -> None:
    deps = _load_pyproject()["project"]["dependencies"]
    names = {req.split(">")[0].split("=")[0].lower() for req in deps}
    assert {"numpy", "pydantic", "pyyaml", "typer", "phonenumbers", "rapidfuzz"} <= names


def test_console_script_entrypoint() -> None:
    scripts = _load_pyproject().get("project", {}).get("scripts", {})
    assert scripts.get("personid") == "personid.cli:app"


def test_import_smoke() -> None:
    importlib.import_module("personid")
    importlib.import_module("personid.cli")


def test_mypy_overrides() -> None:
    mods = _flatten_mypy_overrides(_load_pyproject())
    for mod in {"phonenumbers", "phonenumbers.*"}:
        assert mod in mods
