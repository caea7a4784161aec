"""Typer-based command line interface for identity resolution.

The ``run`` command reads evidence documents (``.jsonl`` or ``.json``), runs
:func:`personid.pipeline.analyze` and writes the ranked persons as JSON.
``show-config`` prints the effective configuration as YAML.

Exit codes
----------
0 success
3 I/O error (unsupported extension, malformed documents, filesystem issues)
4 configuration error
5 pipeline error (invalid input or unexpected exception during analysis)
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from .config import ConfigModel, load_config
from .io import read_documents, write_result
from .pipeline import analyze
from .utils.errors import IOFormatError
from .utils.logging import configure_logging
from .utils.timing import Timing

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

app = typer.Typer(
    name="personid",
    help="Identity resolution over web evidence. Use 'personid run' to analyze documents.",
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> None:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _load(config_path: Path | None) -> ConfigModel:
    try:
        return load_config(config_path)
    except (ValidationError, ValueError, OSError, yaml.YAMLError) as exc:
        _safe_exit(4, str(exc).splitlines()[0])
        raise  # pragma: no cover - _safe_exit always raises


def _apply_overrides(
    cfg: ConfigModel,
    *,
    min_cluster_size: int | None,
    metric: str | None,
    algorithm: str | None,
) -> ConfigModel:
    """Return a validated copy of ``cfg`` with CLI overrides applied."""

    data = cfg.model_dump()
    if min_cluster_size is not None:
        data["clustering"]["min_cluster_size"] = min_cluster_size
    if metric is not None:
        data["clustering"]["metric"] = metric
    if algorithm is not None:
        data["clustering"]["algorithm"] = algorithm
    return ConfigModel.model_validate(data)


def _stage_echo(event: str, fields: Mapping[str, object]) -> None:
    elapsed = fields.get("elapsed_ms", 0.0)
    ms = elapsed if isinstance(elapsed, float) else 0.0
    typer.echo(f"{event}: {fields.get('count')} in {ms:.1f} ms", err=True)


@app.callback()
def main() -> None:
    """Entry point for the personid command group."""
    pass


@app.command()
def run(  # noqa: PLR0913
    in_path: Path = typer.Option(  # noqa: B008
        ..., "--in", "--input", help="Evidence documents (.jsonl or .json)"
    ),
    out_path: Path = typer.Option(..., "--out", help="Output file (.json)"),  # noqa: B008
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    min_cluster_size: Optional[int] = typer.Option(  # noqa: B008
        None, "--min-cluster-size", help="Override clustering.min_cluster_size"
    ),
    metric: Optional[str] = typer.Option(  # noqa: B008
        None, "--metric", help="Distance metric [euclidean|cosine]"
    ),
    algorithm: Optional[str] = typer.Option(  # noqa: B008
        None, "--algorithm", help="Clustering strategy [hdbscan|consensus|kmeans]"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Emit progress messages to stderr"
    ),
) -> None:
    """Analyze the documents in ``in_path`` and write persons to ``out_path``."""

    if verbose:
        configure_logging(verbose=True)

    cfg = _load(config_path)
    try:
        cfg = _apply_overrides(
            cfg, min_cluster_size=min_cluster_size, metric=metric, algorithm=algorithm
        )
    except ValidationError as exc:
        _safe_exit(4, str(exc).splitlines()[0])
    if verbose:
        typer.echo("Loaded config", err=True)

    try:
        documents = read_documents(in_path)
    except (FileNotFoundError, IOFormatError, OSError) as exc:
        _safe_exit(3, str(exc))
    if verbose:
        typer.echo(f"Read {len(documents)} documents", err=True)

    try:
        with Timing() as t_run:
            result = analyze(documents, cfg, events=_stage_echo if verbose else None)
    except Exception as exc:
        msg = str(exc)
        if verbose:
            msg = f"{type(exc).__name__}: {msg}"
        _safe_exit(5, msg)
    if verbose:
        typer.echo(f"Analyzed in {t_run.ms:.1f} ms", err=True)

    try:
        write_result(out_path, result.to_dict())
    except (IOFormatError, OSError) as exc:
        _safe_exit(3, str(exc))

    typer.echo(
        f"{result.stats.persons} persons from {result.stats.documents} documents -> {out_path}"
    )


@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
) -> None:
    """Print the effective configuration as YAML."""

    cfg = _load(config_path)
    typer.echo(yaml.safe_dump(cfg.model_dump(), sort_keys=False).rstrip())


__all__ = ["app"]
