"""JSON writer for analysis results.

The payload is written as UTF-8 without a byte-order mark, indented for
review.  Parent directories are created as needed.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

PathLikeStr = os.PathLike[str]


def write_json(
    path: str | PathLikeStr,
    payload: Any,
    *,
    encoding: str = "utf-8",
    indent: int | None = 2,
) -> None:
    """Serialise ``payload`` to ``path``."""

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding=encoding) as f:
        json.dump(payload, f, indent=indent, ensure_ascii=False, sort_keys=False)
        f.write("\n")


__all__ = ["write_json"]
