from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from loguru import logger

from skilltree.core.errors import ProgressLoadError
from skilltree.core.io.files import read_document


def load_progress(path: str) -> list[str]:
    """Read a progress file (a JSON list of completed ids).

    A missing file means no progress yet and yields an empty list.
    """

    p = Path(path)
    if not p.exists():
        logger.debug("progress file {} does not exist; starting empty", p)
        return []

    # Always JSON, whatever the suffix.
    data = read_document(p, ProgressLoadError, fmt="json", parse_code="E_PROGRESS_PARSE")

    if not isinstance(data, list) or any(not isinstance(x, str) for x in data):
        raise ProgressLoadError(
            code="E_PROGRESS_SHAPE",
            message="progress must be a JSON array of string ids",
            file=str(p),
        )
    return data


def save_progress(path: str, ids: Iterable[str]) -> None:
    p = Path(path)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    # Sorted so that repeated saves of the same set are byte-identical.
    p.write_text(json.dumps(sorted(set(ids)), indent=2) + "\n", encoding="utf-8")
