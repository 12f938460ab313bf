from __future__ import annotations

from pathlib import Path
from typing import Any

from skilltree.core.errors import PlanLoadError
from skilltree.core.io.files import DOCUMENT_FORMATS, document_format, read_document


def load_plan(path: str) -> dict[str, Any]:
    """Load a YAML/JSON plan file as a plain dict.

    The document is returned as written (extra top-level keys included) with
    the source path under ``__file__``. Shape checks belong to the validator
    and the linter, so nothing is coerced here.
    """

    p = Path(path)
    if not p.exists():
        raise PlanLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    found = document_format(p)
    if found is None:
        raise PlanLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are " + "/".join(sorted(DOCUMENT_FORMATS)),
            file=str(p),
        )
    fmt, parse_code = found

    data = read_document(p, PlanLoadError, fmt=fmt, parse_code=parse_code)
    if not isinstance(data, dict):
        raise PlanLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )
    return {**data, "__file__": str(p)}
