from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from skilltree.core.errors import PlanError


# suffix -> (document format, parse error code)
DOCUMENT_FORMATS: dict[str, tuple[str, str]] = {
    ".json": ("json", "E_JSON_PARSE"),
    ".yaml": ("yaml", "E_YAML_PARSE"),
    ".yml": ("yaml", "E_YAML_PARSE"),
}

_PARSERS: dict[str, Callable[[str], Any]] = {
    "json": json.loads,
    "yaml": yaml.safe_load,
}


def read_document(
    p: Path,
    error: type[PlanError],
    *,
    fmt: str,
    parse_code: str,
) -> Any:
    """Read a UTF-8 file and parse it as ``fmt`` (json|yaml).

    Every failure surfaces as ``error`` with a code: E_FILE_READ when the file
    cannot be opened, E_FILE_ENCODING when it is not UTF-8, ``parse_code``
    when the text does not parse.
    """
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise error(code="E_FILE_ENCODING", message=f"not valid UTF-8: {e}", file=str(p)) from e
    except OSError as e:
        raise error(code="E_FILE_READ", message=e.strerror or str(e), file=str(p)) from e

    try:
        return _PARSERS[fmt](text)
    except (ValueError, yaml.YAMLError) as e:
        raise error(code=parse_code, message=str(e), file=str(p)) from e


def document_format(p: Path) -> Optional[tuple[str, str]]:
    return DOCUMENT_FORMATS.get(p.suffix.lower())
