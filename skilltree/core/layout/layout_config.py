from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from skilltree.core.layout.grid import GridLayout
from skilltree.core.layout.layered import LayeredLayout


LAYOUT_KINDS: dict[str, type] = {
    "grid": GridLayout,
    "layered": LayeredLayout,
}

DEFAULT_LAYOUTS: dict[str, dict[str, Any]] = {
    "grid": {"kind": "grid", "cell_size": 200, "gap": 20},
    # Taller vertical gap than the strategy default leaves room for multi-line titles.
    "layered": {"kind": "layered", "node_width": 240, "gap_y": 100},
}


# Spacing settings; sizes must be strictly positive.
_MAY_BE_ZERO = {"gap", "gap_x", "gap_y", "margin"}


class LayoutConfigError(ValueError):
    pass


def load_layout_file(path: str | Path) -> dict[str, dict[str, Any]]:
    """Load layout presets from a YAML file.

    Format:
      <name>:
        kind: grid|layered
        <setting>: <number>

    Returns a mapping of preset name -> settings (including ``kind``).
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise LayoutConfigError(f"layout file is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise LayoutConfigError("layout file must be a mapping of name -> settings")

    out: dict[str, dict[str, Any]] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or not k.strip():
            raise LayoutConfigError("layout names must be non-empty strings")
        if not isinstance(v, dict):
            raise LayoutConfigError(f"layout '{k}' must be a mapping of settings")
        kind = v.get("kind")
        if kind not in LAYOUT_KINDS:
            raise LayoutConfigError(
                f"layout '{k}' kind must be one of: {', '.join(sorted(LAYOUT_KINDS))}"
            )
        allowed = {f.name for f in fields(LAYOUT_KINDS[kind])}
        settings: dict[str, Any] = {"kind": kind}
        for name, value in v.items():
            if name == "kind":
                continue
            if name not in allowed:
                raise LayoutConfigError(f"layout '{k}' has unknown {kind} setting: {name}")
            is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
            if not is_number or not (value >= 0 if name in _MAY_BE_ZERO else value > 0):
                raise LayoutConfigError(
                    f"layout '{k}' setting '{name}' must be a "
                    + ("non-negative" if name in _MAY_BE_ZERO else "positive")
                    + " number"
                )
            settings[name] = value
        out[k.strip()] = settings
    return out


def merged_layouts(
    overrides: dict[str, dict[str, Any]] | None = None,
) -> dict[str, dict[str, Any]]:
    """Return DEFAULT_LAYOUTS merged with optional overrides.

    Overrides replace presets of the same name, and may add new ones.
    """
    merged = {k: dict(v) for k, v in DEFAULT_LAYOUTS.items()}
    if overrides:
        for k, v in overrides.items():
            merged[k] = dict(v)
    return merged


def load_and_merge(layout_file: str | None) -> dict[str, dict[str, Any]]:
    if not layout_file:
        return merged_layouts()
    overrides = load_layout_file(layout_file)
    return merged_layouts(overrides)
