from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger

from skilltree.core.engine import GraphEngine
from skilltree.core.errors import (
    LayoutError,
    PlanError,
    PlanLoadError,
    PlanValidationError,
    ProgressLoadError,
)
from skilltree.core.io.load_plan import load_plan
from skilltree.core.io.progress import load_progress, save_progress
from skilltree.core.layout import strategy_from_name
from skilltree.core.layout.layout_config import LayoutConfigError, load_and_merge
from skilltree.core.lint.lint_plan import lint_plan
from skilltree.core.model import GraphState
from skilltree.core.validate.validate_plan import diff_counts, summarize_plan, validate_plan

app = typer.Typer(add_completion=False, no_args_is_help=True)

DEFAULT_WIDTH = 1024


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr"),
) -> None:
    """Skill tree CLI."""
    level = "DEBUG" if verbose else os.getenv("SKILLTREE_LOG_LEVEL", "WARNING").upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format="{level}: {message}")
    logger.enable("skilltree")
    return


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Check that a plan file has the shape the engine accepts."""
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    def _emit_json(
        ok: bool, *, exit_code: int, errors: list[PlanError], summary: dict | None
    ) -> None:
        payload = {
            "tool": "skilltree",
            "command": "validate",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "summary": summary,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        raw = load_plan(path)
    except PlanLoadError as e:
        if format == "json":
            _emit_json(False, exit_code=1, errors=[e], summary=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    plan, errors = validate_plan(raw)
    if errors or plan is None:
        if format == "json":
            _emit_json(False, exit_code=2, errors=list(errors), summary=None)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    if format == "text":
        typer.echo(summarize_plan(plan))
        return

    counts = diff_counts(plan)
    summary = {
        "title": plan.title,
        "problem_count": len(plan.problems),
        "diff_counts": {k: int(v) for k, v in counts.items()},
    }
    _emit_json(True, exit_code=0, errors=[], summary=summary)


@app.command("lint")
def lint(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Lint a plan file (duplicates, dangling prereqs, cycles, difficulty tags)."""
    _check_format(format, "E_LINT_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, errors: list[PlanError], exit_code: int) -> None:
        payload = {
            "tool": "skilltree",
            "command": "lint",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        raw = load_plan(path)
    except PlanLoadError as e:
        if format == "json":
            _emit_json(False, [e], 1)
        _print_errors([e])
        raise typer.Exit(code=1)

    _, validation_errors = validate_plan(raw)
    errors: list[PlanError] = [*lint_plan(raw), *validation_errors]

    if format == "text":
        if errors:
            _print_errors(errors)
            raise typer.Exit(code=2)
        typer.echo("OK: lint passed")
        return

    if errors:
        _emit_json(False, errors, 2)
    _emit_json(True, [], 0)


@app.command("compute")
def compute(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    width: float = typer.Option(DEFAULT_WIDTH, "--width", help="Container width"),
    progress: Optional[str] = typer.Option(
        None, "--progress", help="Progress file (JSON list of ids)"
    ),
    layout: str = typer.Option("layered", "--layout", help="Layout preset: grid|layered|<custom>"),
    layout_file: Optional[str] = typer.Option(
        None, "--layout-file", help="Optional YAML file to add/override layout presets"
    ),
    out: Optional[str] = typer.Option(None, "--out", help="Write the graph state JSON here"),
) -> None:
    """Lay out a plan and print the render-ready graph state as JSON."""
    engine = _build_engine(path, progress, layout, layout_file)
    state = _compute(engine, width)

    text = json.dumps(state.to_dict(), indent=2)
    if out is None:
        typer.echo(text)
        return
    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"OK: wrote graph state to {out}")


@app.command("status")
def status(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    progress: Optional[str] = typer.Option(
        None, "--progress", help="Progress file (JSON list of ids)"
    ),
) -> None:
    """Show the status of every problem and overall progress."""
    engine = _build_engine(path, progress, "grid", None)
    state = _compute(engine, DEFAULT_WIDTH)
    for node in state.nodes:
        typer.echo(f"{node.status:<9}  {node.id}  {node.item.title or ''}".rstrip())
    typer.echo(_progress_line(state))


@app.command("toggle")
def toggle(
    path: str = typer.Argument(..., help="Path to a plan file (.yaml/.yml/.json)"),
    problem_id: str = typer.Argument(..., help="Problem id to mark done/undone"),
    progress: str = typer.Option(..., "--progress", help="Progress file (JSON list of ids)"),
) -> None:
    """Flip a problem between completed and not completed."""
    engine = _build_engine(path, progress, "grid", None)
    plan = engine.plan
    assert plan is not None

    if problem_id not in plan.ids:
        _print_errors(
            [
                PlanValidationError(
                    code="E_UNKNOWN_PROBLEM",
                    message=f"problem id not in plan: {problem_id}",
                    file=path,
                    path="problem_id",
                )
            ]
        )
        raise typer.Exit(code=2)

    engine.toggle(problem_id)
    save_progress(progress, engine.get_progress())

    state = _compute(engine, DEFAULT_WIDTH)
    new_status = next(n.status for n in state.nodes if n.id == problem_id)
    typer.echo(f"OK: {problem_id} -> {new_status}")
    typer.echo(_progress_line(state))


@app.command("reset")
def reset(
    progress: str = typer.Option(..., "--progress", help="Progress file (JSON list of ids)"),
) -> None:
    """Clear all recorded progress."""
    save_progress(progress, [])
    typer.echo(f"OK: cleared progress in {progress}")


@app.command("layouts")
def layouts(
    layout_file: Optional[str] = typer.Option(
        None, "--layout-file", help="Optional YAML file to add/override layout presets"
    ),
) -> None:
    """List available layout presets with their effective settings."""
    presets = _load_presets(layout_file)
    typer.echo("Layouts:")
    for name in sorted(presets.keys()):
        settings = asdict(strategy_from_name(name, presets))
        rendered = ", ".join(f"{k}={v}" for k, v in settings.items())
        typer.echo(f"- {name} ({presets[name]['kind']}): {rendered}")


def _build_engine(
    path: str, progress: Optional[str], layout: str, layout_file: Optional[str]
) -> GraphEngine:
    presets = _load_presets(layout_file)
    try:
        strategy = strategy_from_name(layout, presets)
    except LayoutError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    try:
        raw = load_plan(path)
    except PlanLoadError as e:
        _print_errors([e])
        raise typer.Exit(code=1)

    engine = GraphEngine(strategy)
    try:
        engine.load_plan(raw)
    except PlanValidationError as e:
        _print_errors([e])
        raise typer.Exit(code=2)

    if progress is not None:
        try:
            engine.load_progress(load_progress(progress))
        except ProgressLoadError as e:
            _print_errors([e])
            raise typer.Exit(code=1)
    return engine


def _compute(engine: GraphEngine, width: float) -> GraphState:
    try:
        state = engine.compute(width)
    except LayoutError as e:
        _print_errors([e])
        raise typer.Exit(code=2)
    assert state is not None
    return state


def _load_presets(layout_file: Optional[str]) -> dict[str, dict[str, Any]]:
    try:
        return load_and_merge(layout_file)
    except FileNotFoundError:
        _print_errors(
            [
                PlanLoadError(
                    code="E_LAYOUT_FILE_NOT_FOUND",
                    message=f"layout file not found: {layout_file}",
                    file=None,
                    path="layout_file",
                )
            ]
        )
        raise typer.Exit(code=1)
    except LayoutConfigError as e:
        _print_errors(
            [
                PlanValidationError(
                    code="E_LAYOUT_FILE_INVALID",
                    message=str(e),
                    file=layout_file,
                    path="layout_file",
                )
            ]
        )
        raise typer.Exit(code=2)


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = PlanValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _to_item(e: PlanError) -> dict:
    if isinstance(e, PlanLoadError):
        source = "load"
    elif e.code.startswith("L_"):
        source = "lint"
    else:
        source = "validate"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _progress_line(state: GraphState) -> str:
    s = state.stats
    return f"Progress: {s.completed}/{s.total} ({s.percent}%)"


def _print_errors(errors: list[PlanError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="skilltree")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
