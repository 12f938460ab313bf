from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from skilltree.core.errors import PlanValidationError
from skilltree.core.model import DIFFICULTIES


# Plan lint rules. The engine tolerates all of these; lint makes them visible:
# - L_INVALID_PROBLEM: problem entry is not an object
# - L_MISSING_ID: problem has no non-empty string id
# - L_DUPLICATE_ID: duplicate problem IDs (engine behavior is undefined for these)
# - L_UNKNOWN_DIFFICULTY: diff is not one of Easy/Medium/Hard
# - L_DANGLING_PREREQ: prereq references an id that is not in the plan
# - L_CYCLE_DETECTED: prerequisite cycle exists


def lint_plan(plan: dict[str, Any]) -> list[PlanValidationError]:
    """Lint a plan.

    Lint runs *in addition to* the shape check. It is allowed to operate on
    partially-invalid inputs (best effort).

    The CLI prints lint + validation errors together.
    """

    file = _cast_optional_str(plan.get("__file__"))

    problems = plan.get("problems")
    if not isinstance(problems, list):
        # Let validator handle shape.
        return []

    id_to_index: dict[str, int] = {}
    id_to_raw: dict[str, dict[str, Any]] = {}
    ids: list[str] = []
    errors: list[PlanValidationError] = []

    for i, raw in enumerate(problems):
        if not isinstance(raw, dict):
            errors.append(
                PlanValidationError(
                    code="L_INVALID_PROBLEM",
                    message="problem must be an object",
                    file=file,
                    path=f"problems[{i}]",
                )
            )
            continue
        pid = raw.get("id")
        if not isinstance(pid, str) or not pid.strip():
            errors.append(
                PlanValidationError(
                    code="L_MISSING_ID",
                    message="id is required and must be a non-empty string",
                    file=file,
                    path=f"problems[{i}].id",
                )
            )
            continue
        ids.append(pid)
        id_to_index.setdefault(pid, i)
        id_to_raw.setdefault(pid, raw)

    # Rule: duplicate IDs
    counts = Counter(ids)
    dupes = {k: v for k, v in counts.items() if v > 1}
    if dupes:
        seen: set[str] = set()
        for i, raw in enumerate(problems):
            if not isinstance(raw, dict):
                continue
            pid = raw.get("id")
            if not isinstance(pid, str) or pid not in dupes:
                continue
            if pid not in seen:
                seen.add(pid)
                continue
            errors.append(
                PlanValidationError(
                    code="L_DUPLICATE_ID",
                    message=f"duplicate problem id: {pid} (count={dupes[pid]})",
                    file=file,
                    path=f"problems[{i}].id",
                )
            )

    # Rule: difficulty tag
    for pid, raw in id_to_raw.items():
        diff = raw.get("diff")
        if diff is not None and diff not in DIFFICULTIES:
            errors.append(
                PlanValidationError(
                    code="L_UNKNOWN_DIFFICULTY",
                    message=f"diff must be one of {list(DIFFICULTIES)}, got {diff!r}",
                    file=file,
                    path=f"problems[{id_to_index[pid]}].diff",
                )
            )

    # Rule: dangling prerequisites
    id_to_prereqs: dict[str, list[str]] = {}
    for pid, raw in id_to_raw.items():
        prereqs_raw = raw.get("prereqs")
        prereqs: list[str] = []
        if isinstance(prereqs_raw, list):
            prereqs = [p for p in prereqs_raw if isinstance(p, str)]
        id_to_prereqs[pid] = [p for p in prereqs if p in id_to_raw]
        for pi, dep in enumerate(prereqs):
            if dep not in id_to_raw:
                errors.append(
                    PlanValidationError(
                        code="L_DANGLING_PREREQ",
                        message=f"prereqs references unknown id: {dep} (ignored)",
                        file=file,
                        path=f"problems[{id_to_index[pid]}].prereqs[{pi}]",
                    )
                )

    # Rule: cycle detection
    for pid, msg in _detect_cycles(id_to_prereqs):
        errors.append(
            PlanValidationError(
                code="L_CYCLE_DETECTED",
                message=msg,
                file=file,
                path=f"problems[{id_to_index.get(pid, 0)}].prereqs",
            )
        )

    return _sorted(errors)


def _detect_cycles(id_to_prereqs: dict[str, list[str]]) -> list[tuple[str, str]]:
    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[str, int] = {pid: WHITE for pid in id_to_prereqs.keys()}
    emitted: set[frozenset[str]] = set()
    out: list[tuple[str, str]] = []

    for start in list(state.keys()):
        if state[start] != WHITE:
            continue
        # Iterative DFS so long prerequisite chains do not hit the recursion limit.
        path: list[str] = [start]
        state[start] = GRAY
        pending = [iter(id_to_prereqs.get(start, []))]
        while pending:
            u = path[-1]
            for v in pending[-1]:
                if state[v] == GRAY:
                    # cycle: v ... u -> v
                    cycle = path[path.index(v) :] + [v]
                    key = frozenset(cycle)
                    if key not in emitted:
                        emitted.add(key)
                        out.append((u, "prerequisite cycle detected: " + " -> ".join(cycle)))
                elif state[v] == WHITE:
                    state[v] = GRAY
                    path.append(v)
                    pending.append(iter(id_to_prereqs.get(v, [])))
                    break
            else:
                state[u] = BLACK
                path.pop()
                pending.pop()

    return out


def _sorted(errors: list[PlanValidationError]) -> list[PlanValidationError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))


def _cast_optional_str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) else None
