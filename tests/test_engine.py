import pytest

import skilltree.core.engine.engine as engine_mod
from skilltree.core.engine import GraphEngine
from skilltree.core.errors import PlanValidationError, ValidationError
from skilltree.core.io.load_plan import load_plan
from skilltree.core.layout import GridLayout, LayeredLayout, run_layout
from skilltree.core.model import Item, Plan


AB_PLAN = {"title": "ab", "problems": [{"id": "A"}, {"id": "B", "prereqs": ["A"]}]}


def _statuses(state) -> dict:
    return {n.id: n.status for n in state.nodes}


def _geometry(state) -> dict:
    return {n.id: (n.x, n.y, n.width, n.height) for n in state.nodes}


@pytest.fixture
def layout_calls(monkeypatch):
    calls = []

    def counting(strategy, items, width):
        calls.append((type(strategy).__name__, width))
        return run_layout(strategy, items, width)

    monkeypatch.setattr(engine_mod, "run_layout", counting)
    return calls


def test_compute_without_plan_returns_none():
    assert GraphEngine(GridLayout()).compute(800) is None


def test_toggle_scenario():
    engine = GraphEngine(LayeredLayout())
    engine.load_plan(AB_PLAN)

    state = engine.compute(800)
    assert _statuses(state) == {"A": "available", "B": "locked"}
    assert [e.status for e in state.edges] == ["available"]

    engine.toggle("A")
    state = engine.compute(800)
    assert _statuses(state) == {"A": "completed", "B": "available"}
    assert [(e.id, e.from_id, e.to_id, e.status) for e in state.edges] == [
        ("A-B", "A", "B", "completed")
    ]

    engine.toggle("A")
    state = engine.compute(800)
    assert _statuses(state) == {"A": "available", "B": "locked"}


def test_edge_mirrors_parent_status():
    engine = GraphEngine(GridLayout())
    engine.load_plan(
        {
            "title": "",
            "problems": [
                {"id": "A", "prereqs": ["Z"]},
                {"id": "Z"},
                {"id": "B", "prereqs": ["A"]},
            ],
        }
    )
    state = engine.compute(800)
    by_id = {e.id: e.status for e in state.edges}
    # Z available -> Z-A available; A locked -> A-B locked
    assert by_id == {"Z-A": "available", "A-B": "locked"}

    engine.load_progress(["Z", "A"])
    by_id = {e.id: e.status for e in engine.compute(800).edges}
    assert by_id == {"Z-A": "completed", "A-B": "completed"}


def test_dangling_prereqs_never_lock():
    engine = GraphEngine(GridLayout())
    engine.load_plan(
        {
            "title": "",
            "problems": [
                {"id": "a", "prereqs": ["ghost"]},
                {"id": "b", "prereqs": ["ghost", "a"]},
                {"id": "c", "prereqs": []},
            ],
        }
    )
    state = engine.compute(800)
    assert _statuses(state) == {"a": "available", "b": "locked", "c": "available"}
    assert [e.id for e in state.edges] == ["a-b"]


def test_toggle_is_its_own_inverse():
    engine = GraphEngine(GridLayout())
    engine.load_progress(["x", "y"])
    engine.toggle("z")
    engine.toggle("z")
    engine.toggle("x")
    engine.toggle("x")
    assert sorted(engine.get_progress()) == ["x", "y"]


def test_load_progress_deduplicates_and_reset_clears():
    engine = GraphEngine(GridLayout())
    engine.load_progress(["a", "b", "a"])
    assert sorted(engine.get_progress()) == ["a", "b"]
    assert engine.is_completed("a")
    engine.reset_progress()
    assert engine.get_progress() == []


def test_geometry_reused_across_toggle(layout_calls):
    engine = GraphEngine(LayeredLayout())
    engine.load_plan(load_plan("examples/basic-plan.json"))

    before = engine.compute(1024)
    engine.toggle("two-sum")
    after = engine.compute(1024)

    assert _geometry(before) == _geometry(after)
    assert _statuses(before) != _statuses(after)
    assert len(layout_calls) == 1


def test_width_change_recomputes(layout_calls):
    engine = GraphEngine(GridLayout())
    engine.load_plan(AB_PLAN)
    engine.compute(800)
    engine.compute(800)
    engine.compute(300)
    engine.compute(300)
    assert layout_calls == [("GridLayout", 800), ("GridLayout", 300)]


def test_set_strategy_and_load_plan_invalidate(layout_calls):
    engine = GraphEngine(GridLayout())
    engine.load_plan(AB_PLAN)
    engine.compute(800)

    grid = GridLayout()
    engine.set_strategy(grid)
    engine.compute(800)
    engine.set_strategy(grid)  # same object still invalidates
    engine.compute(800)

    engine.load_plan(AB_PLAN)
    engine.compute(800)

    engine.load_progress(["A"])
    engine.reset_progress()
    engine.compute(800)
    assert len(layout_calls) == 4


def test_set_strategy_changes_geometry():
    engine = GraphEngine(GridLayout(cell_size=100, gap=10))
    engine.load_plan(AB_PLAN)
    grid = engine.compute(800)
    engine.set_strategy(LayeredLayout())
    layered = engine.compute(800)
    assert _geometry(grid) != _geometry(layered)
    assert _statuses(grid) == _statuses(layered)


def test_load_plan_rejects_missing_problems_and_keeps_state():
    engine = GraphEngine(GridLayout())
    engine.load_plan(AB_PLAN)
    engine.load_progress(["A"])

    with pytest.raises(ValidationError) as exc:
        engine.load_plan({"title": "broken"})
    assert isinstance(exc.value, PlanValidationError)
    assert exc.value.code == "E_INVALID_PLAN"

    with pytest.raises(PlanValidationError):
        engine.load_plan({"title": "broken", "problems": "A,B"})

    state = engine.compute(800)
    assert [n.id for n in state.nodes] == ["A", "B"]
    assert engine.get_progress() == ["A"]


def test_load_plan_keeps_progress():
    engine = GraphEngine(GridLayout())
    engine.load_progress(["A"])
    engine.load_plan(AB_PLAN)
    assert _statuses(engine.compute(800)) == {"A": "completed", "B": "available"}


def test_load_plan_accepts_plan_objects():
    plan = Plan(title="objs", problems=(Item(id="x"), Item(id="y", prereqs=("x",))))
    engine = GraphEngine(GridLayout())
    engine.load_plan(plan)
    assert engine.plan is plan
    assert _statuses(engine.compute(800)) == {"x": "available", "y": "locked"}


def test_empty_plan():
    engine = GraphEngine(GridLayout(cell_size=200, gap=20))
    engine.load_plan({"title": "", "problems": []})
    state = engine.compute(640)
    assert state.nodes == []
    assert state.edges == []
    assert state.height == 20
    assert (state.stats.total, state.stats.completed, state.stats.percent) == (0, 0, 0)

    engine.set_strategy(LayeredLayout())
    assert engine.compute(640).height == 0


@pytest.mark.parametrize(
    "done,percent",
    [
        ([], 0),
        (["p0"], 13),
        (["p0", "p1"], 25),
        (["p0", "p1", "p2"], 38),
        ([f"p{i}" for i in range(8)], 100),
    ],
)
def test_stats_percent_rounds_half_up(done, percent):
    engine = GraphEngine(GridLayout())
    engine.load_plan({"title": "", "problems": [{"id": f"p{i}"} for i in range(8)]})
    engine.load_progress(done)
    stats = engine.compute(800).stats
    assert stats.total == 8
    assert stats.completed == len(done)
    assert stats.percent == percent


def test_stats_count_progress_ids_outside_plan():
    engine = GraphEngine(GridLayout())
    engine.load_plan(AB_PLAN)
    engine.load_progress(["A", "from-another-plan"])
    state = engine.compute(800)
    assert state.stats.completed == 2
    assert _statuses(state) == {"A": "completed", "B": "available"}


def test_duplicate_ids_still_yield_one_node_per_entry():
    # Duplicate ids are undefined behavior; lint flags them. The engine must not crash.
    engine = GraphEngine(GridLayout())
    engine.load_plan(load_plan("examples/invalid-duplicate-id.json"))
    state = engine.compute(800)
    assert [n.id for n in state.nodes] == ["a", "a"]


def test_two_cycle_terminates_under_layered():
    engine = GraphEngine(LayeredLayout())
    engine.load_plan(
        {"title": "", "problems": [{"id": "A", "prereqs": ["B"]}, {"id": "B", "prereqs": ["A"]}]}
    )
    state = engine.compute(800)
    assert _statuses(state) == {"A": "locked", "B": "locked"}
    assert all(n.y >= 0 for n in state.nodes)
    assert sorted(e.id for e in state.edges) == ["A-B", "B-A"]


def test_graph_state_dict_shape():
    engine = GraphEngine(LayeredLayout())
    engine.load_plan(load_plan("examples/basic-plan.json"))
    engine.load_progress(["two-sum"])
    out = engine.compute(1024).to_dict()

    assert set(out) == {"nodes", "edges", "width", "height", "stats"}
    first = out["nodes"][0]
    assert first["id"] == "two-sum"
    assert first["url"] == "https://leetcode.com/problems/two-sum/"
    assert first["status"] == "completed"
    assert {"x", "y", "width", "height"} <= set(first)
    assert set(out["edges"][0]) == {"id", "from", "to", "path", "status"}
    assert out["stats"] == {"total": 5, "completed": 1, "percent": 20}


def test_node_dict_keeps_every_item_field():
    engine = GraphEngine(GridLayout())
    engine.load_plan(
        {
            "title": "",
            "problems": [{"id": "a", "title": 7, "prereqs": [], "diff": None, "tags": ["x"]}],
        }
    )
    node = engine.compute(800).to_dict()["nodes"][0]

    assert node["id"] == "a"
    assert node["title"] == 7
    assert node["prereqs"] == []
    assert "diff" in node and node["diff"] is None
    assert node["tags"] == ["x"]
    assert node["x"] == 20
    assert node["status"] == "available"
