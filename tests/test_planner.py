"""Tests for plan normalization and task graph validation."""

import pytest

from aiteam.core.planner import TaskGraphBuilder, dependency_graph, namespaced_id, validate_task_graph
from aiteam.models import PlanComplexity, TaskPriority, TaskStatus, WorkerRole
from aiteam.utils.exceptions import CapabilityError, PlanningError

from tests.helpers import FakeCapabilities, fake_config, make_plan, make_task


def _builder(capabilities, store, **config):
    return TaskGraphBuilder(capabilities, store, fake_config(**config))


class TestNormalize:
    def test_ids_are_namespaced_by_generation(self, store):
        plan = make_plan({"id": "1"}, {"id": "2", "dependencies": ["1"]})

        tasks = _builder(FakeCapabilities(), store).normalize(plan, generation=3)

        assert [t.id for t in tasks] == ["g3-1", "g3-2"]
        assert [t.source_id for t in tasks] == ["1", "2"]
        assert tasks[1].dependencies == ["g3-1"]
        assert all(t.status == TaskStatus.PENDING for t in tasks)

    def test_duplicate_dependencies_are_dropped(self, store):
        plan = make_plan({"id": "a"}, {"id": "b", "dependencies": ["a", "a"]})

        tasks = _builder(FakeCapabilities(), store).normalize(plan, generation=1)

        assert tasks[1].dependencies == ["g1-a"]

    def test_self_dependency_is_kept(self, store):
        plan = make_plan({"id": "a", "dependencies": ["a"]})

        tasks = _builder(FakeCapabilities(), store).normalize(plan, generation=1)

        assert tasks[0].dependencies == ["g1-a"]

    def test_duplicate_ids_rejected(self, store):
        plan = make_plan({"id": "a"}, {"id": "a"})

        with pytest.raises(PlanningError, match="Duplicate task id"):
            _builder(FakeCapabilities(), store).normalize(plan, generation=1)

    def test_empty_plan_rejected(self, store):
        plan = make_plan()

        with pytest.raises(PlanningError, match="no tasks"):
            _builder(FakeCapabilities(), store).normalize(plan, generation=1)

    def test_legacy_role_names_are_accepted(self):
        plan = make_plan({"id": "1", "role": "engineer", "priority": "HIGH"})

        assert plan.tasks[0].role == WorkerRole.IMPLEMENTER
        assert plan.tasks[0].priority == TaskPriority.HIGH


class TestValidation:
    def test_acyclic_graph_passes(self):
        tasks = [make_task("a"), make_task("b", ["a"]), make_task("c", ["a", "b"])]

        validate_task_graph(tasks)

        assert set(dependency_graph(tasks).edges) == {("a", "b"), ("a", "c"), ("b", "c")}

    def test_dangling_dependency_is_named(self):
        tasks = [make_task("a"), make_task("b", ["ghost"])]

        with pytest.raises(PlanningError, match="b -> ghost"):
            validate_task_graph(tasks)

    def test_cycle_is_reported_with_path(self):
        tasks = [make_task("a", ["b"]), make_task("b", ["a"])]

        with pytest.raises(PlanningError, match="cycle"):
            validate_task_graph(tasks)

    def test_self_loop_is_a_cycle(self):
        tasks = [make_task("a"), make_task("b", ["b"])]

        with pytest.raises(PlanningError, match="b -> b"):
            validate_task_graph(tasks)


class TestBuild:
    @pytest.mark.asyncio
    async def test_build_populates_session(self, store):
        session = store.create("todo app")
        capabilities = FakeCapabilities(plans=[make_plan(
            {"id": "1", "role": "architect", "priority": "high"},
            {"id": "2", "role": "implementer", "dependencies": ["1"]},
            overview="two steps",
            complexity="medium",
        )])

        tasks = await _builder(capabilities, store).build(session.id)

        live = store.require(session.id)
        assert live.tasks == tasks
        assert live.overview == "two steps"
        assert live.complexity == PlanComplexity.MEDIUM
        assert capabilities.plan_requests == ["todo app"]

    @pytest.mark.asyncio
    async def test_cyclic_plan_leaves_no_partial_task_list(self, store):
        session = store.create("todo app")
        capabilities = FakeCapabilities(plans=[make_plan(
            {"id": "a", "dependencies": ["b"]},
            {"id": "b", "dependencies": ["a"]},
        )])

        with pytest.raises(PlanningError):
            await _builder(capabilities, store).build(session.id)

        assert store.require(session.id).tasks == []

    @pytest.mark.asyncio
    async def test_validation_can_be_disabled(self, store):
        session = store.create("todo app")
        capabilities = FakeCapabilities(plans=[make_plan({"id": "a", "dependencies": ["missing"]})])

        tasks = await _builder(capabilities, store, validate_task_graph=False).build(session.id)

        assert tasks[0].dependencies == [namespaced_id(1, "missing")]

    @pytest.mark.asyncio
    async def test_planner_failure_propagates(self, store):
        session = store.create("todo app")
        capabilities = FakeCapabilities(
            plans=[make_plan({"id": "a"})],
            failures={"plan": CapabilityError("timeout")},
        )

        with pytest.raises(CapabilityError, match="timeout"):
            await _builder(capabilities, store).build(session.id)
