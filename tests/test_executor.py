"""Tests for the round/bucket task scheduler."""

import pytest

from aiteam.core.executor import TaskScheduler
from aiteam.models import TaskStatus
from aiteam.utils.exceptions import CapabilityError, TaskExecutionError, UnsatisfiableGraphError

from tests.helpers import FakeCapabilities, fake_config, make_task, session_with


def _scheduler(capabilities, store, event_bus, **config):
    return TaskScheduler(capabilities, store, event_bus, fake_config(**config))


def _order(events, event_type):
    return [e.task_id for e in events if e.event_type == event_type]


class TestRounds:
    @pytest.mark.asyncio
    async def test_high_tasks_dispatch_together_before_dependent(self, store, event_bus, recorded_events):
        """A(high), B(medium, deps=[A]), C(high) -> round 1 {A, C}, round 2 {B}."""
        session = session_with(store, [
            make_task("A", priority="high"),
            make_task("B", dependencies=["A"], priority="medium"),
            make_task("C", priority="high"),
        ])
        scheduler = _scheduler(FakeCapabilities(), store, event_bus)

        report = await scheduler.execute(session.id)

        assert report.rounds == [[["A", "C"]], [["B"]]]
        assert report.round_count == 2
        completed = _order(recorded_events, "TaskCompleted")
        assert completed.index("B") > completed.index("A")
        assert completed.index("B") > completed.index("C")
        assert all(t.status == TaskStatus.COMPLETED for t in store.require(session.id).tasks)

    @pytest.mark.asyncio
    async def test_same_bucket_runs_concurrently(self, store, event_bus):
        session = session_with(store, [make_task(name, priority="high") for name in "ABC"])
        capabilities = FakeCapabilities(delays={"do A": 0.05, "do B": 0.05, "do C": 0.05})

        await _scheduler(capabilities, store, event_bus).execute(session.id)

        assert capabilities.max_active == 3

    @pytest.mark.asyncio
    async def test_semaphore_bounds_bucket_concurrency(self, store, event_bus):
        session = session_with(store, [make_task(name, priority="high") for name in "ABCD"])
        capabilities = FakeCapabilities(delays={f"do {n}": 0.02 for n in "ABCD"})

        report = await _scheduler(capabilities, store, event_bus, max_parallel_tasks=2).execute(session.id)

        assert capabilities.max_active == 2
        assert report.rounds == [[["A", "B", "C", "D"]]]

    @pytest.mark.asyncio
    async def test_empty_task_list_finishes_immediately(self, store, event_bus):
        session = session_with(store, [])

        report = await _scheduler(FakeCapabilities(), store, event_bus).execute(session.id)

        assert report.round_count == 0
        assert report.completed == []


class TestPriorityOrdering:
    @pytest.mark.asyncio
    async def test_lower_buckets_wait_for_high_bucket_to_settle(self, store, event_bus, recorded_events):
        session = session_with(store, [
            make_task("L", priority="low"),
            make_task("M", priority="medium"),
            make_task("H", priority="high"),
        ])
        capabilities = FakeCapabilities(delays={"do H": 0.05})

        report = await _scheduler(capabilities, store, event_bus).execute(session.id)

        assert report.rounds == [[["H"], ["M"], ["L"]]]
        sequence = [(e.event_type, e.task_id) for e in recorded_events if hasattr(e, "task_id")]
        assert sequence.index(("TaskCompleted", "H")) < sequence.index(("TaskStarted", "M"))
        assert sequence.index(("TaskCompleted", "M")) < sequence.index(("TaskStarted", "L"))

    @pytest.mark.asyncio
    async def test_task_never_starts_before_dependencies_complete(self, store, event_bus, recorded_events):
        session = session_with(store, [
            make_task("D", dependencies=["B", "C"], priority="high"),
            make_task("B", dependencies=["A"], priority="low"),
            make_task("C", priority="medium"),
            make_task("A", priority="high"),
        ])
        capabilities = FakeCapabilities(delays={"do A": 0.02, "do C": 0.01})

        await _scheduler(capabilities, store, event_bus).execute(session.id)

        tasks = {t.id: t for t in store.require(session.id).tasks}
        sequence = [(e.event_type, e.task_id) for e in recorded_events if hasattr(e, "task_id")]
        for task in tasks.values():
            started = sequence.index(("TaskStarted", task.id))
            for dep in task.dependencies:
                assert sequence.index(("TaskCompleted", dep)) < started


class TestFailures:
    @pytest.mark.asyncio
    async def test_cycle_raises_unsatisfiable(self, store, event_bus):
        session = session_with(store, [
            make_task("A", dependencies=["B"]),
            make_task("B", dependencies=["A"]),
        ])
        capabilities = FakeCapabilities()

        with pytest.raises(UnsatisfiableGraphError) as exc_info:
            await _scheduler(capabilities, store, event_bus).execute(session.id)

        assert sorted(exc_info.value.pending_task_ids) == ["A", "B"]
        assert capabilities.calls == []

    @pytest.mark.asyncio
    async def test_dangling_dependency_raises_unsatisfiable(self, store, event_bus):
        session = session_with(store, [make_task("A"), make_task("B", dependencies=["ghost"])])
        capabilities = FakeCapabilities()

        with pytest.raises(UnsatisfiableGraphError):
            await _scheduler(capabilities, store, event_bus).execute(session.id)

        assert capabilities.calls == [("design", "do A")]

    @pytest.mark.asyncio
    async def test_failure_marks_task_and_aborts(self, store, event_bus, recorded_events):
        session = session_with(store, [
            make_task("A", priority="high"),
            make_task("B", dependencies=["A"]),
        ])
        capabilities = FakeCapabilities(failures={"do A": CapabilityError("provider down")})

        with pytest.raises(TaskExecutionError) as exc_info:
            await _scheduler(capabilities, store, event_bus).execute(session.id)

        assert exc_info.value.task_id == "A"
        live = store.require(session.id)
        assert live.get_task("A").status == TaskStatus.FAILED
        assert live.get_task("A").error == "provider down"
        assert live.get_task("A").result is None
        # dependents are left pending, never dispatched
        assert live.get_task("B").status == TaskStatus.PENDING
        assert _order(recorded_events, "TaskFailed") == ["A"]

    @pytest.mark.asyncio
    async def test_siblings_in_failing_bucket_run_to_completion(self, store, event_bus):
        session = session_with(store, [
            make_task("A", priority="high"),
            make_task("B", priority="high"),
            make_task("C", priority="low"),
        ])
        capabilities = FakeCapabilities(
            delays={"do B": 0.05},
            failures={"do A": CapabilityError("boom")},
        )

        with pytest.raises(TaskExecutionError):
            await _scheduler(capabilities, store, event_bus).execute(session.id)

        live = store.require(session.id)
        assert live.get_task("B").status == TaskStatus.COMPLETED
        assert live.get_task("C").status == TaskStatus.PENDING
        assert ("design", "do C") not in capabilities.calls


class TestRoleDispatch:
    @pytest.mark.asyncio
    async def test_results_flow_between_roles(self, store, event_bus):
        from aiteam.models import WorkerRole

        session = session_with(store, [
            make_task("arch", priority="high", role=WorkerRole.ARCHITECT),
            make_task("impl", dependencies=["arch"], role=WorkerRole.IMPLEMENTER),
            make_task("rev", dependencies=["impl"], role=WorkerRole.REVIEWER),
            make_task("coord", role=WorkerRole.COORDINATOR, priority="low"),
        ], request="todo app")

        await _scheduler(FakeCapabilities(), store, event_bus).execute(session.id)

        live = store.require(session.id)
        assert live.results.architecture == "architecture for todo app"
        assert live.results.code is not None
        assert [f.path for f in live.results.files] == ["src/App.tsx", "src/index.css"]
        assert live.results.review == "use semantic html"
        assert live.results.design is None
        assert live.get_task("coord").result == "Task coordination completed"
