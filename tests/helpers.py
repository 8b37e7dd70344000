"""Scripted fakes for the worker capabilities and the preview sandbox."""

import asyncio
from typing import Dict, Iterable, List, Optional, Sequence

from aiteam.core.capabilities import WorkerCapabilities
from aiteam.core.coordinator import CoordinatorFactory, GenerationCoordinator
from aiteam.models import (
    CodeBundle,
    GeneratedFile,
    GenerationSession,
    SystemConfig,
    Task,
    TaskPlan,
    TaskPriority,
    WorkerRole,
)
from aiteam.services.preview import PreviewSandbox


def make_plan(*tasks: dict, overview: str = "test plan", complexity: str = "simple") -> TaskPlan:
    """Build a TaskPlan from planner-shaped dicts; description defaults to ``do <id>``."""
    descriptors = []
    for task in tasks:
        descriptor = {
            "id": task["id"],
            "title": task.get("title", f"Task {task['id']}"),
            "description": task.get("description", f"do {task['id']}"),
            "role": task.get("role", "designer"),
            "priority": task.get("priority", "medium"),
            "dependencies": task.get("dependencies", []),
        }
        descriptors.append(descriptor)
    return TaskPlan.model_validate({"overview": overview, "complexity": complexity, "tasks": descriptors})


def make_task(task_id: str, dependencies: Sequence[str] = (), priority: str = "medium",
              role: WorkerRole = WorkerRole.DESIGNER) -> Task:
    return Task(
        id=task_id,
        source_id=task_id,
        title=f"Task {task_id}",
        description=f"do {task_id}",
        assigned_role=role,
        priority=TaskPriority(priority),
        dependencies=list(dependencies),
    )


def session_with(store, tasks: Iterable[Task], request: str = "build an app") -> GenerationSession:
    session = store.create(request)
    session.tasks = list(tasks)
    return session


def bundle_for(spec: str) -> CodeBundle:
    return CodeBundle(
        files=[
            GeneratedFile(path="src/App.tsx", content=f"// {spec}\nexport default function App() {{}}"),
            GeneratedFile(path="src/index.css", content="body {}", type="style"),
        ],
        dependencies=["react"],
        instructions="npm run dev",
        reasoning=f"implements: {spec}",
    )


class FakeCapabilities(WorkerCapabilities):
    """
    Scripted capabilities.

    Calls are keyed by role name for plan/architect/review and by the task
    description for implement/design, so per-task delays and failures can
    be scripted with ``delays`` and ``failures``.
    """

    def __init__(self, plans: Optional[List[TaskPlan]] = None,
                 delays: Optional[Dict[str, float]] = None,
                 failures: Optional[Dict[str, Exception]] = None):
        self.plans = list(plans or [])
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls: List[tuple] = []
        self.plan_requests: List[str] = []
        self.implement_specs: List[str] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def _act(self, method: str, key: str):
        self.calls.append((method, key))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key in self.failures:
                raise self.failures[key]
        finally:
            self.active -= 1

    async def plan(self, request: str) -> TaskPlan:
        self.plan_requests.append(request)
        await self._act("plan", "plan")
        if len(self.plans) > 1:
            return self.plans.pop(0)
        return self.plans[0]

    async def architect(self, request: str, context: str) -> str:
        await self._act("architect", "architect")
        return f"architecture for {request}"

    async def implement(self, spec: str, architecture: str) -> CodeBundle:
        self.implement_specs.append(spec)
        await self._act("implement", spec)
        return bundle_for(spec)

    async def review(self, code: str, context: str) -> str:
        await self._act("review", "review")
        return "use semantic html"

    async def design(self, requirements: str, request: str) -> str:
        await self._act("design", requirements)
        return f"design: {requirements}"

    async def close(self):
        self.closed = True


class FakeSandbox(PreviewSandbox):
    """Records every call instead of touching disk or npm"""

    def __init__(self, url: str = "http://localhost:3000/", install_error: Optional[Exception] = None):
        self.url = url
        self.install_error = install_error
        self.initialize_calls = 0
        self.materialized: List[List[GeneratedFile]] = []
        self.install_calls = 0
        self.start_calls = 0
        self.closed = False

    async def initialize(self) -> None:
        self.initialize_calls += 1

    async def materialize(self, files) -> List[str]:
        files = list(files)
        self.materialized.append(files)
        return [f.path for f in files]

    async def install(self) -> None:
        self.install_calls += 1
        if self.install_error is not None:
            raise self.install_error

    async def start_server(self) -> str:
        self.start_calls += 1
        return self.url

    async def close(self) -> None:
        self.closed = True


def make_coordinator(capabilities: FakeCapabilities, sandbox: Optional[PreviewSandbox] = None,
                     config: Optional[SystemConfig] = None) -> GenerationCoordinator:
    return CoordinatorFactory.create_coordinator(
        config=config or fake_config(),
        capabilities=capabilities,
        sandbox=sandbox if sandbox is not None else FakeSandbox(),
        configure_logging=False,
    )


def fake_config(**overrides) -> SystemConfig:
    values = {
        "log_dir": None,
        "poll_interval": 0.01,
        "poll_timeout": 5.0,
    }
    values.update(overrides)
    return SystemConfig(**values)
