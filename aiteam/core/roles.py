"""
Role dispatch - one work variant per worker role

Each variant carries exactly the inputs its capability needs, knows how to
draw them from the session and how to fold the output back into the
session results.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Type, Union

from ..models import CodeBundle, GenerationSession, SessionResults, Task, WorkerRole
from .capabilities import WorkerCapabilities

COORDINATION_ACK = "Task coordination completed"


def serialize_results(results: SessionResults) -> str:
    return results.model_dump_json(by_alias=True, exclude_none=True)


@dataclass
class ArchitectWork:
    role: ClassVar[WorkerRole] = WorkerRole.ARCHITECT
    request: str
    context: str

    @classmethod
    def from_session(cls, session: GenerationSession, task: Task) -> "ArchitectWork":
        return cls(request=session.user_request, context=serialize_results(session.results))

    async def run(self, capabilities: WorkerCapabilities) -> str:
        return await capabilities.architect(self.request, self.context)

    @staticmethod
    def apply(results: SessionResults, output: str):
        results.architecture = output


@dataclass
class ImplementWork:
    role: ClassVar[WorkerRole] = WorkerRole.IMPLEMENTER
    spec: str
    architecture: str

    @classmethod
    def from_session(cls, session: GenerationSession, task: Task) -> "ImplementWork":
        return cls(spec=task.description, architecture=session.results.architecture or "")

    async def run(self, capabilities: WorkerCapabilities) -> CodeBundle:
        return await capabilities.implement(self.spec, self.architecture)

    @staticmethod
    def apply(results: SessionResults, output: CodeBundle):
        results.code = output
        results.files = list(output.files)


@dataclass
class ReviewWork:
    role: ClassVar[WorkerRole] = WorkerRole.REVIEWER
    code: str
    context: str

    @classmethod
    def from_session(cls, session: GenerationSession, task: Task) -> "ReviewWork":
        code = session.results.code
        return cls(
            code=code.model_dump_json(by_alias=True) if code is not None else "",
            context=session.user_request,
        )

    async def run(self, capabilities: WorkerCapabilities) -> str:
        return await capabilities.review(self.code, self.context)

    @staticmethod
    def apply(results: SessionResults, output: str):
        results.review = output


@dataclass
class DesignWork:
    role: ClassVar[WorkerRole] = WorkerRole.DESIGNER
    requirements: str
    request: str

    @classmethod
    def from_session(cls, session: GenerationSession, task: Task) -> "DesignWork":
        return cls(requirements=task.description, request=session.user_request)

    async def run(self, capabilities: WorkerCapabilities) -> str:
        return await capabilities.design(self.requirements, self.request)

    @staticmethod
    def apply(results: SessionResults, output: str):
        results.design = output


@dataclass
class CoordinateWork:
    """Handled by the orchestrator itself; never touches the session"""
    role: ClassVar[WorkerRole] = WorkerRole.COORDINATOR

    @classmethod
    def from_session(cls, session: GenerationSession, task: Task) -> "CoordinateWork":
        return cls()

    async def run(self, capabilities: WorkerCapabilities) -> str:
        return COORDINATION_ACK

    @staticmethod
    def apply(results: SessionResults, output: Any):
        pass


RoleWork = Union[ArchitectWork, ImplementWork, ReviewWork, DesignWork, CoordinateWork]

WORK_TYPES: Dict[WorkerRole, Type] = {
    work_type.role: work_type
    for work_type in (ArchitectWork, ImplementWork, ReviewWork, DesignWork, CoordinateWork)
}

_unhandled = set(WorkerRole) - set(WORK_TYPES)
if _unhandled:
    raise RuntimeError(f"No work variant for roles: {sorted(role.value for role in _unhandled)}")


def work_for(session: GenerationSession, task: Task) -> RoleWork:
    """Build the work variant for a task from the session's current results"""
    return WORK_TYPES[task.assigned_role].from_session(session, task)
