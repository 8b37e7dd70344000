"""
会话相关数据模型
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from ..utils.exceptions import InvalidTransitionError
from .artifacts import CodeBundle, GeneratedFile
from .task import ApiModel, PlanComplexity, Task, TaskStatus


class SessionStatus(str, Enum):
    """Session lifecycle status"""
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


# Forward-only moves; restart() is the only way back to PLANNING
_ALLOWED_TRANSITIONS = {
    SessionStatus.PLANNING: {SessionStatus.EXECUTING, SessionStatus.FAILED},
    SessionStatus.EXECUTING: {SessionStatus.COMPLETED, SessionStatus.FAILED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.FAILED: set(),
}


class SessionResults(ApiModel):
    """Named partial artifacts accumulated during a generation pass"""
    architecture: Optional[str] = None
    code: Optional[CodeBundle] = None
    review: Optional[str] = None
    design: Optional[str] = None
    files: Optional[List[GeneratedFile]] = None

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


def new_session_id() -> str:
    return f"session-{uuid.uuid4().hex}"


class GenerationSession(ApiModel):
    """One end-to-end generation attempt tied to one user request"""
    id: str = Field(default_factory=new_session_id)
    user_request: str
    generation: int = Field(default=1, ge=1, description="Generation pass counter")
    tasks: List[Task] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.PLANNING
    results: SessionResults = Field(default_factory=SessionResults)
    overview: Optional[str] = None
    complexity: Optional[PlanComplexity] = None
    preview_url: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def touch(self):
        self.updated_at = datetime.now()

    def transition(self, status: SessionStatus):
        if status == self.status:
            return
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Session {self.id} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status
        self.touch()

    def restart(self, user_request: str):
        """Start a fresh generation pass: discard tasks and results, back to planning"""
        self.user_request = user_request
        self.generation += 1
        self.tasks = []
        self.results = SessionResults()
        self.overview = None
        self.complexity = None
        self.preview_url = None
        self.error = None
        self.status = SessionStatus.PLANNING
        self.touch()

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def task_counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in TaskStatus}
        for task in self.tasks:
            counts[task.status.value] += 1
        return counts

    def failed_tasks(self) -> List[Task]:
        return [task for task in self.tasks if task.status == TaskStatus.FAILED]
