"""
Task related data models
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..utils.exceptions import InvalidTransitionError


class WorkerRole(str, Enum):
    """Worker roles a task can be assigned to"""
    ARCHITECT = "architect"
    IMPLEMENTER = "implementer"
    REVIEWER = "reviewer"
    DESIGNER = "designer"
    COORDINATOR = "coordinator"

    @classmethod
    def parse(cls, value: Any) -> "WorkerRole":
        """Accept enum values, enum names and the planner's legacy model names"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid worker role: {value!r}")
        key = value.strip().lower()
        if key in _ROLE_ALIASES:
            return _ROLE_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Invalid worker role: {value!r}")


_ROLE_ALIASES = {
    "engineer": WorkerRole.IMPLEMENTER,
    "implementation": WorkerRole.IMPLEMENTER,
    "review": WorkerRole.REVIEWER,
    "architecture": WorkerRole.ARCHITECT,
}


class TaskPriority(str, Enum):
    """Scheduling hint, not a dependency"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Buckets are dispatched in this order within a round
PRIORITY_ORDER = (TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW)


class TaskStatus(str, Enum):
    """Task execution status"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


class PlanComplexity(str, Enum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys for the presentation layer"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskDescriptor(ApiModel):
    """One task as returned by the planner"""
    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    role: WorkerRole = Field(
        ...,
        validation_alias=AliasChoices("role", "assignedModel", "assignedRole", "assigned_role"),
    )
    priority: TaskPriority = TaskPriority.MEDIUM
    dependencies: List[str] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, v):
        return WorkerRole.parse(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, v):
        if v is None:
            return []
        return [str(dep) for dep in v]


class TaskPlan(ApiModel):
    """Structured planner output"""
    overview: str = ""
    complexity: PlanComplexity = Field(
        default=PlanComplexity.MEDIUM,
        validation_alias=AliasChoices("complexity", "estimatedComplexity", "estimated_complexity"),
    )
    tasks: List[TaskDescriptor]

    @field_validator("complexity", mode="before")
    @classmethod
    def _parse_complexity(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Task(ApiModel):
    """Task node in a session's DAG"""
    id: str
    source_id: str = Field(..., description="Identifier as emitted by the planner")
    title: str
    description: str = ""
    assigned_role: WorkerRole
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    dependencies: List[str] = Field(default_factory=list)
    result: Optional[Any] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    def start(self):
        if self.status != TaskStatus.PENDING:
            raise InvalidTransitionError(f"Task {self.id} cannot start from {self.status.value}")
        self.status = TaskStatus.IN_PROGRESS
        self.started_at = datetime.now()

    def complete(self, result: Any):
        if self.status != TaskStatus.IN_PROGRESS:
            raise InvalidTransitionError(f"Task {self.id} cannot complete from {self.status.value}")
        self.status = TaskStatus.COMPLETED
        self.result = result
        self.finished_at = datetime.now()

    def fail(self, error: str):
        if self.status != TaskStatus.IN_PROGRESS:
            raise InvalidTransitionError(f"Task {self.id} cannot fail from {self.status.value}")
        self.status = TaskStatus.FAILED
        self.error = error
        self.finished_at = datetime.now()
