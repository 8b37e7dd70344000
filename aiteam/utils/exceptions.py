"""
自定义异常类
"""

from typing import Iterable, Optional


class AITeamError(Exception):
    """AI team orchestration base exception"""
    pass


class ConfigurationError(AITeamError):
    """配置错误异常"""
    pass


class CapabilityError(AITeamError):
    """Worker capability failed (timeout, transport failure, provider error)"""
    pass


class PlanningError(CapabilityError):
    """Planner output missing, malformed or not a DAG"""
    pass


class SchemaError(CapabilityError):
    """Structured worker response did not match the expected shape"""
    pass


class TaskExecutionError(AITeamError):
    """A single task's capability invocation failed"""

    def __init__(self, message: str, task_id: Optional[str] = None):
        super().__init__(message)
        self.task_id = task_id


class UnsatisfiableGraphError(AITeamError):
    """No task is ready while the queue is non-empty"""

    def __init__(self, message: str, pending_task_ids: Iterable[str] = ()):
        super().__init__(message)
        self.pending_task_ids = list(pending_task_ids)


class IntegrationError(AITeamError):
    """Post-execution reconciliation failed"""
    pass


class SessionNotFoundError(AITeamError):
    """会话不存在"""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidTransitionError(AITeamError):
    """Status lifecycle would move backwards"""
    pass


class PreviewError(AITeamError):
    """Preview sandbox failure"""
    pass


class InstallError(PreviewError):
    """Dependency installation exited with a non-zero code"""

    def __init__(self, exit_code: int, output: str = ""):
        super().__init__(f"Install failed with exit code {exit_code}")
        self.exit_code = exit_code
        self.output = output
