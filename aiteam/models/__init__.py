"""
aiteam 数据模型模块

包含所有数据结构定义：
- task: 任务相关模型
- artifacts: 生成产物模型
- session: 会话相关模型
- config / agent_config: 配置相关模型
"""

from .task import (
    WorkerRole, TaskPriority, TaskStatus, PlanComplexity, PRIORITY_ORDER,
    TaskDescriptor, TaskPlan, Task
)
from .artifacts import FileKind, GeneratedFile, StepByStepAnalysis, CodeBundle
from .session import SessionStatus, SessionResults, GenerationSession
from .config import SystemConfig
from .agent_config import OpenAIApiConfig, AgentModelConfig, MultiAgentConfig

__all__ = [
    # Task models
    "WorkerRole",
    "TaskPriority",
    "TaskStatus",
    "PlanComplexity",
    "PRIORITY_ORDER",
    "TaskDescriptor",
    "TaskPlan",
    "Task",

    # Artifact models
    "FileKind",
    "GeneratedFile",
    "StepByStepAnalysis",
    "CodeBundle",

    # Session models
    "SessionStatus",
    "SessionResults",
    "GenerationSession",

    # Config models
    "SystemConfig",
    "OpenAIApiConfig",
    "AgentModelConfig",
    "MultiAgentConfig",
]
