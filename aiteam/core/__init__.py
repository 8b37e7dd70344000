"""
aiteam 核心模块

包含系统的核心组件：
- coordinator: 生成协调器
- planner: 任务图构建器
- executor: 任务调度器
- integrator: 结果整合器
- cli / http_api: 命令行与HTTP界面
"""

from .coordinator import GenerationCoordinator, CoordinatorFactory
from .planner import TaskGraphBuilder
from .executor import TaskScheduler, ExecutionReport
from .integrator import ResultIntegrator
from .store import SessionStore
from .events import EventBus
from .capabilities import WorkerCapabilities, OpenAIWorkerCapabilities

__all__ = [
    "GenerationCoordinator",
    "CoordinatorFactory",
    "TaskGraphBuilder",
    "TaskScheduler",
    "ExecutionReport",
    "ResultIntegrator",
    "SessionStore",
    "EventBus",
    "WorkerCapabilities",
    "OpenAIWorkerCapabilities",
]
