"""
aiteam 工具模块

包含各种工具函数：
- logging: 日志工具
- exceptions: 自定义异常
- config: 配置加载
"""

from .logging import setup_logging, get_logger
from .exceptions import (
    AITeamError, ConfigurationError, CapabilityError, PlanningError, SchemaError,
    TaskExecutionError, UnsatisfiableGraphError, IntegrationError,
    SessionNotFoundError, InvalidTransitionError, PreviewError, InstallError
)

__all__ = [
    "setup_logging",
    "get_logger",
    "AITeamError",
    "ConfigurationError",
    "CapabilityError",
    "PlanningError",
    "SchemaError",
    "TaskExecutionError",
    "UnsatisfiableGraphError",
    "IntegrationError",
    "SessionNotFoundError",
    "InvalidTransitionError",
    "PreviewError",
    "InstallError",
]
