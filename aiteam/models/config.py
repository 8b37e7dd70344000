"""
配置相关数据模型
"""

from typing import Optional
from pydantic import BaseModel, Field


class SystemConfig(BaseModel):
    """System configuration"""
    max_parallel_tasks: int = Field(default=4, ge=1, description="Maximum tasks running at once within a bucket")
    validate_task_graph: bool = Field(default=True, description="Reject dangling or cyclic dependencies at planning time")
    preview_enabled: bool = Field(default=True, description="Hand the file manifest to the preview sandbox")
    preview_autostart: bool = Field(default=False, description="Install dependencies and start the dev server after materializing")
    sandbox_dir: str = Field(default="data/sandbox", description="Working directory for preview projects")
    sandbox_project_name: str = Field(default="ai-generated-app", description="Name of the scaffolded preview project")
    dev_server_port: int = Field(default=3000, ge=1, le=65535, description="Port the preview dev server listens on")
    ready_fallback_seconds: float = Field(default=5.0, gt=0, description="Seconds before probing the dev server port directly")
    server_start_timeout: float = Field(default=120.0, gt=0, description="Give up waiting for the dev server after this many seconds")
    poll_interval: float = Field(default=1.0, gt=0, description="Session polling interval in seconds")
    poll_timeout: float = Field(default=300.0, gt=0, description="Wall-clock limit for watching a session")
    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: Optional[str] = Field(default="data/logs", description="Log directory, None for console only")
