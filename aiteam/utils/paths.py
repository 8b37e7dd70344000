"""
项目路径配置模块
"""

from pathlib import Path
from typing import Optional


class ProjectPaths:
    """Central place for the directories the runtime writes to"""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            self.base_dir = Path.cwd()
        else:
            self.base_dir = Path(base_dir)

    @property
    def data_dir(self) -> Path:
        """数据目录"""
        return self.base_dir / "data"

    @property
    def logs_dir(self) -> Path:
        """日志目录"""
        return self.data_dir / "logs"

    @property
    def sandbox_dir(self) -> Path:
        """Preview sandbox workspaces"""
        return self.data_dir / "sandbox"

    @property
    def config_dir(self) -> Path:
        """配置目录"""
        return self.base_dir / "config"

    @property
    def system_config_path(self) -> str:
        return str(self.config_dir / "system.json")

    @property
    def agent_models_config_path(self) -> str:
        """智能体模型配置文件路径"""
        return str(self.config_dir / "agent_models.json")

    def ensure_directories(self):
        """确保所有必要的目录存在"""
        for directory in (self.data_dir, self.logs_dir, self.sandbox_dir):
            directory.mkdir(parents=True, exist_ok=True)


def get_project_paths(base_dir: Optional[Path] = None) -> ProjectPaths:
    """获取项目路径配置实例"""
    return ProjectPaths(base_dir)
