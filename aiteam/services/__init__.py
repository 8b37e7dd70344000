"""
aiteam 服务模块

包含外部协作组件：
- preview: 预览沙箱适配器
- project_template: 预览项目脚手架
"""

from .preview import PreviewSandbox, LocalPreviewSandbox
from .project_template import react_project_files, merge_manifest

__all__ = [
    "PreviewSandbox",
    "LocalPreviewSandbox",
    "react_project_files",
    "merge_manifest",
]
