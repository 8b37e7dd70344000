"""
Generated artifact models
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .task import ApiModel


class FileKind(str, Enum):
    COMPONENT = "component"
    PAGE = "page"
    UTILITY = "utility"
    STYLE = "style"
    CONFIG = "config"


class GeneratedFile(ApiModel):
    """One entry of the file manifest"""
    path: str = Field(..., min_length=1)
    content: str
    type: FileKind = FileKind.COMPONENT


class StepByStepAnalysis(ApiModel):
    problem_analysis: str
    solution_design: str
    implementation_plan: str
    considerations: List[str] = Field(default_factory=list)


class CodeBundle(ApiModel):
    """Implementer output"""
    files: List[GeneratedFile]
    dependencies: List[str]
    instructions: str
    reasoning: str
    step_by_step_analysis: Optional[StepByStepAnalysis] = None
