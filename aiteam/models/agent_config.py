"""
智能体配置相关数据模型
"""

from typing import Optional, Dict
from pydantic import BaseModel, Field


class OpenAIApiConfig(BaseModel):
    """OpenAI API配置"""
    api_key: Optional[str] = Field(default=None, description="OpenAI API密钥")
    base_url: Optional[str] = Field(default=None, description="API base URL, any OpenAI-compatible endpoint")
    organization: Optional[str] = Field(default=None, description="OpenAI组织ID")
    timeout: Optional[int] = Field(default=60, ge=1, description="请求超时时间（秒）")
    max_retries: Optional[int] = Field(default=3, ge=0, description="最大重试次数")
    custom_headers: Optional[Dict[str, str]] = Field(default=None, description="自定义请求头")


class AgentModelConfig(BaseModel):
    """单个智能体的模型配置"""
    model_name: str = Field(..., description="模型名称")
    temperature: float = Field(default=0.6, ge=0.0, le=2.0, description="温度参数")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="最大令牌数")
    top_p: Optional[float] = Field(default=1.0, ge=0.0, le=1.0, description="Top-p采样")
    timeout: Optional[int] = Field(default=60, ge=1, description="请求超时时间（秒）")
    system_prompt: Optional[str] = Field(default=None, description="Overrides the built-in role prompt")
    openai_config: Optional[OpenAIApiConfig] = Field(default=None, description="OpenAI API配置")


AGENT_NAMES = ("planner", "architect", "implementer", "reviewer", "designer")


class MultiAgentConfig(BaseModel):
    """Model configuration for every worker capability"""
    planner: AgentModelConfig
    architect: AgentModelConfig
    implementer: AgentModelConfig
    reviewer: AgentModelConfig
    designer: AgentModelConfig

    def for_agent(self, agent_name: str) -> AgentModelConfig:
        if agent_name not in AGENT_NAMES:
            raise KeyError(f"Unknown agent: {agent_name}")
        return getattr(self, agent_name)
