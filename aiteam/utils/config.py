"""
配置工具模块
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..models.config import SystemConfig
from ..models.agent_config import AGENT_NAMES, MultiAgentConfig, AgentModelConfig, OpenAIApiConfig
from .exceptions import ConfigurationError


DEFAULT_MODEL = "gpt-4o-mini"

_INT_KEYS = ("max_parallel_tasks", "dev_server_port")
_FLOAT_KEYS = ("ready_fallback_seconds", "poll_interval", "poll_timeout")
_BOOL_KEYS = ("preview_enabled", "preview_autostart", "validate_task_graph")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(config_path: Optional[str] = None) -> SystemConfig:
    """
    加载系统配置

    Args:
        config_path: JSON配置文件路径，可选

    Returns:
        SystemConfig实例

    Raises:
        ConfigurationError: 配置加载失败
    """
    try:
        load_dotenv(override=False)

        config_data = {}

        if config_path and Path(config_path).exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data.update(json.load(f))

        # 从环境变量覆盖
        env_mappings = {
            'AITEAM_MAX_PARALLEL_TASKS': 'max_parallel_tasks',
            'AITEAM_VALIDATE_GRAPH': 'validate_task_graph',
            'AITEAM_PREVIEW': 'preview_enabled',
            'AITEAM_PREVIEW_AUTOSTART': 'preview_autostart',
            'AITEAM_SANDBOX_DIR': 'sandbox_dir',
            'AITEAM_DEV_SERVER_PORT': 'dev_server_port',
            'AITEAM_POLL_INTERVAL': 'poll_interval',
            'AITEAM_POLL_TIMEOUT': 'poll_timeout',
            'AITEAM_READY_FALLBACK_SECONDS': 'ready_fallback_seconds',
            'AITEAM_LOG_LEVEL': 'log_level',
            'AITEAM_LOG_DIR': 'log_dir',
        }

        for env_key, config_key in env_mappings.items():
            env_value = os.getenv(env_key)
            if env_value is None:
                continue
            if config_key in _INT_KEYS:
                config_data[config_key] = int(env_value)
            elif config_key in _FLOAT_KEYS:
                config_data[config_key] = float(env_value)
            elif config_key in _BOOL_KEYS:
                config_data[config_key] = _parse_bool(env_value)
            else:
                config_data[config_key] = env_value

        return SystemConfig(**config_data)

    except Exception as e:
        raise ConfigurationError(f"Failed to load system configuration: {str(e)}") from e


def get_default_agent_config(model_name: Optional[str] = None) -> MultiAgentConfig:
    """
    获取默认智能体配置

    Returns:
        MultiAgentConfig实例
    """
    model = model_name or DEFAULT_MODEL
    return MultiAgentConfig(
        planner=AgentModelConfig(model_name=model, temperature=0.3, max_tokens=2048, timeout=60),
        architect=AgentModelConfig(model_name=model, temperature=0.6, max_tokens=2048, timeout=90),
        implementer=AgentModelConfig(model_name=model, temperature=0.6, max_tokens=4096, timeout=120),
        reviewer=AgentModelConfig(model_name=model, temperature=0.6, max_tokens=2048, timeout=90),
        designer=AgentModelConfig(model_name=model, temperature=0.7, max_tokens=2048, timeout=60),
    )


def load_agent_config(config_path: Optional[str] = None) -> MultiAgentConfig:
    """
    加载智能体模型配置

    Args:
        config_path: 智能体配置文件路径

    Returns:
        MultiAgentConfig实例

    Raises:
        ConfigurationError: 配置加载失败
    """
    try:
        load_dotenv(override=False)

        if not config_path or not Path(config_path).exists():
            return _apply_env_overrides(get_default_agent_config(os.getenv("OPENAI_MODEL")))

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)

        # 没有单独OpenAI配置的智能体使用全局配置
        global_openai_config = config_data.pop('global_openai_config', {})
        for agent_name in AGENT_NAMES:
            if agent_name in config_data and 'openai_config' not in config_data[agent_name]:
                if global_openai_config:
                    config_data[agent_name]['openai_config'] = dict(global_openai_config)

        return _apply_env_overrides(MultiAgentConfig(**config_data))

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load agent configuration: {str(e)}") from e


def _apply_env_overrides(agent_config: MultiAgentConfig) -> MultiAgentConfig:
    """
    应用环境变量覆盖配置（仅在配置文件中缺少配置时使用）

    Agent specific variables (OPENAI_API_KEY_PLANNER, ...) win over the
    global ones.
    """
    for agent_name in AGENT_NAMES:
        agent = agent_config.for_agent(agent_name)

        if not agent.openai_config:
            agent.openai_config = OpenAIApiConfig()

        openai_config = agent.openai_config
        suffix = agent_name.upper()

        if not openai_config.api_key:
            openai_config.api_key = os.getenv(f"OPENAI_API_KEY_{suffix}") or os.getenv("OPENAI_API_KEY")

        if not openai_config.base_url:
            openai_config.base_url = os.getenv(f"OPENAI_API_BASE_{suffix}") or os.getenv("OPENAI_API_BASE")

        if not openai_config.organization:
            openai_config.organization = (
                os.getenv(f"OPENAI_ORGANIZATION_{suffix}") or os.getenv("OPENAI_ORGANIZATION")
            )

    return agent_config
