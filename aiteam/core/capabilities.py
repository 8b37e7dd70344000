"""
Worker Capability Interface - one async request/response pair per role
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from ..models import AgentModelConfig, CodeBundle, MultiAgentConfig, OpenAIApiConfig, TaskPlan
from ..models.agent_config import AGENT_NAMES
from ..utils.exceptions import CapabilityError, ConfigurationError, PlanningError, SchemaError
from . import prompts

logger = logging.getLogger(__name__)


class WorkerCapabilities(ABC):
    """Opaque worker capabilities: given inputs, produce typed output or fail"""

    @abstractmethod
    async def plan(self, request: str) -> TaskPlan:
        """Decompose a request into a task plan; PlanningError on malformed output"""

    @abstractmethod
    async def architect(self, request: str, context: str) -> str:
        """Architecture text"""

    @abstractmethod
    async def implement(self, spec: str, architecture: str) -> CodeBundle:
        """Code bundle; SchemaError when the response has the wrong shape"""

    @abstractmethod
    async def review(self, code: str, context: str) -> str:
        """Review text"""

    @abstractmethod
    async def design(self, requirements: str, request: str) -> str:
        """Design text"""

    async def close(self):
        """Release provider resources"""


def extract_json(text: str) -> Dict[str, Any]:
    """Parse the JSON object embedded in a model reply"""
    json_start = text.find('{')
    json_end = text.rfind('}') + 1
    if json_start == -1 or json_end <= json_start:
        raise ValueError("No JSON object found in response")
    data = json.loads(text[json_start:json_end])
    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


class OpenAIWorkerCapabilities(WorkerCapabilities):
    """Capabilities backed by OpenAI-compatible chat completions, one model per role"""

    def __init__(self, clients: Dict[str, AsyncOpenAI], agent_config: MultiAgentConfig):
        missing = [name for name in AGENT_NAMES if name not in clients]
        if missing:
            raise ConfigurationError(f"Missing OpenAI clients for: {', '.join(missing)}")
        self.clients = clients
        self.agent_config = agent_config

    async def _complete(self, agent_name: str, prompt: str) -> str:
        model_config = self.agent_config.for_agent(agent_name)
        system_prompt = model_config.system_prompt or prompts.SYSTEM_PROMPTS[agent_name]

        request_kwargs: Dict[str, Any] = {
            "model": model_config.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": model_config.temperature,
        }
        if model_config.max_tokens is not None:
            request_kwargs["max_tokens"] = model_config.max_tokens
        if model_config.top_p is not None:
            request_kwargs["top_p"] = model_config.top_p
        if model_config.timeout is not None:
            request_kwargs["timeout"] = model_config.timeout

        logger.debug(f"{agent_name} request using model {model_config.model_name}")
        try:
            response = await self.clients[agent_name].chat.completions.create(**request_kwargs)
        except OpenAIError as e:
            raise CapabilityError(f"{agent_name} request failed: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise CapabilityError(f"{agent_name} returned no content")

        content = response.choices[0].message.content
        logger.debug(f"{agent_name} response length: {len(content)} characters")
        return content

    async def plan(self, request: str) -> TaskPlan:
        text = await self._complete("planner", prompts.plan_prompt(request))
        try:
            return TaskPlan.model_validate(extract_json(text))
        except (ValueError, ValidationError) as e:
            raise PlanningError(f"Malformed task plan: {str(e)}") from e

    async def architect(self, request: str, context: str) -> str:
        return await self._complete("architect", prompts.architecture_prompt(request, context))

    async def implement(self, spec: str, architecture: str) -> CodeBundle:
        text = await self._complete("implementer", prompts.implementation_prompt(spec, architecture))
        try:
            return CodeBundle.model_validate(extract_json(text))
        except (ValueError, ValidationError) as e:
            raise SchemaError(f"Implementation response does not match schema: {str(e)}") from e

    async def review(self, code: str, context: str) -> str:
        return await self._complete("reviewer", prompts.review_prompt(code, context))

    async def design(self, requirements: str, request: str) -> str:
        return await self._complete("designer", prompts.design_prompt(requirements, request))

    async def close(self):
        seen = set()
        for client in self.clients.values():
            if id(client) in seen:
                continue
            seen.add(id(client))
            await client.close()


def create_openai_client(agent_name: str, model_config: AgentModelConfig) -> AsyncOpenAI:
    """创建单个OpenAI客户端"""
    openai_config = model_config.openai_config or OpenAIApiConfig()

    if not openai_config.api_key:
        raise ConfigurationError(f"OPENAI_API_KEY is required for {agent_name}")

    client_kwargs: Dict[str, Any] = {
        'api_key': openai_config.api_key,
        'timeout': openai_config.timeout or 60,
        'max_retries': openai_config.max_retries if openai_config.max_retries is not None else 3,
    }
    if openai_config.base_url:
        client_kwargs['base_url'] = openai_config.base_url
    if openai_config.organization:
        client_kwargs['organization'] = openai_config.organization
    if openai_config.custom_headers:
        client_kwargs['default_headers'] = openai_config.custom_headers

    client = AsyncOpenAI(**client_kwargs)
    logger.debug(f"{agent_name} OpenAI client initialized")
    return client


def create_openai_capabilities(agent_config: MultiAgentConfig,
                               client: Optional[AsyncOpenAI] = None) -> OpenAIWorkerCapabilities:
    """Build capabilities with one client per role, or a shared client when given"""
    if client is not None:
        clients = {name: client for name in AGENT_NAMES}
    else:
        clients = {
            name: create_openai_client(name, agent_config.for_agent(name))
            for name in AGENT_NAMES
        }
    return OpenAIWorkerCapabilities(clients, agent_config)
