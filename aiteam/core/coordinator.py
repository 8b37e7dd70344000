"""
GenerationCoordinator - wires builder, scheduler and integrator per session
"""

import asyncio
import os
from typing import Dict, List, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from ..models import GenerationSession, MultiAgentConfig, SessionStatus, SystemConfig
from ..models.agent_config import AGENT_NAMES
from ..services.preview import LocalPreviewSandbox, PreviewSandbox
from ..utils.config import load_agent_config
from ..utils.exceptions import SessionNotFoundError
from ..utils.logging import get_logger, setup_logging
from .capabilities import WorkerCapabilities, create_openai_capabilities
from .events import EventBus, SessionStatusChanged
from .executor import ExecutionReport, TaskScheduler
from .integrator import ResultIntegrator
from .planner import TaskGraphBuilder
from .store import SessionStore


def feedback_augmented_request(request: str, feedback: str) -> str:
    return f"{request}\n\nUser feedback: {feedback}"


class GenerationCoordinator:
    """Session query surface: start, poll, regenerate"""

    def __init__(
        self,
        store: SessionStore,
        event_bus: EventBus,
        capabilities: WorkerCapabilities,
        builder: TaskGraphBuilder,
        scheduler: TaskScheduler,
        integrator: ResultIntegrator,
        config: SystemConfig,
        sandbox: Optional[PreviewSandbox] = None,
    ):
        self.store = store
        self.event_bus = event_bus
        self.capabilities = capabilities
        self.builder = builder
        self.scheduler = scheduler
        self.integrator = integrator
        self.config = config
        self.sandbox = sandbox
        self.logger = get_logger(__name__)

        self._passes: Dict[str, asyncio.Task] = {}
        self._restart_locks: Dict[str, asyncio.Lock] = {}
        self.last_reports: Dict[str, ExecutionReport] = {}

    async def _set_status(self, session_id: str, status: SessionStatus, error: Optional[str] = None):
        session = self.store.require(session_id)
        session.transition(status)
        if error is not None:
            session.error = error
        await self.event_bus.publish(SessionStatusChanged(
            session_id=session_id, status=status.value,
            generation=session.generation, error=error
        ))

    async def _run_pass(self, session_id: str) -> GenerationSession:
        """One full generation pass: plan, execute, integrate"""
        session = self.store.require(session_id)
        self.logger.info(f"[{session_id}] Generation pass {session.generation} started")
        await self.event_bus.publish(SessionStatusChanged(
            session_id=session_id, status=session.status.value, generation=session.generation
        ))

        try:
            await self.builder.build(session_id)
            await self._set_status(session_id, SessionStatus.EXECUTING)

            report = await self.scheduler.execute(session_id)
            self.last_reports[session_id] = report

            await self.integrator.integrate(session_id)
        except Exception as e:
            error_msg = str(e) or e.__class__.__name__
            self.logger.error(f"[{session_id}] Generation failed: {error_msg}")
            if self.store.require(session_id).status != SessionStatus.FAILED:
                await self._set_status(session_id, SessionStatus.FAILED, error=error_msg)
            raise

        await self.event_bus.publish(SessionStatusChanged(
            session_id=session_id, status=SessionStatus.COMPLETED.value,
            generation=self.store.require(session_id).generation
        ))
        self.logger.info(f"[{session_id}] Generation completed")
        return self.store.get(session_id)

    def _schedule(self, session_id: str) -> asyncio.Task:
        task = asyncio.create_task(self._run_pass(session_id))
        self._passes[session_id] = task
        task.add_done_callback(self._on_pass_done)
        return task

    def _on_pass_done(self, task: asyncio.Task):
        # Failures are already recorded on the session
        if not task.cancelled():
            task.exception()

    async def _await_pass(self, session_id: str):
        task = self._passes.get(session_id)
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    async def start_generation(self, user_request: str) -> str:
        """Create a session and run the pipeline in the background"""
        session = self.store.create(user_request)
        self._schedule(session.id)
        return session.id

    async def generate(self, user_request: str) -> GenerationSession:
        """Run the pipeline to completion; raises on failure"""
        session = self.store.create(user_request)
        return await self._schedule(session.id)

    async def regenerate_with_feedback(self, session_id: str, feedback: str,
                                       wait: bool = True) -> str:
        """
        Re-plan the session from scratch with the user's feedback appended.

        Args:
            session_id: Existing session
            feedback: Free-text feedback
            wait: run the new pass to completion instead of in the background

        Raises:
            SessionNotFoundError: unknown session
        """
        if session_id not in self.store:
            raise SessionNotFoundError(session_id)

        # One restart at a time per session; each waits for the pass before it
        lock = self._restart_locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            await self._await_pass(session_id)

            session = self.store.require(session_id)
            session.restart(feedback_augmented_request(session.user_request, feedback))
            self.store.mark_active(session_id)
            self.logger.info(f"[{session_id}] Regenerating with feedback (generation {session.generation})")

            task = self._schedule(session_id)

        if wait:
            await task
        return session_id

    def get_session(self, session_id: str) -> Optional[GenerationSession]:
        return self.store.get(session_id)

    def list_sessions(self) -> List[GenerationSession]:
        return self.store.list_sessions()

    def get_active_session(self) -> Optional[GenerationSession]:
        return self.store.active_session()

    async def wait_for_session(self, session_id: str, timeout: Optional[float] = None,
                               poll_interval: Optional[float] = None) -> GenerationSession:
        """
        Poll until the session reaches a terminal status.

        Gives up watching after ``timeout`` seconds and returns the latest
        snapshot; in-flight work keeps running.
        """
        timeout = self.config.poll_timeout if timeout is None else timeout
        poll_interval = self.config.poll_interval if poll_interval is None else poll_interval

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            session = self.store.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if session.status in (SessionStatus.COMPLETED, SessionStatus.FAILED):
                return session
            if loop.time() >= deadline:
                self.logger.warning(f"[{session_id}] Stopped watching after {timeout}s")
                return session
            await asyncio.sleep(poll_interval)

    async def shutdown(self):
        """Wait for background passes and release external resources"""
        pending = [task for task in self._passes.values() if not task.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if self.sandbox is not None:
            await self.sandbox.close()
        await self.capabilities.close()


class CoordinatorFactory:
    """系统协调器工厂"""

    @staticmethod
    def create_coordinator(
        config: Optional[SystemConfig] = None,
        agent_config: Optional[MultiAgentConfig] = None,
        agent_config_path: Optional[str] = None,
        openai_client: Optional[AsyncOpenAI] = None,
        capabilities: Optional[WorkerCapabilities] = None,
        sandbox: Optional[PreviewSandbox] = None,
        configure_logging: bool = True,
    ) -> GenerationCoordinator:
        """创建协调器实例"""

        # 加载环境变量
        load_dotenv(override=False)

        config = config or SystemConfig()
        if configure_logging:
            setup_logging(log_level=config.log_level, log_dir=config.log_dir)

        if capabilities is None:
            final_agent_config = agent_config or load_agent_config(agent_config_path)

            # 从环境变量覆盖模型
            openai_model = os.getenv("OPENAI_MODEL")
            if openai_model and agent_config is None:
                for name in AGENT_NAMES:
                    final_agent_config.for_agent(name).model_name = openai_model

            capabilities = create_openai_capabilities(final_agent_config, client=openai_client)

        if sandbox is None and config.preview_enabled:
            sandbox = LocalPreviewSandbox(config)

        store = SessionStore()
        event_bus = EventBus()

        return GenerationCoordinator(
            store=store,
            event_bus=event_bus,
            capabilities=capabilities,
            builder=TaskGraphBuilder(capabilities, store, config),
            scheduler=TaskScheduler(capabilities, store, event_bus, config),
            integrator=ResultIntegrator(capabilities, store, sandbox, event_bus, config),
            config=config,
            sandbox=sandbox,
        )
