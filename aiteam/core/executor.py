"""
Executor - dependency and priority aware task scheduling
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Set

from ..models import PRIORITY_ORDER, SystemConfig, TaskStatus
from ..utils.exceptions import TaskExecutionError, UnsatisfiableGraphError
from ..utils.logging import get_logger
from .capabilities import WorkerCapabilities
from .events import EventBus, TaskCompleted, TaskFailed, TaskStarted
from .roles import work_for
from .store import SessionStore


@dataclass
class ExecutionReport:
    """What the scheduler dispatched, round by round"""
    rounds: List[List[List[str]]] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    def dispatch_order(self) -> List[str]:
        return [task_id for buckets in self.rounds for bucket in buckets for task_id in bucket]


class TaskScheduler:
    """
    Drains a session's task list in rounds.

    Each round computes the ready set (every dependency completed), splits it
    into high/medium/low buckets and runs the buckets strictly in that order.
    Tasks in one bucket run concurrently and the whole bucket settles before
    the next bucket starts. The first failure in a bucket aborts the run once
    the bucket has settled; running siblings are never cancelled.
    """

    def __init__(self, capabilities: WorkerCapabilities, store: SessionStore,
                 event_bus: EventBus, config: SystemConfig):
        self.capabilities = capabilities
        self.store = store
        self.event_bus = event_bus
        self.config = config
        self.logger = get_logger(__name__)

    async def execute(self, session_id: str) -> ExecutionReport:
        """
        Execute every task of the session according to dependencies and priority

        Args:
            session_id: Session whose task list is fixed

        Returns:
            ExecutionReport: dispatch log of the run

        Raises:
            TaskExecutionError: a task failed; the task carries the error message
            UnsatisfiableGraphError: tasks remain but none can become ready
        """
        session = self.store.require(session_id)
        queue: List[str] = [task.id for task in session.tasks if task.status == TaskStatus.PENDING]
        completed: Set[str] = {task.id for task in session.tasks if task.status == TaskStatus.COMPLETED}

        report = ExecutionReport()
        start_time = time.time()
        semaphore = asyncio.Semaphore(self.config.max_parallel_tasks)

        self.logger.info(f"[{session_id}] Executing {len(queue)} tasks")

        while queue:
            session = self.store.require(session_id)
            ready = [
                task_id for task_id in queue
                if all(dep in completed for dep in session.get_task(task_id).dependencies)
            ]

            if not ready:
                self.logger.error(f"[{session_id}] Unsatisfiable dependencies, pending: {queue}")
                raise UnsatisfiableGraphError(
                    f"No task can become ready; pending tasks: {', '.join(queue)}",
                    pending_task_ids=queue,
                )

            buckets_dispatched: List[List[str]] = []
            report.rounds.append(buckets_dispatched)

            for priority in PRIORITY_ORDER:
                bucket = [
                    task_id for task_id in ready
                    if self.store.require(session_id).get_task(task_id).priority == priority
                ]
                if not bucket:
                    continue

                buckets_dispatched.append(list(bucket))
                self.logger.debug(f"[{session_id}] Dispatching {priority.value} bucket: {bucket}")

                outcomes = await asyncio.gather(
                    *(self._execute_limited(semaphore, session_id, task_id) for task_id in bucket),
                    return_exceptions=True,
                )

                failure = None
                for task_id, outcome in zip(bucket, outcomes):
                    queue.remove(task_id)
                    if isinstance(outcome, BaseException):
                        if not isinstance(outcome, Exception):
                            raise outcome
                        failure = failure or outcome
                    else:
                        completed.add(task_id)
                        report.completed.append(task_id)

                if failure is not None:
                    report.elapsed = time.time() - start_time
                    if isinstance(failure, TaskExecutionError):
                        raise failure
                    raise TaskExecutionError(str(failure)) from failure

        report.elapsed = time.time() - start_time
        self.logger.info(
            f"[{session_id}] Execution finished: {len(report.completed)} tasks in "
            f"{report.round_count} rounds, {report.elapsed:.2f}s"
        )
        return report

    async def _execute_limited(self, semaphore: asyncio.Semaphore, session_id: str, task_id: str):
        async with semaphore:
            await self.execute_task(session_id, task_id)

    async def execute_task(self, session_id: str, task_id: str):
        """Run one task through the capability matching its role"""
        session = self.store.require(session_id)
        task = session.get_task(task_id)
        task.start()
        session.touch()

        role = task.assigned_role.value
        await self.event_bus.publish(TaskStarted(
            session_id=session_id, task_id=task_id, title=task.title, role=role
        ))
        self.logger.info(f"[{session_id}] {role} started: {task.title}")

        started = time.time()
        try:
            work = work_for(session, task)
            output = await work.run(self.capabilities)
        except Exception as e:
            duration = time.time() - started
            error_msg = str(e) or e.__class__.__name__

            session = self.store.require(session_id)
            task = session.get_task(task_id)
            task.fail(error_msg)
            session.touch()

            self.logger.error(f"[{session_id}] {role} failed: {task.title}: {error_msg}")
            await self.event_bus.publish(TaskFailed(
                session_id=session_id, task_id=task_id, title=task.title, role=role,
                error=error_msg, duration=duration
            ))
            raise TaskExecutionError(f"Task {task_id} ({role}) failed: {error_msg}", task_id) from e

        duration = time.time() - started
        session = self.store.require(session_id)
        task = session.get_task(task_id)
        work.apply(session.results, output)
        task.complete(output)
        session.touch()

        self.logger.info(f"[{session_id}] {role} completed: {task.title} in {duration:.2f}s")
        await self.event_bus.publish(TaskCompleted(
            session_id=session_id, task_id=task_id, title=task.title, role=role, duration=duration
        ))
