"""
Task Graph Builder - turns the planner's task list into a session DAG
"""

from typing import Dict, List

import networkx as nx

from ..models import GenerationSession, SystemConfig, Task, TaskPlan
from ..utils.exceptions import PlanningError
from ..utils.logging import get_logger
from .capabilities import WorkerCapabilities
from .store import SessionStore


def namespaced_id(generation: int, source_id: str) -> str:
    return f"g{generation}-{source_id}"


def dependency_graph(tasks: List[Task]) -> nx.DiGraph:
    """Edges point from a dependency to the task that waits on it"""
    graph = nx.DiGraph()
    graph.add_nodes_from(task.id for task in tasks)
    for task in tasks:
        for dep in task.dependencies:
            graph.add_edge(dep, task.id)
    return graph


def validate_task_graph(tasks: List[Task]):
    """
    Reject task lists the scheduler could never drain.

    Raises:
        PlanningError: dangling dependency ids or a dependency cycle
    """
    known_ids = {task.id for task in tasks}
    dangling = {
        task.id: [dep for dep in task.dependencies if dep not in known_ids]
        for task in tasks
    }
    dangling = {task_id: deps for task_id, deps in dangling.items() if deps}
    if dangling:
        details = "; ".join(f"{task_id} -> {', '.join(deps)}" for task_id, deps in dangling.items())
        raise PlanningError(f"Task plan references unknown dependencies: {details}")

    graph = dependency_graph(tasks)
    if not nx.is_directed_acyclic_graph(graph):
        cycle = nx.find_cycle(graph)
        path = " -> ".join([edge[0] for edge in cycle] + [cycle[-1][1]])
        raise PlanningError(f"Task plan contains a dependency cycle: {path}")


class TaskGraphBuilder:
    """Calls the planner once and normalizes its output into pending tasks"""

    def __init__(self, capabilities: WorkerCapabilities, store: SessionStore, config: SystemConfig):
        self.capabilities = capabilities
        self.store = store
        self.config = config
        self.logger = get_logger(__name__)

    def normalize(self, plan: TaskPlan, generation: int) -> List[Task]:
        """
        Convert planner descriptors into Task entities for one generation pass.

        Ids are namespaced with the generation number and duplicate
        dependencies are dropped. Self and unknown dependencies are kept
        (namespaced) so validation can report them.
        """
        if not plan.tasks:
            raise PlanningError("Planner returned no tasks")

        id_map: Dict[str, str] = {}
        for descriptor in plan.tasks:
            if descriptor.id in id_map:
                raise PlanningError(f"Duplicate task id in plan: {descriptor.id}")
            id_map[descriptor.id] = namespaced_id(generation, descriptor.id)

        tasks = []
        for descriptor in plan.tasks:
            dependencies: List[str] = []
            for dep in descriptor.dependencies:
                mapped = id_map.get(dep, namespaced_id(generation, dep))
                if mapped not in dependencies:
                    dependencies.append(mapped)

            tasks.append(Task(
                id=id_map[descriptor.id],
                source_id=descriptor.id,
                title=descriptor.title,
                description=descriptor.description,
                assigned_role=descriptor.role,
                priority=descriptor.priority,
                dependencies=dependencies,
            ))
        return tasks

    async def build(self, session_id: str) -> List[Task]:
        """
        Plan the session's request and replace its task list.

        Args:
            session_id: Session to plan

        Returns:
            List[Task]: the new pending task list

        Raises:
            PlanningError: malformed, empty or cyclic plan
            CapabilityError: planner call failed
        """
        session = self.store.require(session_id)
        request, generation = session.user_request, session.generation
        self.logger.info(f"[{session_id}] Planning generation {generation}: {request[:100]}")

        plan = await self.capabilities.plan(request)
        tasks = self.normalize(plan, generation)
        if self.config.validate_task_graph:
            validate_task_graph(tasks)

        session: GenerationSession = self.store.require(session_id)
        session.tasks = tasks
        session.overview = plan.overview
        session.complexity = plan.complexity
        self.store.touch(session_id)

        self.logger.info(
            f"[{session_id}] Plan ready: {len(tasks)} tasks, complexity {plan.complexity.value}"
        )
        return tasks
