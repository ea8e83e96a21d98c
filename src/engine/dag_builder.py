# src/engine/dag_builder.py — v2
"""DAG builder — build the static execution graph of a task application.

Produces a topologically staged execution plan from declared (static)
prerequisites. Dynamic dependencies are only known at invocation time and
are not part of the plan; the invocation chain covers them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from assetpipe.engine.invocation_chain import CycleError

logger = logging.getLogger(__name__)


@dataclass
class ExecutionPlan:
    """Ordered execution plan for pipeline tasks.

    stages is a list of "levels" — tasks within the same level have no
    mutual dependencies. Levels execute sequentially.
    """

    stages: list[list[str]] = field(default_factory=list)
    total_tasks: int = 0

    @property
    def flat_order(self) -> list[str]:
        """Return a flat topological ordering (no concurrency info)."""
        return [task for stage in self.stages for task in stage]


def build_graph(dependency_map: dict[str, list[str]]) -> nx.DiGraph:
    """Build a directed graph with an edge ``prerequisite -> task``.

    Prerequisites that are not keys of ``dependency_map`` are source files,
    not tasks, and are left out of the graph.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(dependency_map)
    for task, deps in dependency_map.items():
        for dep in deps:
            if dep in dependency_map:
                graph.add_edge(dep, task)
    return graph


def build_dag(dependency_map: dict[str, list[str]]) -> ExecutionPlan:
    """Build an execution DAG from task prerequisite declarations.

    Args:
        dependency_map: task_name -> list of prerequisite names.

    Returns:
        ExecutionPlan with staged execution order.

    Raises:
        CycleError: If the static prerequisites form a cycle.
    """
    if not dependency_map:
        return ExecutionPlan()

    graph = build_graph(dependency_map)

    try:
        cycle = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        cycle = None
    if cycle:
        path = [edge[0] for edge in cycle] + [cycle[-1][1]]
        raise CycleError(f"Circular dependency detected: {' => '.join(path)}")

    stages = [sorted(generation) for generation in nx.topological_generations(graph)]
    plan = ExecutionPlan(stages=stages, total_tasks=graph.number_of_nodes())
    logger.debug(
        "DAG built: %d tasks in %d stages",
        plan.total_tasks,
        len(plan.stages),
    )
    return plan
