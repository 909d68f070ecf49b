"""
Graph operations using NetworkX.

This module handles:
- Building the dependency graph from the store's tasks and dependency records
- Cycle detection for opt-in dependency validation
- A traversal order for the critical path passes that tolerates cycles
- Descendant lookup
"""

from typing import Iterable

import networkx as nx

from gantt.models import Task, Dependency


def build_graph(
    tasks: Iterable[Task],
    dependencies: Iterable[Dependency],
) -> nx.MultiDiGraph:
    """
    Build a NetworkX MultiDiGraph from tasks and dependency records.

    Returns a graph where:
    - Nodes are task IDs, in task insertion order, with the task on ``task``
    - Edges go from -> to, keyed by dependency ID, with the record on ``dependency``

    Several records may link the same pair of tasks, hence the multigraph.
    Records pointing at unknown tasks are skipped.
    """
    graph = nx.MultiDiGraph()

    for position, task in enumerate(tasks):
        graph.add_node(task.id, task=task, position=position)

    for dep in dependencies:
        if dep.from_id in graph and dep.to_id in graph:
            graph.add_edge(dep.from_id, dep.to_id, key=dep.id, dependency=dep)

    return graph


def detect_cycle(
    graph: nx.MultiDiGraph,
    new_from_id: str,
    new_to_id: str,
) -> bool:
    """
    Check if adding an edge (from -> to) would create a cycle.

    Algorithm:
    1. Copy the existing graph as a simple DiGraph
    2. Add the proposed edge
    3. Check for cycles using NetworkX

    Returns True if a cycle would be created, False otherwise.
    """
    candidate = nx.DiGraph(graph)
    candidate.add_edge(new_from_id, new_to_id)

    try:
        nx.find_cycle(candidate, source=new_from_id)
        return True
    except nx.NetworkXNoCycle:
        return False


def traversal_order(graph: nx.MultiDiGraph) -> list[str]:
    """
    Order task IDs so that, outside of cycles, every predecessor comes first.

    The graph is condensed into strongly connected components, which always
    form a DAG. Components are emitted in topological order, ties broken by
    task insertion order; members of a component (a cycle) are emitted in
    insertion order. For an acyclic graph this is a plain topological sort.
    """
    position = nx.get_node_attributes(graph, "position")
    condensed = nx.condensation(nx.DiGraph(graph))

    def component_key(component: int) -> int:
        return min(position[member] for member in condensed.nodes[component]["members"])

    order: list[str] = []
    for component in nx.lexicographical_topological_sort(condensed, key=component_key):
        members = condensed.nodes[component]["members"]
        order.extend(sorted(members, key=position.__getitem__))
    return order


def has_cycle(graph: nx.MultiDiGraph) -> bool:
    return not nx.is_directed_acyclic_graph(graph)


def get_descendants(graph: nx.MultiDiGraph, root_task_id: str) -> list[str]:
    """
    Get all task IDs downstream of a given root task.

    Returns an empty list for unknown tasks.
    """
    if root_task_id not in graph:
        return []

    return list(nx.descendants(graph, root_task_id))
