"""
Critical Path Method (CPM) implementation over a working-day calendar.

Calculates:
- Forward pass: Earliest Start (ES), Earliest Finish (EF)
- Backward pass: Latest Start (LS), Latest Finish (LF)
- Slack/Float: LS - ES in calendar days
- Critical Path: Tasks where ES == LS and EF == LF

Dependency types (lag in working days, may be negative):
- finish-to-start:  successor starts lag+1 working days after predecessor EF
- start-to-start:   successor starts lag working days after predecessor ES
- finish-to-finish: successor finishes lag working days after predecessor EF
- start-to-finish:  successor starts lag+1 working days before predecessor ES

Tasks without predecessors start on their start date, moved forward to the
next working day when it falls on a weekend or holiday.

Cycles are tolerated: inside a strongly connected component, an edge from a
task that has not been processed yet is ignored.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

import networkx as nx

from gantt.models import Task, Dependency
from gantt.services.calendar import CalendarService
from gantt.services.graph import build_graph, traversal_order, has_cycle
from gantt.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class TaskAnalysis:
    """Analysis results for a single task."""
    task_id: str
    name: str
    duration: int
    # Forward pass results
    early_start: date
    early_finish: date
    # Backward pass results
    late_start: date
    late_finish: date
    # Slack
    slack: int  # Days of slack (0 = critical)
    is_critical: bool


@dataclass
class ScheduleAnalysis:
    """Complete CPM analysis for the store's graph."""
    project_end_date: date | None  # Latest early finish
    task_analyses: list[TaskAnalysis] = field(default_factory=list)
    critical_path: list[Task] = field(default_factory=list)
    has_cycle: bool = False


class CriticalPathAnalyzer:
    """
    Runs the CPM passes and writes the results onto the given Task objects.

    The store hands over its own tasks, so ``analyze`` is the one place where
    derived scheduling fields change.
    """

    def __init__(self, calendar: CalendarService):
        self.calendar = calendar

    def analyze(
        self,
        tasks: Iterable[Task],
        dependencies: Iterable[Dependency],
    ) -> ScheduleAnalysis:
        graph = build_graph(tasks, dependencies)
        if graph.number_of_nodes() == 0:
            return ScheduleAnalysis(project_end_date=None)

        cyclic = has_cycle(graph)
        if cyclic:
            logger.warning("Dependency cycle present; scheduling with traversal guards")

        order = traversal_order(graph)
        self.calculate_early_dates(graph, order)
        self.calculate_late_dates(graph, order)
        self.identify_critical_tasks(graph)
        self.calculate_slack(graph)
        critical_path = self.critical_path(graph)

        project_tasks = [graph.nodes[n]["task"] for n in graph.nodes]
        logger.debug(
            f"CPM recomputed: {len(project_tasks)} tasks, "
            f"{graph.number_of_edges()} dependencies, {len(critical_path)} critical"
        )

        return ScheduleAnalysis(
            project_end_date=max(t.early_finish for t in project_tasks),
            task_analyses=[self._task_analysis(t) for t in project_tasks],
            critical_path=critical_path,
            has_cycle=cyclic,
        )

    # =========================================================================
    # Forward Pass: Calculate ES and EF
    # =========================================================================

    def calculate_early_dates(self, graph: nx.MultiDiGraph, order: list[str]) -> None:
        processed: set[str] = set()

        for task_id in order:
            task = graph.nodes[task_id]["task"]
            candidates = [
                self._early_start_from(graph.nodes[pred_id]["task"], task, dep)
                for pred_id, _, dep in graph.in_edges(task_id, data="dependency")
                if pred_id in processed
            ]

            # No (processed) predecessors - start on the stored date, or the
            # first working day after it
            if candidates:
                early_start = max(candidates)
            else:
                early_start = self.calendar.next_working_day(task.start_date)

            task.early_start = early_start
            task.early_finish = self.calendar.add_working_days(early_start, task.duration - 1)
            processed.add(task_id)

    def _early_start_from(self, pred: Task, succ: Task, dep: Dependency) -> date:
        cal = self.calendar
        if dep.type == "start-to-start":
            return cal.add_working_days(pred.early_start, dep.lag)
        if dep.type == "finish-to-finish":
            finish = cal.add_working_days(pred.early_finish, dep.lag)
            return cal.subtract_working_days(finish, succ.duration - 1)
        if dep.type == "start-to-finish":
            return cal.subtract_working_days(pred.early_start, dep.lag + 1)
        return cal.add_working_days(pred.early_finish, dep.lag + 1)

    # =========================================================================
    # Backward Pass: Calculate LF and LS
    # =========================================================================

    def calculate_late_dates(self, graph: nx.MultiDiGraph, order: list[str]) -> None:
        processed: set[str] = set()

        for task_id in reversed(order):
            task = graph.nodes[task_id]["task"]
            candidates = [
                self._late_finish_from(task, graph.nodes[succ_id]["task"], dep)
                for _, succ_id, dep in graph.out_edges(task_id, data="dependency")
                if succ_id in processed
            ]

            # End tasks keep their early finish
            task.late_finish = min(candidates) if candidates else task.early_finish
            task.late_start = self.calendar.subtract_working_days(task.late_finish, task.duration - 1)
            processed.add(task_id)

    def _late_finish_from(self, pred: Task, succ: Task, dep: Dependency) -> date:
        cal = self.calendar
        if dep.type == "start-to-start":
            late_start = cal.subtract_working_days(succ.late_start, dep.lag)
            return cal.add_working_days(late_start, pred.duration - 1)
        if dep.type == "finish-to-finish":
            return cal.subtract_working_days(succ.late_finish, dep.lag)
        if dep.type == "start-to-finish":
            late_start = cal.add_working_days(succ.late_start, dep.lag + 1)
            return cal.add_working_days(late_start, pred.duration - 1)
        return cal.subtract_working_days(succ.late_start, dep.lag + 1)

    # =========================================================================
    # Slack and Critical Path
    # =========================================================================

    def identify_critical_tasks(self, graph: nx.MultiDiGraph) -> None:
        for task_id in graph.nodes:
            task = graph.nodes[task_id]["task"]
            task.is_critical = (
                task.early_start == task.late_start
                and task.early_finish == task.late_finish
            )

    def calculate_slack(self, graph: nx.MultiDiGraph) -> None:
        for task_id in graph.nodes:
            task = graph.nodes[task_id]["task"]
            task.slack = (task.late_start - task.early_start).days

    def critical_path(self, graph: nx.MultiDiGraph) -> list[Task]:
        """Critical tasks by early start; ties keep insertion order."""
        critical = [graph.nodes[n]["task"] for n in graph.nodes if graph.nodes[n]["task"].is_critical]
        return sorted(critical, key=lambda t: t.early_start)

    @staticmethod
    def _task_analysis(task: Task) -> TaskAnalysis:
        return TaskAnalysis(
            task_id=task.id,
            name=task.name,
            duration=task.duration,
            early_start=task.early_start,
            early_finish=task.early_finish,
            late_start=task.late_start,
            late_finish=task.late_finish,
            slack=task.slack,
            is_critical=task.is_critical,
        )
