"""
Critical path scheduling through the task store.

All dates are in January 2024; the 1st is a Monday.
"""

from datetime import date

import pytest

from gantt.services.calendar import CalendarService
from gantt.services.critical_path import CriticalPathAnalyzer
from gantt.services.graph import build_graph, traversal_order, get_descendants


def d(day: int) -> date:
    return date(2024, 1, day)


class TestForwardPass:

    def test_task_without_dependencies_starts_on_its_start_date(self, add_task):
        task = add_task("Solo", d(3), d(5))

        assert task.early_start == d(3)
        assert task.early_finish == d(5)
        assert task.slack == 0

    def test_chain_is_fully_critical(self, store, add_task):
        a = add_task("A", d(1), d(5))
        b = add_task("B", d(8), d(10))
        c = add_task("C", d(11), d(12))
        store.add_dependency(a.id, b.id)
        store.add_dependency(b.id, c.id)

        assert [t.id for t in store.get_critical_path()] == [a.id, b.id, c.id]
        assert b.early_start == store.calendar.add_working_days(a.early_finish, 1)
        assert c.early_start == d(11)

    def test_finish_to_start_over_weekend(self, store, add_task):
        a = add_task("A", d(1), d(5))
        b = add_task("B", d(8), d(10))
        store.add_dependency(a.id, b.id, "finish-to-start")

        assert a.is_critical and b.is_critical
        assert [t.id for t in store.get_critical_path()] == [a.id, b.id]
        assert b.slack == 0
        assert b.early_start == d(8)

    def test_successor_is_pushed_past_predecessor(self, store, add_task):
        a = add_task("A", d(1), d(5))
        b = add_task("B", d(1), d(3))
        store.add_dependency(a.id, b.id)

        # B's own dates are kept; the early dates carry the constraint
        assert b.start_date == d(1)
        assert b.early_start == d(8)
        assert b.early_finish == d(10)

    def test_diamond_waits_for_longest_branch(self, store, add_task):
        # D is inserted before the branches that constrain it
        a = add_task("A", d(1), d(5))
        end = add_task("D", d(1), d(1))
        long_branch = add_task("B", d(8), d(12))
        short_branch = add_task("C", d(8), d(9))
        store.add_dependency(a.id, long_branch.id)
        store.add_dependency(a.id, short_branch.id)
        store.add_dependency(long_branch.id, end.id)
        store.add_dependency(short_branch.id, end.id)

        assert end.early_start == d(15)
        assert short_branch.late_start == d(11)
        assert short_branch.slack == 3
        assert not short_branch.is_critical
        assert [t.id for t in store.get_critical_path()] == [a.id, long_branch.id, end.id]


class TestDependencyTypes:

    @pytest.fixture
    def predecessor(self, add_task):
        return add_task("Pred", d(1), d(5))

    def test_start_to_start_with_lag(self, store, add_task, predecessor):
        succ = add_task("Succ", d(1), d(3))
        store.add_dependency(predecessor.id, succ.id, "start-to-start", lag=2)

        assert succ.early_start == d(3)

    def test_finish_to_finish(self, store, add_task, predecessor):
        succ = add_task("Succ", d(1), d(3))
        store.add_dependency(predecessor.id, succ.id, "finish-to-finish")

        assert succ.early_finish == d(5)
        assert succ.early_start == d(3)

    def test_start_to_finish(self, store, add_task):
        pred = add_task("Pred", d(8), d(12))
        succ = add_task("Succ", d(1), d(2))
        store.add_dependency(pred.id, succ.id, "start-to-finish")

        assert succ.early_start == d(5)

    def test_negative_lag_overlaps(self, store, add_task, predecessor):
        succ = add_task("Succ", d(8), d(10))
        store.add_dependency(predecessor.id, succ.id, lag=-1)

        assert succ.early_start == d(5)

    def test_positive_lag_delays(self, store, add_task, predecessor):
        succ = add_task("Succ", d(8), d(10))
        store.add_dependency(predecessor.id, succ.id, lag=2)

        assert succ.early_start == d(10)


class TestCriticality:

    def test_independent_tasks_are_all_critical(self, store, add_task):
        a = add_task("A", d(1), d(5))
        b = add_task("B", d(8), d(9))

        assert a.is_critical and b.is_critical
        assert len(store.get_critical_path()) == 2

    def test_critical_path_sorted_by_early_start(self, store, add_task):
        late = add_task("Late", d(10), d(11))
        early = add_task("Early", d(1), d(2))

        assert [t.id for t in store.get_critical_path()] == [early.id, late.id]

    def test_weekend_start_is_still_critical(self, add_task):
        task = add_task("Weekend", d(6), d(7))

        assert task.early_start == d(8)
        assert task.early_finish == d(9)
        assert task.slack == 0
        assert task.is_critical

    def test_chain_starting_on_a_weekend_is_fully_critical(self, store, add_task):
        a = add_task("A", d(6), d(8))
        b = add_task("B", d(11), d(12))
        c = add_task("C", d(15), d(16))
        store.add_dependency(a.id, b.id)
        store.add_dependency(b.id, c.id)
        loose = add_task("Loose", d(6), d(8))

        assert a.early_start == loose.early_start == d(8)
        assert a.late_start == loose.late_start == d(8)
        assert b.early_start == store.calendar.add_working_days(a.early_finish, 1)
        assert [t.slack for t in (a, b, c, loose)] == [0, 0, 0, 0]
        assert [t.id for t in store.get_critical_path()] == [a.id, loose.id, b.id, c.id]

    def test_project_end_date(self, store, add_task):
        a = add_task("A", d(1), d(5))
        b = add_task("B", d(8), d(10))
        store.add_dependency(a.id, b.id)

        assert store.analysis.project_end_date == d(10)
        assert [(t.task_id, t.slack) for t in store.analysis.task_analyses] == [(a.id, 0), (b.id, 0)]


class TestCycleTolerance:

    def test_cycle_is_scheduled_without_error(self, store, add_task):
        a = add_task("A", d(1), d(2))
        b = add_task("B", d(3), d(4))
        store.add_dependency(a.id, b.id)
        store.add_dependency(b.id, a.id)

        assert store.analysis.has_cycle
        for task in store.get_tasks():
            assert task.early_start is not None
            assert task.late_finish is not None

    def test_self_loop_is_tolerated(self, store, add_task):
        a = add_task("A", d(1), d(2))
        dep = store.add_dependency(a.id, a.id)

        assert a.dependencies == [dep.id]
        assert a.early_start == d(1)

    def test_dependency_on_unknown_task_is_ignored(self, store, add_task):
        a = add_task("A", d(1), d(2))
        store.add_dependency("missing", a.id)

        assert a.early_start == d(1)
        assert a.is_critical


class TestGraph:

    def test_traversal_order_puts_predecessors_first(self, store, add_task):
        c = add_task("C", d(1), d(1))
        b = add_task("B", d(1), d(1))
        a = add_task("A", d(1), d(1))
        store.add_dependency(a.id, b.id)
        store.add_dependency(b.id, c.id)

        graph = build_graph(store.get_tasks(), store.get_dependencies())
        assert traversal_order(graph) == [a.id, b.id, c.id]

    def test_independent_tasks_keep_insertion_order(self, store, add_task):
        ids = [add_task(name, d(1), d(1)).id for name in "XYZ"]

        graph = build_graph(store.get_tasks(), store.get_dependencies())
        assert traversal_order(graph) == ids

    def test_descendants(self, store, add_task):
        a = add_task("A", d(1), d(1))
        b = add_task("B", d(1), d(1))
        c = add_task("C", d(1), d(1))
        store.add_dependency(a.id, b.id)
        store.add_dependency(b.id, c.id)

        graph = build_graph(store.get_tasks(), store.get_dependencies())
        assert set(get_descendants(graph, a.id)) == {b.id, c.id}
        assert get_descendants(graph, "missing") == []

    def test_analyzer_on_empty_graph(self):
        analysis = CriticalPathAnalyzer(CalendarService()).analyze([], [])

        assert analysis.project_end_date is None
        assert analysis.critical_path == []
