#!/usr/bin/env python3
"""
Seed script to generate a large task graph for performance testing.

Generates a DAG with realistic project structure:
- Multiple parallel tracks
- Diamond patterns (convergence points)
- Sequential chains
- Milestones

Usage:
    python -m scripts.seed [--nodes 500] [--svg chart.svg] [--export chart.json]

Options:
    --nodes N      Number of nodes to generate (default: 500)
    --svg PATH     Write the rendered chart as SVG
    --export PATH  Write the exported snapshot as JSON
    --benchmark    Move a root task and time the reschedule
"""

import argparse
import random
import time
from datetime import date
from pathlib import Path

from gantt.engine import GanttEngine
from gantt.models import Task, Dependency, ProjectSnapshot


def generate_dag(engine: GanttEngine, num_nodes: int = 500, seed: int | None = None) -> ProjectSnapshot:
    """
    Generate a realistic DAG structure.

    Strategy:
    - Create tasks in "waves" (levels)
    - Each wave depends on some tasks from previous waves
    - Include diamond patterns and parallel tracks
    - 10% of tasks are milestones (duration=1)
    """
    rng = random.Random(seed)
    calendar = engine.store.calendar
    tasks: list[Task] = []
    dependencies: list[Dependency] = []
    seen: set[tuple[str, str]] = set()

    num_waves = max(10, num_nodes // 50)  # ~50 tasks per wave
    tasks_per_wave = max(1, num_nodes // num_waves)
    start_date = calendar.next_working_day(date(2025, 1, 1))

    print(f"Generating {num_nodes} tasks in {num_waves} waves...")

    waves: list[list[Task]] = []

    for wave in range(num_waves):
        wave_size = tasks_per_wave
        if wave == num_waves - 1:
            wave_size = num_nodes - len(tasks)
        if wave_size <= 0:
            break

        wave_tasks = []
        for i in range(wave_size):
            is_milestone = rng.random() < 0.1
            duration = 1 if is_milestone else rng.randint(2, 10)
            task = Task(
                name=f"Task W{wave:02d}-{i:03d}",
                description=f"Wave {wave}, Task {i}",
                start_date=start_date,  # CPM moves the early dates
                end_date=calendar.add_working_days(start_date, duration - 1),
                duration=duration,
                progress=rng.choice([0, 0, 25, 50, 100]),
            )
            tasks.append(task)
            wave_tasks.append(task)
        waves.append(wave_tasks)

        if wave == 0:
            continue

        # Each task depends on 1-3 tasks from the last few waves
        for task in wave_tasks:
            num_deps = rng.randint(1, min(3, len(waves[wave - 1])))
            available_waves = list(range(max(0, wave - 3), wave))
            for _ in range(num_deps):
                pred = rng.choice(waves[rng.choice(available_waves)])
                key = (pred.id, task.id)
                if key in seen:
                    continue
                seen.add(key)
                dependencies.append(Dependency(**{"from": pred.id, "to": task.id}))

    return ProjectSnapshot(tasks=tasks, dependencies=dependencies, options=engine.store.options)


def print_stats(engine: GanttEngine) -> None:
    """Print statistics about the loaded graph."""
    store = engine.store
    tasks = store.get_tasks()
    dependencies = store.get_dependencies()

    predecessors = {d.to_id for d in dependencies}
    successors = {d.from_id for d in dependencies}
    num_roots = sum(1 for t in tasks if t.id not in predecessors)
    num_leaves = sum(1 for t in tasks if t.id not in successors)
    avg_deps = len(dependencies) / len(tasks) if tasks else 0

    print("\n=== Graph Statistics ===")
    print(f"Tasks:         {len(tasks)}")
    print(f"Dependencies:  {len(dependencies)}")
    print(f"Root tasks:    {num_roots} (no predecessors)")
    print(f"Leaf tasks:    {num_leaves} (no successors)")
    print(f"Avg deps/task: {avg_deps:.2f}")
    print(f"Critical path: {len(store.get_critical_path())} tasks")
    if store.analysis and store.analysis.project_end_date:
        print(f"Project end:   {store.analysis.project_end_date}")


def run_benchmark(engine: GanttEngine) -> None:
    """Move a root task by a week and measure the synchronous reschedule."""
    store = engine.store
    predecessors = {d.to_id for d in store.get_dependencies()}
    root = next((t for t in store.get_tasks() if t.id not in predecessors), None)
    if root is None:
        print("No root tasks found!")
        return

    print(f"\n=== Benchmark: Moving root task {root.name} ===")
    new_start = store.calendar.add_working_days(root.start_date, 5)
    start_time = time.time()
    store.update_task(root.id, {
        "start_date": new_start,
        "end_date": store.calendar.add_working_days(new_start, root.duration - 1),
        "duration": root.duration,
    })
    print(f"Reschedule time: {(time.time() - start_time) * 1000:.2f}ms")


def main():
    parser = argparse.ArgumentParser(description="Seed an engine with a large task graph")
    parser.add_argument("--nodes", type=int, default=500, help="Number of tasks to create")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--svg", type=Path, default=None, help="Write the chart as SVG")
    parser.add_argument("--export", type=Path, default=None, help="Write the snapshot as JSON")
    parser.add_argument("--benchmark", action="store_true", help="Run benchmark after seeding")

    args = parser.parse_args()

    print("=== Gantt Seed Script ===")

    engine = GanttEngine.from_settings()

    start_time = time.time()
    snapshot = generate_dag(engine, args.nodes, args.seed)
    print(f"Generation time: {time.time() - start_time:.2f}s")

    start_time = time.time()
    engine.store.import_data(snapshot)
    print(f"Import + schedule time: {time.time() - start_time:.2f}s")

    print_stats(engine)

    if args.benchmark:
        run_benchmark(engine)

    if args.svg:
        args.svg.write_text(engine.renderer.export_svg())
        print(f"Wrote {args.svg}")

    if args.export:
        args.export.write_text(engine.store.export_data().model_dump_json(by_alias=True, indent=2))
        print(f"Wrote {args.export}")

    print("\n=== Seeding Complete ===")


if __name__ == "__main__":
    main()
