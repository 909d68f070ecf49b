"""
Smoke test for the seed script's graph generator.
"""

from scripts.seed import generate_dag


class TestGenerateDag:

    def test_generates_acyclic_schedule(self, engine):
        snapshot = generate_dag(engine, num_nodes=60, seed=7)

        engine.store.import_data(snapshot)

        assert len(engine.store.get_tasks()) == 60
        assert engine.store.get_dependencies()
        assert engine.store.analysis.has_cycle is False
        assert engine.store.get_critical_path()
        assert "<svg" in engine.renderer.export_svg()

    def test_seed_is_reproducible(self, engine):
        first = generate_dag(engine, num_nodes=30, seed=3)
        second = generate_dag(engine, num_nodes=30, seed=3)

        assert [t.duration for t in first.tasks] == [t.duration for t in second.tasks]
        assert len(first.dependencies) == len(second.dependencies)
