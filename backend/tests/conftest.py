"""
Pytest configuration and fixtures for Gantt tests.
"""

from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from gantt.main import app
from gantt.engine import GanttEngine, get_engine
from gantt.rendering import Renderer
from gantt.rendering.primitives import Rect
from gantt.services.calendar import CalendarService
from gantt.services.history import SnapshotHistory
from gantt.services.store import TaskStore


@pytest.fixture
def calendar():
    return CalendarService()


@pytest.fixture
def store():
    """An empty store with the default Monday-Friday calendar."""
    return TaskStore()


@pytest.fixture
def history(store):
    return SnapshotHistory(store)


@pytest.fixture
def renderer(store):
    return Renderer(store)


@pytest.fixture
def engine():
    """A fully wired engine that deletes without asking."""
    engine = GanttEngine()
    yield engine
    engine.close()


@pytest.fixture
def add_task(store):
    """Shortcut: add_task("A", date(...), date(...), **fields)."""
    def _add(name: str, start: date, end: date, **fields):
        return store.add_task({"name": name, "start_date": start, "end_date": end, **fields})
    return _add


@pytest.fixture
def bar_of():
    """Look up the drawn bar of a task in a renderer's current scene."""
    def _bar(renderer: Renderer, task_id: str) -> Rect:
        return next(
            shape for shape in renderer.get_scene().for_task(task_id)
            if isinstance(shape, Rect) and shape.css_class == "task-bar"
        )
    return _bar


@pytest_asyncio.fixture(scope="function")
async def client():
    """Create an async test client bound to a fresh engine."""
    test_engine = GanttEngine()

    app.dependency_overrides[get_engine] = lambda: test_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    test_engine.close()
