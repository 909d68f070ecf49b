"""
HTTP API tests against a fresh engine per test.
"""

import pytest


async def create_task(client, name, start, end, **fields):
    resp = await client.post("/tasks/", json={"name": name, "startDate": start, "endDate": end, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def task_bar(client, task_id):
    resp = await client.get("/chart/scene")
    assert resp.status_code == 200
    return next(
        p for p in resp.json()["groups"]["tasks"]
        if p["task_id"] == task_id and p["css_class"] == "task-bar"
    )


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}


class TestTasksAPI:

    @pytest.mark.asyncio
    async def test_create_returns_schedule(self, client):
        task = await create_task(client, "Design", "2024-01-01", "2024-01-05", progress=150)

        assert task["name"] == "Design"
        assert task["startDate"] == "2024-01-01"
        assert task["duration"] == 5
        assert task["progress"] == 100
        assert task["earlyStart"] == "2024-01-01"
        assert task["isCritical"] is True
        assert task["isMilestone"] is False
        assert task["slack"] == 0

    @pytest.mark.asyncio
    async def test_end_before_start(self, client):
        resp = await client.post("/tasks/", json={"name": "Bad", "startDate": "2024-01-05", "endDate": "2024-01-01"})

        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_missing_dates(self, client):
        resp = await client.post("/tasks/", json={"name": "No dates"})

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_get_update_delete(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.get(f"/tasks/{task['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == task["id"]

        resp = await client.patch(f"/tasks/{task['id']}", json={"endDate": "2024-01-02", "status": "in_progress"})
        assert resp.status_code == 200
        assert resp.json()["duration"] == 2
        assert resp.json()["status"] == "in_progress"

        resp = await client.delete(f"/tasks/{task['id']}")
        assert resp.status_code == 204

        resp = await client.get(f"/tasks/{task['id']}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_unknown(self, client):
        resp = await client.patch("/tasks/missing", json={"name": "x"})

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_list_filters_critical(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        c = await create_task(client, "C", "2024-01-01", "2024-01-02")
        end = await create_task(client, "End", "2024-01-08", "2024-01-08")
        for source in (a, c):
            resp = await client.post("/dependencies/", json={"from": source["id"], "to": end["id"]})
            assert resp.status_code == 201

        all_tasks = (await client.get("/tasks/")).json()
        critical = (await client.get("/tasks/", params={"critical": True})).json()
        relaxed = (await client.get("/tasks/", params={"critical": False})).json()

        assert [t["name"] for t in all_tasks] == ["A", "C", "End"]
        assert [t["name"] for t in critical] == ["A", "End"]
        assert [(t["name"], t["slack"]) for t in relaxed] == [("C", 3)]


class TestDependenciesAPI:

    @pytest.mark.asyncio
    async def test_create_list_delete(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        b = await create_task(client, "B", "2024-01-01", "2024-01-03")

        resp = await client.post("/dependencies/", json={"from": a["id"], "to": b["id"], "type": "finish-to-start"})
        assert resp.status_code == 201
        dep = resp.json()
        assert (dep["from"], dep["to"], dep["lag"]) == (a["id"], b["id"], 0)
        assert "createdAt" in dep

        moved = (await client.get(f"/tasks/{b['id']}")).json()
        assert moved["earlyStart"] == "2024-01-08"
        assert moved["dependencies"] == [dep["id"]]

        listed = (await client.get("/dependencies/", params={"task_id": a["id"]})).json()
        assert [d["id"] for d in listed] == [dep["id"]]

        resp = await client.delete(f"/dependencies/{dep['id']}")
        assert resp.status_code == 204
        assert (await client.get(f"/dependencies/{dep['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_type(self, client):
        resp = await client.post("/dependencies/", json={"from": "a", "to": "b", "type": "sometime"})

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_cycle_is_tolerated(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-02")
        b = await create_task(client, "B", "2024-01-03", "2024-01-04")

        await client.post("/dependencies/", json={"from": a["id"], "to": b["id"]})
        resp = await client.post("/dependencies/", json={"from": b["id"], "to": a["id"]})

        assert resp.status_code == 201
        path = (await client.get("/chart/critical-path")).json()
        assert path["hasCycle"] is True


class TestResourcesAPI:

    @pytest.mark.asyncio
    async def test_create_and_assign(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.post("/resources/", json={"name": "Ana", "skills": ["design"]})
        assert resp.status_code == 201
        resource = resp.json()
        assert resource["type"] == "human"

        resp = await client.post(f"/resources/{resource['id']}/assign", json={"taskId": task["id"], "allocation": 0.5})
        assert resp.status_code == 200
        assert resp.json()["resourceId"] == resource["id"]
        assert resp.json()["resourceAllocation"] == 0.5

        assert [r["name"] for r in (await client.get("/resources/")).json()] == ["Ana"]

    @pytest.mark.asyncio
    async def test_assign_unknown_resource(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.post("/resources/missing/assign", json={"taskId": task["id"]})

        assert resp.status_code == 404


class TestChartAPI:

    @pytest.mark.asyncio
    async def test_critical_path_and_timeline(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        b = await create_task(client, "B", "2024-01-08", "2024-01-10")
        await client.post("/dependencies/", json={"from": a["id"], "to": b["id"]})

        path = (await client.get("/chart/critical-path")).json()
        timeline = (await client.get("/chart/timeline")).json()

        assert path["taskIds"] == [a["id"], b["id"]]
        assert path["projectEndDate"] == "2024-01-10"
        assert path["hasCycle"] is False
        assert timeline == {"start": "2023-12-25", "end": "2024-01-17", "totalDays": 23}

    @pytest.mark.asyncio
    async def test_scene(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.get("/chart/scene")

        scene = resp.json()
        assert scene["view"] == {"zoom": 1.0, "panX": 0.0, "panY": 0.0}
        assert set(scene["groups"]) == {"header", "grid", "tasks", "dependencies", "milestones", "overlay"}
        bar = await task_bar(client, task["id"])
        assert bar["kind"] == "rect"
        assert bar["y"] == 68

    @pytest.mark.asyncio
    async def test_svg(self, client):
        await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.get("/chart/svg")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("image/svg+xml")
        assert resp.text.startswith("<svg")

    @pytest.mark.asyncio
    async def test_theme(self, client):
        resp = await client.put("/chart/theme", json={"theme": "dark"})
        assert resp.status_code == 200

        scene = (await client.get("/chart/scene")).json()
        assert scene["background"] == "#1e293b"

        resp = await client.put("/chart/theme", json={"theme": "neon"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_zoom(self, client):
        resp = await client.post("/chart/zoom", json={"zoom": 10})
        assert resp.json()["zoom"] == 5

        resp = await client.post("/chart/zoom", json={"zoom": 1, "factor": 2, "cx": 100, "cy": 50})
        assert resp.json() == {"zoom": 2, "panX": -100, "panY": -50}

        resp = await client.post("/chart/zoom", json={"factor": 0})
        assert resp.status_code == 422


class TestInteractionAPI:

    @pytest.mark.asyncio
    async def test_drag_session(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")
        bar = await task_bar(client, task["id"])
        day = bar["width"] / 5
        x, y = bar["x"] + 10, bar["y"] + 5

        resp = await client.post("/chart/sessions/start", json={"x": x, "y": y})
        assert resp.json()["state"] == "dragging"
        assert resp.json()["selected"] == [task["id"]]

        resp = await client.post("/chart/sessions/move", json={"x": x + day, "y": y})
        assert resp.json()["state"] == "dragging"

        resp = await client.post("/chart/sessions/end", json={"x": x + 2 * day, "y": y})
        body = resp.json()
        assert body["state"] == "idle"
        assert body["result"]["startDate"] == "2024-01-03"
        assert body["result"]["endDate"] == "2024-01-09"

    @pytest.mark.asyncio
    async def test_cancel_session(self, client):
        task = await create_task(client, "A", "2024-01-01", "2024-01-05")
        bar = await task_bar(client, task["id"])

        await client.post("/chart/sessions/start", json={"x": bar["x"] + 10, "y": bar["y"] + 5})
        resp = await client.post("/chart/sessions/cancel")

        assert resp.json()["state"] == "idle"
        assert (await client.get(f"/tasks/{task['id']}")).json()["startDate"] == "2024-01-01"

    @pytest.mark.asyncio
    async def test_dependency_session(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        b = await create_task(client, "B", "2024-01-08", "2024-01-10")

        resp = await client.post("/chart/context-action", json={"taskId": a["id"], "action": "addDependency"})
        assert resp.json()["state"] == "creating_dependency"
        assert resp.json()["result"] == {"value": True}

        resp = await client.post("/chart/sessions/end", json={"x": 0, "y": 0, "taskId": b["id"]})
        assert resp.json()["result"]["from"] == a["id"]
        assert resp.json()["result"]["to"] == b["id"]

    @pytest.mark.asyncio
    async def test_keys_and_history(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        await create_task(client, "B", "2024-01-08", "2024-01-10")

        resp = await client.post("/chart/keys", json={"key": "a", "ctrl": True})
        assert resp.json()["handled"] is True
        assert len(resp.json()["selected"]) == 2

        resp = await client.post("/chart/keys", json={"key": "Delete"})
        assert resp.json()["selected"] == []
        assert (await client.get("/tasks/")).json() == []

        resp = await client.post("/chart/undo")
        assert resp.json() == {"applied": True, "canUndo": True, "canRedo": True}
        assert len((await client.get("/tasks/")).json()) == 2

        resp = await client.post("/chart/redo")
        assert resp.json()["applied"] is True
        assert (await client.get(f"/tasks/{a['id']}")).status_code == 404

        resp = await client.post("/chart/keys", json={"key": "z", "ctrl": True, "inFormField": True})
        assert resp.json()["handled"] is False

    @pytest.mark.asyncio
    async def test_undo_with_empty_history(self, client):
        resp = await client.post("/chart/undo")

        assert resp.json() == {"applied": False, "canUndo": False, "canRedo": False}

    @pytest.mark.asyncio
    async def test_context_duplicate(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.post("/chart/context-action", json={"taskId": a["id"], "action": "duplicate"})

        copy = resp.json()["result"]
        assert copy["name"] == "A (Copy)"
        assert copy["startDate"] == "2024-01-02"
        assert copy["id"] != a["id"]

    @pytest.mark.asyncio
    async def test_context_action_validation(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")

        resp = await client.post("/chart/context-action", json={"taskId": a["id"], "action": "explode"})
        assert resp.status_code == 422

        resp = await client.post("/chart/context-action", json={"taskId": "missing", "action": "edit"})
        assert resp.status_code == 404


class TestImportExportAPI:

    @pytest.mark.asyncio
    async def test_roundtrip(self, client):
        a = await create_task(client, "A", "2024-01-01", "2024-01-05")
        b = await create_task(client, "B", "2024-01-08", "2024-01-10")
        await client.post("/dependencies/", json={"from": a["id"], "to": b["id"]})

        exported = (await client.get("/chart/export")).json()
        assert [t["id"] for t in exported["criticalPath"]] == [a["id"], b["id"]]

        await client.delete(f"/tasks/{a['id']}")
        resp = await client.post("/chart/import", json=exported)

        assert resp.status_code == 200
        assert resp.json()["tasks"] == exported["tasks"]
        assert len((await client.get("/dependencies/")).json()) == 1
        assert (await client.post("/chart/undo")).json()["applied"] is False

    @pytest.mark.asyncio
    async def test_invalid_import(self, client):
        resp = await client.post("/chart/import", json={"tasks": [{"name": "No dates"}]})

        assert resp.status_code == 422
