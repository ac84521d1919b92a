from datetime import date, timedelta

import pytest

from collabhub.services import activity_service, friend_service, project_service, task_service

TODAY = date(2026, 3, 10)


@pytest.mark.asyncio
async def test_activity_tabs_from_store(alice_store):
    project = await project_service.create_project(
        alice_store, {"name": "Launch", "deadline": TODAY + timedelta(days=30)}
    )
    await task_service.create_task(
        alice_store,
        {"title": "doing", "deadline": TODAY + timedelta(days=2), "status": "in_progress", "project_id": project.id},
    )
    await task_service.create_task(
        alice_store, {"title": "done", "deadline": TODAY, "status": "completed"}
    )
    await task_service.create_task(alice_store, {"title": "soon", "deadline": TODAY + timedelta(days=4)})
    await task_service.create_task(alice_store, {"title": "far", "deadline": TODAY + timedelta(days=40)})

    current = await activity_service.get_activity(alice_store, "current", today=TODAY)
    assert [(i.title, i.project_name) for i in current] == [("doing", "Launch")]

    completed = await activity_service.get_activity(alice_store, "completed", today=TODAY)
    assert [i.classification for i in completed] == ["completed"]

    upcoming = await activity_service.get_activity(alice_store, "upcoming", today=TODAY)
    assert [(i.title, i.label) for i in upcoming] == [("soon", "In 4 days")]

    with pytest.raises(ValueError):
        await activity_service.get_activity(alice_store, "archive", today=TODAY)


@pytest.mark.asyncio
async def test_dashboard(alice_store, bob_store, bob):
    await project_service.create_project(alice_store, {"name": "P", "deadline": TODAY})
    await task_service.create_task(alice_store, {"title": "a", "deadline": TODAY})
    await task_service.create_task(alice_store, {"title": "b", "deadline": TODAY, "status": "completed"})
    request = await friend_service.send_request(alice_store, bob.user_id)
    await friend_service.respond(bob_store, request.id, "accepted")

    summary = await activity_service.get_dashboard(alice_store)
    assert summary["open_tasks"] == 1
    assert summary["completed_tasks"] == 1
    assert [p.name for p in summary["projects"]] == ["P"]
    assert [f.username for f in summary["friends"]] == ["bob"]


@pytest.mark.asyncio
async def test_activity_and_dashboard_api(client):
    await client.post("/tasks", json={"title": "done", "deadline": "2026-01-01", "status": "completed"})

    response = await client.get("/activity?tab=completed")
    assert response.status_code == 200
    body = response.json()
    assert body["tab"] == "completed"
    assert [i["kind"] for i in body["items"]] == ["task"]

    response = await client.get("/activity?tab=nope")
    assert response.status_code == 422

    response = await client.get("/dashboard")
    assert response.status_code == 200
    assert response.json()["completed_tasks"] == 1
    assert response.json()["friends"] == []
