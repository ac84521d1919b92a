import uuid

from fastapi import APIRouter, Depends, status

from collabhub.dependencies import get_sink, get_store
from collabhub.feedback import ToastSink
from collabhub.schemas.message import MessageResponse
from collabhub.schemas.profile import ProfileSummary
from collabhub.schemas.project import (
    ProjectCreate,
    ProjectMessageCreate,
    ProjectResponse,
    ProjectUpdate,
)
from collabhub.schemas.task import TaskCreate, TaskResponse
from collabhub.services import project_service, task_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(store: EntityStore = Depends(get_store)):
    return await project_service.list_projects(store)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(data: ProjectCreate, store: EntityStore = Depends(get_store)):
    return await project_service.create_project(store, data.model_dump())


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await project_service.get_project(store, project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: uuid.UUID,
    data: ProjectUpdate,
    store: EntityStore = Depends(get_store),
):
    return await project_service.update_project(
        store, project_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await project_service.delete_project(store, project_id)


@router.get("/{project_id}/tasks", response_model=list[TaskResponse])
async def list_project_tasks(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await project_service.list_project_tasks(store, project_id)


@router.post("/{project_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_project_task(
    project_id: uuid.UUID,
    data: TaskCreate,
    store: EntityStore = Depends(get_store),
    sink: ToastSink = Depends(get_sink),
):
    return await task_service.create_project_task(
        store, project_id, data.model_dump(exclude={"project_id"}), sink=sink
    )


@router.get("/{project_id}/members", response_model=list[ProfileSummary])
async def list_team_members(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await project_service.list_team_members(store, project_id)


@router.get("/{project_id}/messages", response_model=list[MessageResponse])
async def list_project_messages(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    project = await project_service.get_project(store, project_id)
    messages = await project_service.list_project_messages(store, project_id)
    return [
        MessageResponse.model_validate(m).model_copy(
            update={"content": project_service.strip_message_prefix(m.content, project)}
        )
        for m in messages
    ]


@router.post("/{project_id}/messages", response_model=list[MessageResponse], status_code=201)
async def send_project_message(
    project_id: uuid.UUID,
    data: ProjectMessageCreate,
    store: EntityStore = Depends(get_store),
    sink: ToastSink = Depends(get_sink),
):
    return await project_service.send_project_message(store, project_id, data.content, sink=sink)


@router.post("/{project_id}/progress", response_model=ProjectResponse)
async def recompute_progress(project_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await project_service.get_project(store, project_id)
    await project_service.recompute_progress(store, project_id)
    return await project_service.get_project(store, project_id)
