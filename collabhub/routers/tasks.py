import uuid

from fastapi import APIRouter, Depends, Query, status

from collabhub.dependencies import get_sink, get_store
from collabhub.feedback import ToastSink
from collabhub.schemas.task import TaskCreate, TaskResponse, TaskStatus, TaskStatusUpdate, TaskUpdate
from collabhub.services import task_service
from collabhub.store import EntityStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    project_id: uuid.UUID | None = Query(default=None),
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    store: EntityStore = Depends(get_store),
):
    return await task_service.list_tasks(store, status=task_status, project_id=project_id)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    store: EntityStore = Depends(get_store),
    sink: ToastSink = Depends(get_sink),
):
    return await task_service.create_task(store, data.model_dump(), sink=sink)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await task_service.get_task(store, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    data: TaskUpdate,
    store: EntityStore = Depends(get_store),
):
    return await task_service.update_task(store, task_id, data.model_dump(exclude_unset=True))


@router.put("/{task_id}/status", response_model=TaskResponse)
async def set_task_status(
    task_id: uuid.UUID,
    data: TaskStatusUpdate,
    store: EntityStore = Depends(get_store),
):
    return await task_service.set_task_status(store, task_id, data.status)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    await task_service.delete_task(store, task_id)
