import uuid

from fastapi import APIRouter, Depends, Request

from collabhub.dependencies import get_storage, get_store
from collabhub.schemas.profile import ProfileResponse, ProfileUpdate
from collabhub.services import profile_service
from collabhub.storage import ObjectStorage
from collabhub.store import EntityStore

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(store: EntityStore = Depends(get_store)):
    return await profile_service.get_profile(store)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    store: EntityStore = Depends(get_store),
):
    return await profile_service.update_profile(store, data.model_dump(exclude_unset=True))


@router.put("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(
    request: Request,
    store: EntityStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
):
    """Raw image body; the Content-Type header names the format."""
    blob = await request.body()
    return await profile_service.set_avatar(
        store, storage, blob, request.headers.get("content-type", "")
    )


@router.put("/me/resume", response_model=ProfileResponse)
async def upload_resume(
    request: Request,
    store: EntityStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
):
    blob = await request.body()
    return await profile_service.set_resume(
        store, storage, blob, request.headers.get("content-type", "")
    )


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: uuid.UUID, store: EntityStore = Depends(get_store)):
    return await profile_service.get_profile(store, user_id)
