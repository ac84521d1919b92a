from typing import Literal

from fastapi import APIRouter, Depends, Query

from collabhub.dependencies import get_store
from collabhub.schemas.activity import ActivityItemResponse, ActivityResponse, DashboardResponse
from collabhub.services import activity_service
from collabhub.store import EntityStore

router = APIRouter(tags=["activity"])


@router.get("/activity", response_model=ActivityResponse)
async def get_activity(
    tab: Literal["completed", "current", "upcoming"] = Query(default="upcoming"),
    store: EntityStore = Depends(get_store),
):
    items = await activity_service.get_activity(store, tab)
    return ActivityResponse(tab=tab, items=[ActivityItemResponse.model_validate(i) for i in items])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(store: EntityStore = Depends(get_store)):
    return await activity_service.get_dashboard(store)
