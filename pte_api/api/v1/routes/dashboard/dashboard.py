# pte_api/api/v1/routes/dashboard/dashboard.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, success_response
from pte_api.db.deps import get_db
from pte_api.models.user import User
from pte_api.services.progress import dashboard_stats, get_or_create_progress, serialize_progress

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=ResponseModel)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stats = await dashboard_stats(db, current_user.id)
    return success_response(msg="Dashboard stats", data=stats)


@router.get("/progress", response_model=ResponseModel)
async def get_dashboard_progress(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    progress = await get_or_create_progress(db, current_user.id)
    await db.commit()
    return success_response(msg="Progress fetched", data=serialize_progress(progress))
