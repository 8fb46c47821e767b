"""Dashboard API — admin overview numbers."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import require_admin
from taskboard.auth.jwt import TokenClaim
from taskboard.db.engine import get_db
from taskboard.schemas.dashboard import DashboardStats
from taskboard.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    _: TokenClaim = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Totals, counts by status/priority/category, and the latest todos."""
    return await DashboardService(db).stats()
