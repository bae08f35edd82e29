from fastapi import APIRouter, Depends

from .. import deps
from ..auth import current_user_id
from ..schemas import DashboardStats

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(user_id: str = Depends(current_user_id)) -> DashboardStats:
    return deps.dashboard.stats(user_id)
