"""
Router du tableau de bord.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth import Actor, require_roles
from academy.database import get_db
from academy.schemas.report import DashboardStats
from academy.services import dashboard_service

router = APIRouter(prefix="/api/v1/dashboard", tags=["Tableau de bord"])


@router.get("", response_model=DashboardStats, summary="Statistiques du jour")
def get_dashboard(db: Session = Depends(get_db), actor: Actor = Depends(require_roles("admin", "assistant"))):
    return dashboard_service.dashboard_stats(db)
