"""
Statistiques du tableau de bord des assistants.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from academy.models.attendance import Attendance
from academy.models.student import Student
from academy.schemas.report import DashboardStats
from academy.services import billing_service, suspension_service
from academy.services.clock import as_utc, normalize_day, now_utc, resolve_timezone


def dashboard_stats(db: Session, now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> DashboardStats:
    """
    Élèves actifs, présences du jour, retards de paiement (mode naturel)
    et élèves actuellement suspendus (comptés une seule fois chacun).
    """
    now = as_utc(now or now_utc())
    tz = resolve_timezone(tz)

    total_students = db.execute(
        select(func.count()).select_from(Student).where(Student.is_active.is_(True))
    ).scalar() or 0

    todays_attendance = db.execute(
        select(func.count()).select_from(Attendance).where(Attendance.day == normalize_day(now, tz))
    ).scalar() or 0

    late = billing_service.delinquents(db, now=now, tz=tz)

    return DashboardStats(
        total_students=total_students,
        todays_attendance=todays_attendance,
        late_payments_count=late.count,
        suspended_students=suspension_service.count_currently_suspended(db, now),
    )
