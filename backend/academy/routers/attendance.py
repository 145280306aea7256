"""
Router pour les présences : scan de carte, listes du jour, rapports, fin de journée.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from academy.auth import Actor, require_roles
from academy.database import get_db
from academy.schemas.attendance import AttendanceList, EndOfDaySummary, ScanRequest, ScanResult
from academy.schemas.report import DailyGroupAttendance, GroupAttendanceReport
from academy.services import attendance_service, schedule_service
from academy.services.clock import get_academy_timezone, local_date, now_utc

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])

assistant_only = require_roles("assistant")
admin_only = require_roles("admin")
staff = require_roles("admin", "assistant")


@router.post("/scan", response_model=ScanResult, status_code=201, summary="Enregistrer un scan de carte")
def scan_card(
    data: ScanRequest,
    response: Response,
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    """
    Enregistre la présence du jour de l'élève porteur de la carte.

    - 201 : présence créée
    - 200 avec success=false : élève suspendu (la suspension est renvoyée pour affichage)
    - 404 : carte inconnue
    - 409 : présence déjà enregistrée aujourd'hui
    """
    result = attendance_service.register_scan(db, data.card_code, actor.id)
    if not result.success:
        response.status_code = 200
    return result


@router.get("/today", response_model=AttendanceList, summary="Présences du jour")
def todays_attendance(
    day: Optional[date] = Query(None, description="Jour local (aujourd'hui par défaut)"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    return attendance_service.daily_roster(db, day or local_date(now_utc(), get_academy_timezone()))


@router.get("/mine", response_model=AttendanceList, summary="Présences enregistrées par l'assistant aujourd'hui")
def my_attendance(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return attendance_service.list_recorded_by(db, actor.id)


@router.post("/end-day", response_model=EndOfDaySummary, summary="Balayage de fin de journée")
def end_of_day(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    """
    Notifie les parents des élèves actifs absents aujourd'hui.
    Les échecs d'envoi sont listés dans notification_errors sans faire échouer la requête.
    """
    return attendance_service.end_of_day_sweep(db)


@router.get("/report", response_model=AttendanceList, summary="Rapport de présences filtré")
def attendance_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    academic_level: Optional[str] = None,
    group_code: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(admin_only),
):
    return attendance_service.report_by_filter(db, start_date, end_date, academic_level, group_code)


@router.get("/daily-group", response_model=DailyGroupAttendance, summary="Présences d'un groupe pour un jour")
def daily_group(
    group_code: str,
    day: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(staff),
):
    """Si le groupe n'a pas séance ce jour-là, is_scheduled_day=false et aucune liste n'est calculée."""
    return schedule_service.daily_group_attendance(db, day, group_code)


@router.get("/group-report", response_model=GroupAttendanceReport, summary="Rapport mensuel d'un groupe")
def group_report(
    group_code: str,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(staff),
):
    """Taux de présence par élève et moyenne du groupe sur les dates de séance du mois."""
    return schedule_service.group_attendance_report(db, group_code, month, year)
