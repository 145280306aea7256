"""
Service métier pour l'enregistrement des présences par scan de carte.

Flux d'un scan :
  1. Résoudre l'élève par son code de carte (StudentNotFound sinon)
  2. Élève suspendu → réponse non bloquante (success=False) avec la suspension
  3. Calculer le jour local normalisé (minuit, fuseau de l'académie)
  4. INSERT unique sur (élève, jour) : la contrainte de la base tranche les scans simultanés
  5. Statut present, horodatage lisible, acteur ayant scanné
"""

import uuid
import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from academy.database import InsertOutcome, insert_unique
from academy.exceptions import DuplicateAttendance
from academy.models.attendance import Attendance
from academy.models.student import Student
from academy.schemas.attendance import (
    AttendanceEntry,
    AttendanceList,
    AttendanceResponse,
    EndOfDaySummary,
    ScanResult,
    SuspendedNotice,
)
from academy.schemas.student import StudentResponse, StudentSummary
from academy.schemas.suspension import SuspensionResponse
from academy.services import notification_service, student_service, suspension_service
from academy.services.clock import (
    as_utc,
    day_start,
    format_display,
    local_date,
    normalize_day,
    now_utc,
    resolve_timezone,
)

logger = logging.getLogger(__name__)


def register_scan(
    db: Session,
    card_code: str,
    recorded_by: Optional[uuid.UUID],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> ScanResult:
    """
    Enregistre la présence du jour pour la carte scannée.

    Lève StudentNotFound si la carte est inconnue, DuplicateAttendance si une
    présence existe déjà pour ce jour. Un élève suspendu n'est pas une erreur :
    le résultat porte success=False et la suspension en vigueur.
    """
    now = as_utc(now or now_utc())
    tz = resolve_timezone(tz)

    student = student_service.get_student_by_card(db, card_code)

    suspension = suspension_service.find_effective_suspension(db, student.id, now)
    if suspension is not None:
        logger.warning("Scan refusé : élève %s suspendu (%s)", student.id, suspension.kind)
        return ScanResult(
            success=False,
            suspended=SuspendedNotice(
                message="L'élève est suspendu.",
                student=StudentResponse.model_validate(student),
                suspension=SuspensionResponse.model_validate(suspension),
            ),
        )

    student_payload = StudentResponse.model_validate(student)
    attendance = Attendance(
        student_id=student.id,
        day=normalize_day(now, tz),
        status="present",
        scanned_at=format_display(now, tz),
        recorded_by=recorded_by,
    )

    if insert_unique(db, attendance) is InsertOutcome.ALREADY_EXISTS:
        logger.warning("Scan en double ignoré : élève %s, jour %s", student.id, local_date(now, tz))
        raise DuplicateAttendance("Présence déjà enregistrée aujourd'hui.")

    logger.info("Présence enregistrée : élève %s (%s)", student.id, attendance.scanned_at)
    return ScanResult(
        success=True,
        attendance=AttendanceResponse.model_validate(attendance),
        student=student_payload,
    )


def _to_list(rows) -> AttendanceList:
    records = [
        AttendanceEntry(
            attendance=AttendanceResponse.model_validate(attendance),
            student=StudentSummary.model_validate(student),
        )
        for attendance, student in rows
    ]
    return AttendanceList(count=len(records), records=records)


def daily_roster(db: Session, day: date, tz: Optional[ZoneInfo] = None) -> AttendanceList:
    """Présences d'un jour calendaire local, avec l'élève associé."""
    tz = resolve_timezone(tz)
    rows = db.execute(
        select(Attendance, Student)
        .join(Student, Student.id == Attendance.student_id)
        .where(Attendance.day == day_start(day, tz))
        .order_by(Attendance.created_at)
    ).all()
    return _to_list(rows)


def report_by_filter(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    academic_level: Optional[str] = None,
    group_code: Optional[str] = None,
    tz: Optional[ZoneInfo] = None,
) -> AttendanceList:
    """Présences sur une plage de dates inclusive, filtrées par niveau et/ou groupe."""
    tz = resolve_timezone(tz)
    query = select(Attendance, Student).join(Student, Student.id == Attendance.student_id)

    if start_date is not None:
        query = query.where(Attendance.day >= day_start(start_date, tz))
    if end_date is not None:
        query = query.where(Attendance.day <= day_start(end_date, tz))
    if academic_level:
        query = query.where(Student.academic_level == academic_level)
    if group_code:
        query = query.where(Student.group_code == group_code)

    rows = db.execute(query.order_by(Attendance.day, Student.full_name)).all()
    return _to_list(rows)


def list_recorded_by(
    db: Session,
    actor_id: uuid.UUID,
    day: Optional[date] = None,
    tz: Optional[ZoneInfo] = None,
) -> AttendanceList:
    """Présences enregistrées par un acteur pour un jour (aujourd'hui par défaut)."""
    tz = resolve_timezone(tz)
    day = day or local_date(now_utc(), tz)
    rows = db.execute(
        select(Attendance, Student)
        .join(Student, Student.id == Attendance.student_id)
        .where(Attendance.recorded_by == actor_id, Attendance.day == day_start(day, tz))
        .order_by(Attendance.created_at)
    ).all()
    return _to_list(rows)


def end_of_day_sweep(
    db: Session,
    today: Optional[date] = None,
    tz: Optional[ZoneInfo] = None,
) -> EndOfDaySummary:
    """
    Balayage de fin de journée : élèves actifs sans présence aujourd'hui,
    puis message d'absence WhatsApp à chaque parent.

    Les échecs d'envoi sont collectés dans notification_errors ;
    le balayage réussit même si tous les envois échouent.
    """
    tz = resolve_timezone(tz)
    today = today or local_date(now_utc(), tz)

    students: List[Student] = student_service.list_active_students(db)
    attended_ids = set(db.execute(
        select(Attendance.student_id).where(Attendance.day == day_start(today, tz))
    ).scalars().all())

    absent = [s for s in students if s.id not in attended_ids]
    present_count = len(students) - len(absent)

    sent, errors = notification_service.notify_batch(
        (student, notification_service.absence_message(student)) for student in absent
    )

    logger.info(
        "Fin de journée %s : %d élèves actifs, %d présents, %d absents, %d messages, %d erreurs",
        today, len(students), present_count, len(absent), sent, len(errors),
    )

    return EndOfDaySummary(
        date=today,
        total_students=len(students),
        present_count=present_count,
        absent_count=len(absent),
        notifications_sent=sent,
        notification_errors=errors,
    )
