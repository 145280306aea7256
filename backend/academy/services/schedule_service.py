"""
Réconciliation planning hebdomadaire ↔ présences enregistrées.

Une date du mois est une date de séance si son jour de la semaine (local)
figure dans le planning du groupe. Une présence compte si un enregistrement
existe exactement pour (élève, jour normalisé).
"""

import math
import logging
from datetime import date
from typing import Iterable, List, Optional, Set
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from academy.models.attendance import Attendance
from academy.models.student import Student
from academy.schemas.report import (
    AbsentStudent,
    AttendanceDetail,
    DailyGroupAttendance,
    GroupAttendanceReport,
    PresentStudent,
    StudentAttendanceReport,
)
from academy.schemas.student import StudentSummary
from academy.services import group_service
from academy.services.clock import as_utc, day_start, month_bounds, month_days, resolve_timezone, weekday_of_date

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Arrondi commercial (0.5 → 1), différent de round() de Python."""
    return int(math.floor(value + 0.5))


def scheduled_weekdays(schedule: Optional[Iterable[dict]]) -> Set[str]:
    """Jours de séance du groupe, en minuscules (ex. {"monday", "wednesday"})."""
    return {entry["day"].lower() for entry in (schedule or [])}


def scheduled_dates(schedule: Optional[Iterable[dict]], year: int, month: int) -> List[date]:
    """Dates du mois (1er → dernier jour inclus) dont le jour figure au planning."""
    days = scheduled_weekdays(schedule)
    return [d for d in month_days(year, month) if weekday_of_date(d).value in days]


def attendance_rate(present_count: int, scheduled_count: int) -> int:
    if scheduled_count == 0:
        return 0
    return round_half_up(100 * present_count / scheduled_count)


def _active_group_students(db: Session, group_code: str) -> List[Student]:
    return list(db.execute(
        select(Student)
        .where(Student.group_code == group_code, Student.is_active.is_(True))
        .order_by(Student.full_name)
    ).scalars().all())


def group_attendance_report(
    db: Session,
    group_code: str,
    month: int,
    year: int,
    tz: Optional[ZoneInfo] = None,
) -> GroupAttendanceReport:
    """
    Rapport mensuel de présence d'un groupe.

    Par élève : jours présents / absents sur les dates de séance et taux arrondi
    (0 sans date de séance). Pour le groupe : moyenne arrondie des taux (0 sans élève).
    Lève GroupNotFound si le code est inconnu.
    """
    tz = resolve_timezone(tz)
    group = group_service.get_group_by_code(db, group_code)
    students = _active_group_students(db, group_code)
    dates = scheduled_dates(group.schedule, year, month)

    records = {}
    if students:
        start, end = month_bounds(year, month, tz)
        rows = db.execute(
            select(Attendance).where(
                Attendance.student_id.in_([s.id for s in students]),
                Attendance.day >= start,
                Attendance.day < end,
            )
        ).scalars().all()
        records = {(r.student_id, as_utc(r.day)): r for r in rows}

    student_reports = []
    for student in students:
        details = []
        present = 0
        for d in dates:
            record = records.get((student.id, day_start(d, tz)))
            details.append(AttendanceDetail(
                date=d,
                day=weekday_of_date(d).value,
                status="present" if record else "absent",
                time=record.scanned_at if record else None,
            ))
            if record:
                present += 1

        student_reports.append(StudentAttendanceReport(
            student_id=student.id,
            full_name=student.full_name,
            parent_whatsapp_number=student.parent_whatsapp_number,
            attendance_days=present,
            absent_days=len(dates) - present,
            attendance_rate=attendance_rate(present, len(dates)),
            details=details,
        ))

    average = (
        round_half_up(sum(r.attendance_rate for r in student_reports) / len(student_reports))
        if student_reports else 0
    )

    logger.info(
        "Rapport groupe %s %d-%02d : %d séances, %d élèves, moyenne %d%%",
        group_code, year, month, len(dates), len(students), average,
    )

    return GroupAttendanceReport(
        group_code=group.code,
        academic_level=group.academic_level,
        month=f"{year}-{month:02d}",
        total_scheduled_days=len(dates),
        total_students=len(students),
        average_attendance_rate=average,
        students=student_reports,
    )


def daily_group_attendance(
    db: Session,
    day: date,
    group_code: str,
    tz: Optional[ZoneInfo] = None,
) -> DailyGroupAttendance:
    """
    Présents / absents d'un groupe pour un jour donné.
    Si le groupe n'a pas séance ce jour-là, retourne is_scheduled_day=False sans calcul.
    """
    tz = resolve_timezone(tz)
    group = group_service.get_group_by_code(db, group_code)
    weekday = weekday_of_date(day).value

    if weekday not in scheduled_weekdays(group.schedule):
        return DailyGroupAttendance(
            date=day,
            day=weekday,
            group_code=group_code,
            is_scheduled_day=False,
            message="Aucune séance prévue pour ce groupe ce jour-là.",
        )

    students = _active_group_students(db, group_code)
    records = {}
    if students:
        rows = db.execute(
            select(Attendance).where(
                Attendance.student_id.in_([s.id for s in students]),
                Attendance.day == day_start(day, tz),
            )
        ).scalars().all()
        records = {r.student_id: r for r in rows}

    present_students = []
    absent_students = []
    for student in students:
        summary = StudentSummary.model_validate(student)
        record = records.get(student.id)
        if record:
            present_students.append(PresentStudent(student=summary, attendance_time=record.scanned_at))
        else:
            absent_students.append(AbsentStudent(student=summary))

    return DailyGroupAttendance(
        date=day,
        day=weekday,
        group_code=group_code,
        is_scheduled_day=True,
        total_students=len(students),
        present_count=len(present_students),
        absent_count=len(absent_students),
        present_students=present_students,
        absent_students=absent_students,
    )
