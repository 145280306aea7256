"""
Schémas Pydantic des rapports de réconciliation planning ↔ présences.
"""

import uuid
from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from academy.schemas.student import StudentSummary


class AttendanceDetail(BaseModel):
    date: date
    day: str
    status: str                    # present, absent
    time: Optional[str] = None


class StudentAttendanceReport(BaseModel):
    student_id: uuid.UUID
    full_name: str
    parent_whatsapp_number: str
    attendance_days: int
    absent_days: int
    attendance_rate: int
    details: List[AttendanceDetail]


class GroupAttendanceReport(BaseModel):
    group_code: str
    academic_level: str
    month: str                     # "2026-10"
    total_scheduled_days: int
    total_students: int
    average_attendance_rate: int
    students: List[StudentAttendanceReport]


class PresentStudent(BaseModel):
    student: StudentSummary
    attendance_time: str
    status: str = "present"


class AbsentStudent(BaseModel):
    student: StudentSummary
    status: str = "absent"


class DailyGroupAttendance(BaseModel):
    """Présences d'un groupe pour un jour. Hors jour de séance : is_scheduled_day=False + message."""
    date: date
    day: str
    group_code: str
    is_scheduled_day: bool
    message: Optional[str] = None
    total_students: int = 0
    present_count: int = 0
    absent_count: int = 0
    present_students: List[PresentStudent] = []
    absent_students: List[AbsentStudent] = []


class DashboardStats(BaseModel):
    total_students: int
    todays_attendance: int
    late_payments_count: int
    suspended_students: int
