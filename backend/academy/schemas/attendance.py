"""
Schémas Pydantic pour les présences (scan de carte, listes, balayage de fin de journée).
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from academy.schemas.notification import NotificationError
from academy.schemas.student import StudentResponse, StudentSummary
from academy.schemas.suspension import SuspensionResponse


class ScanRequest(BaseModel):
    card_code: str

    @field_validator("card_code")
    @classmethod
    def card_code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code de carte est obligatoire.")
        return v.strip()


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    day: datetime
    status: str
    scanned_at: str
    recorded_by: Optional[uuid.UUID]

    model_config = {"from_attributes": True}


class SuspendedNotice(BaseModel):
    """Scan d'un élève suspendu : pas une erreur, la suspension est affichée au poste."""
    message: str
    student: StudentResponse
    suspension: SuspensionResponse


class ScanResult(BaseModel):
    """
    success=True  → attendance renseignée
    success=False → suspended renseigné (refus métier, réponse HTTP 200)
    """
    success: bool
    attendance: Optional[AttendanceResponse] = None
    student: Optional[StudentResponse] = None
    suspended: Optional[SuspendedNotice] = None


class AttendanceEntry(BaseModel):
    """Présence enrichie de l'élève (listes du jour et rapports)."""
    attendance: AttendanceResponse
    student: StudentSummary


class AttendanceList(BaseModel):
    count: int
    records: List[AttendanceEntry]


class EndOfDaySummary(BaseModel):
    """Rapport du balayage de fin de journée. Les échecs d'envoi n'invalident pas le balayage."""
    date: date
    total_students: int
    present_count: int
    absent_count: int
    notifications_sent: int
    notification_errors: List[NotificationError]
