"""
Schémas Pydantic pour les suspensions.
Le type n'est pas contraint ici : un type inconnu doit remonter InvalidSuspensionKind (400).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class SuspensionCreate(BaseModel):
    student_id: uuid.UUID
    kind: str                      # temporary, permanent
    notes: Optional[str] = None
    end_date: Optional[datetime] = None


class SuspensionResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    kind: str
    notes: Optional[str]
    start_date: datetime
    end_date: Optional[datetime]
    issued_by: uuid.UUID

    model_config = {"from_attributes": True}


class LiftResult(BaseModel):
    """Résultat d'une levée : nombre de suspensions levées et statut recalculé."""
    student_id: uuid.UUID
    lifted_count: int
    is_active: bool
    message: str


class StudentSuspensions(BaseModel):
    """Suspensions d'un élève réparties selon leur effectivité actuelle."""
    active: List[SuspensionResponse]
    expired: List[SuspensionResponse]
    permanent: List[SuspensionResponse]
