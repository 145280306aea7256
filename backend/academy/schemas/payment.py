"""
Schémas Pydantic pour les paiements et les retards de paiement.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from academy.schemas.notification import NotificationError


class PaymentCreate(BaseModel):
    card_code: str
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=2100)
    amount: Optional[Decimal] = Field(default=None, ge=0)   # DEFAULT_MONTHLY_FEE si absent
    method: str                    # cash, transfer, card (vérifié par billing_service)

    @field_validator("card_code")
    @classmethod
    def card_code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code de carte est obligatoire.")
        return v.strip()


class PaymentResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    month: int
    year: int
    amount: Decimal
    method: str
    payment_date: datetime
    status: str
    recorded_by: uuid.UUID

    model_config = {"from_attributes": True}


class DelinquentStudent(BaseModel):
    id: uuid.UUID
    name: str
    group_code: str
    level: str
    parent_contact: str


class DelinquencyReport(BaseModel):
    """
    Élèves actifs sans paiement pour le mois cible.
    En mode naturel hors période de retard, students est vide.
    """
    month: int
    year: int
    group: str
    is_late_period: bool
    cutoff_date: datetime
    count: int
    students: List[DelinquentStudent]


class MonthlyPaymentSummary(BaseModel):
    year: int
    month: int
    total_amount: Decimal
    payment_count: int
    cash_count: int
    transfer_count: int
    card_count: int


class ReminderSummary(BaseModel):
    is_late_period: bool
    month: int
    year: int
    total_unpaid: int
    notifications_sent: int
    notification_errors: List[NotificationError]
    message: Optional[str] = None
