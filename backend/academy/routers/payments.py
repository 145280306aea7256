"""
Router pour les paiements et les retards de paiement.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.auth import Actor, require_roles
from academy.database import get_db
from academy.schemas.payment import (
    DelinquencyReport,
    MonthlyPaymentSummary,
    PaymentCreate,
    PaymentResponse,
    ReminderSummary,
)
from academy.services import billing_service

router = APIRouter(prefix="/api/v1/payments", tags=["Paiements"])

assistant_only = require_roles("assistant")
admin_only = require_roles("admin")


@router.post("", response_model=PaymentResponse, status_code=201, summary="Enregistrer un paiement")
def record_payment(data: PaymentCreate, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    """409 si le mois est déjà réglé pour cet élève."""
    return billing_service.record_payment(
        db, data.card_code, data.month, data.year, data.amount, data.method, recorded_by=actor.id,
    )


@router.get("/mine", response_model=List[PaymentResponse], summary="Paiements enregistrés par l'assistant")
def my_payments(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    return billing_service.list_recorded_by(db, actor.id, month, year)


@router.get("/student/{student_id}", response_model=List[PaymentResponse], summary="Paiements d'un élève")
def student_payments(student_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return billing_service.student_payments(db, student_id)


@router.get("/late", response_model=DelinquencyReport, summary="Élèves en retard de paiement")
def late_payments(
    group_code: Optional[str] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    """
    Sans `month` : mois précédent, liste vide avant la coupure du 10.
    Avec `month` : consultation historique, toujours calculée.
    `year` sans `month` → 400.
    """
    return billing_service.delinquents(db, group_code=group_code, month=month, year=year)


@router.post("/late/reminders", response_model=ReminderSummary, summary="Envoyer les rappels de paiement")
def send_reminders(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return billing_service.send_payment_reminders(db)


@router.get("/summary", response_model=List[MonthlyPaymentSummary], summary="Synthèse mensuelle des paiements")
def payment_summary(year: Optional[int] = None, db: Session = Depends(get_db), actor: Actor = Depends(admin_only)):
    return billing_service.payment_summary(db, year)
