"""
Router pour les suspensions : émission, levée, consultation.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth import Actor, require_roles
from academy.database import get_db
from academy.schemas.suspension import LiftResult, StudentSuspensions, SuspensionCreate, SuspensionResponse
from academy.services import suspension_service

router = APIRouter(prefix="/api/v1/suspensions", tags=["Suspensions"])

assistant_only = require_roles("assistant")
staff = require_roles("admin", "assistant")


@router.post("", response_model=SuspensionResponse, status_code=201, summary="Suspendre un élève")
def suspend_student(data: SuspensionCreate, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    """
    Émet une suspension temporaire (end_date obligatoire) ou permanente et désactive l'élève.
    400 si le type est invalide ou la date de fin manquante, 404 si l'élève est introuvable.
    """
    return suspension_service.issue_suspension(
        db, data.student_id, data.kind, data.notes, data.end_date, issued_by=actor.id,
    )


@router.get("/mine", response_model=List[SuspensionResponse], summary="Suspensions émises par l'assistant")
def my_suspensions(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return suspension_service.list_issued_by(db, actor.id)


@router.put("/students/{student_id}/lift", response_model=LiftResult, summary="Lever ses suspensions")
def lift_suspensions(student_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    """
    Lève les suspensions de l'élève émises par l'assistant connecté et recalcule son statut.
    404 si l'élève n'a aucune suspension, 403 si aucune n'a été émise par cet assistant.
    """
    return suspension_service.lift_by_issuer(db, student_id, actor.id)


@router.get("/students/{student_id}", response_model=StudentSuspensions, summary="Suspensions d'un élève")
def student_suspensions(student_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(staff)):
    return suspension_service.list_student_suspensions(db, student_id)
