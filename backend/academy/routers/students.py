"""
Router pour les élèves : création, listage, détail, mise à jour, désactivation.
Réservé aux assistants.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth import Actor, require_roles
from academy.database import get_db
from academy.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from academy.services import student_service

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

assistant_only = require_roles("assistant")


@router.post("", response_model=StudentResponse, status_code=201, summary="Créer un élève")
def create_student(
    data: StudentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    """Crée un élève actif. Retourne 409 si le code de carte est déjà attribué."""
    return student_service.create_student(db, data, created_by=actor.id)


@router.get("", response_model=List[StudentResponse], summary="Lister les élèves actifs")
def list_students(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return student_service.list_active_students(db)


@router.get("/mine", response_model=List[StudentResponse], summary="Élèves créés par l'assistant")
def list_my_students(db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return student_service.list_active_students(db, created_by=actor.id)


@router.get("/{student_id}", response_model=StudentResponse, summary="Détail d'un élève")
def get_student(student_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    return student_service.get_student(db, student_id)


@router.put("/{student_id}", response_model=StudentResponse, summary="Modifier un élève")
def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(assistant_only),
):
    """Met à jour les champs fournis. Le statut actif dépend des suspensions et n'est pas modifiable ici."""
    return student_service.update_student(db, student_id, data)


@router.delete("/{student_id}", status_code=204, summary="Désactiver un élève")
def deactivate_student(student_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(assistant_only)):
    """Suppression logique : l'élève passe inactif, son historique est conservé."""
    student_service.deactivate_student(db, student_id)
