"""
Service métier pour les élèves : création, lecture, mise à jour, désactivation.
"""

import uuid
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.exceptions import DuplicateCardCode, StudentNotFound
from academy.models.student import Student
from academy.schemas.student import StudentCreate, StudentUpdate

logger = logging.getLogger(__name__)


def create_student(db: Session, data: StudentCreate, created_by: Optional[uuid.UUID] = None) -> Student:
    """
    Crée un élève actif.
    Lève DuplicateCardCode si le code de carte est déjà attribué (index unique).
    """
    student = Student(
        full_name=data.full_name,
        photo=data.photo,
        phone_number=data.phone_number,
        parent_whatsapp_number=data.parent_whatsapp_number,
        academic_level=data.academic_level,
        group_code=data.group_code,
        attendance_card_code=data.attendance_card_code,
        is_active=True,
        created_by=created_by,
    )
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateCardCode(f"Le code de carte '{data.attendance_card_code}' est déjà utilisé.")
    db.refresh(student)
    logger.info("Élève créé : %s (%s, groupe %s)", student.full_name, student.id, student.group_code)
    return student


def list_active_students(db: Session, created_by: Optional[uuid.UUID] = None) -> List[Student]:
    """Élèves actifs, triés par nom. Filtre optionnel sur l'acteur qui les a créés."""
    query = select(Student).where(Student.is_active.is_(True))
    if created_by is not None:
        query = query.where(Student.created_by == created_by)
    return list(db.execute(query.order_by(Student.full_name)).scalars().all())


def get_student(db: Session, student_id: uuid.UUID) -> Student:
    student = db.get(Student, student_id)
    if student is None:
        raise StudentNotFound("Élève introuvable.")
    return student


def get_student_by_card(db: Session, card_code: str) -> Student:
    student = db.execute(
        select(Student).where(Student.attendance_card_code == card_code)
    ).scalar_one_or_none()
    if student is None:
        raise StudentNotFound(f"Aucun élève avec le code de carte '{card_code}'.")
    return student


def update_student(db: Session, student_id: uuid.UUID, data: StudentUpdate) -> Student:
    """Met à jour les champs fournis. is_active n'est jamais modifié ici."""
    student = get_student(db, student_id)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(student, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateCardCode("Ce code de carte est déjà utilisé.")
    db.refresh(student)
    return student


def deactivate_student(db: Session, student_id: uuid.UUID) -> Student:
    """Désactivation explicite (suppression logique)."""
    student = get_student(db, student_id)
    student.is_active = False
    db.commit()
    db.refresh(student)
    logger.info("Élève désactivé : %s", student_id)
    return student
