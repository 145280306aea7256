"""
Service métier pour les groupes et leur planning hebdomadaire.
"""

import re
import uuid
import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.exceptions import DuplicateGroupCode, GroupHasStudents, GroupNotFound, InvalidSchedule
from academy.models.group import Group
from academy.models.student import Student
from academy.schemas.group import GroupCreate, GroupUpdate, ScheduleEntry
from academy.services.clock import Weekday

logger = logging.getLogger(__name__)

VALID_DAYS = {d.value for d in Weekday}
TIME_REGEX = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def validate_schedule(schedule: List[ScheduleEntry]) -> List[dict]:
    """
    Vérifie chaque créneau (jour connu, heures HH:MM) et retourne la forme stockée.
    Lève InvalidSchedule au premier créneau invalide.
    """
    entries = []
    for entry in schedule:
        day = entry.day.strip().lower()
        if day not in VALID_DAYS:
            raise InvalidSchedule(f"Jour invalide : {entry.day}")
        if not TIME_REGEX.match(entry.start_time) or not TIME_REGEX.match(entry.end_time):
            raise InvalidSchedule("Format d'heure invalide (utiliser HH:MM).")
        entries.append({"day": day, "start_time": entry.start_time, "end_time": entry.end_time})
    return entries


def create_group(db: Session, data: GroupCreate, created_by: Optional[uuid.UUID] = None) -> Group:
    group = Group(
        code=data.code,
        academic_level=data.academic_level,
        schedule=validate_schedule(data.schedule),
        max_students=data.max_students,
        created_by=created_by,
    )
    db.add(group)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateGroupCode(f"Le groupe '{data.code}' existe déjà.")
    db.refresh(group)
    logger.info("Groupe créé : %s (%d créneaux)", group.code, len(group.schedule))
    return group


def list_groups(db: Session) -> List[Group]:
    return list(db.execute(select(Group).order_by(Group.code)).scalars().all())


def get_group(db: Session, group_id: uuid.UUID) -> Group:
    group = db.get(Group, group_id)
    if group is None:
        raise GroupNotFound("Groupe introuvable.")
    return group


def get_group_by_code(db: Session, code: str) -> Group:
    group = db.execute(select(Group).where(Group.code == code)).scalar_one_or_none()
    if group is None:
        raise GroupNotFound(f"Groupe '{code}' introuvable.")
    return group


def update_group(db: Session, group_id: uuid.UUID, data: GroupUpdate) -> Group:
    """
    Met à jour les champs fournis. Un changement de code est répercuté sur les élèves
    du groupe dans la même transaction, pour qu'ils restent dans ses rapports.
    """
    group = get_group(db, group_id)

    if data.schedule is not None:
        group.schedule = validate_schedule(data.schedule)
    if data.code and data.code != group.code:
        old_code = group.code
        db.execute(
            update(Student)
            .where(Student.group_code == old_code)
            .values(group_code=data.code)
        )
        group.code = data.code
        logger.info("Groupe renommé : %s → %s", old_code, data.code)
    if data.academic_level:
        group.academic_level = data.academic_level
    if data.max_students:
        group.max_students = data.max_students

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateGroupCode("Un groupe avec ce code existe déjà.")
    db.refresh(group)
    return group


def delete_group(db: Session, group_id: uuid.UUID) -> None:
    """
    Supprime un groupe définitivement.
    Bloqué si des élèves référencent encore son code.
    """
    group = get_group(db, group_id)

    students_count = db.execute(
        select(func.count()).select_from(Student).where(Student.group_code == group.code)
    ).scalar() or 0

    if students_count > 0:
        raise GroupHasStudents(
            f"Impossible de supprimer le groupe : {students_count} élève(s) y sont inscrits."
        )

    db.delete(group)
    db.commit()
    logger.info("Groupe supprimé : %s", group.code)
