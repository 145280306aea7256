"""
Router pour les groupes et leur planning hebdomadaire.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth import Actor, get_current_actor, require_roles
from academy.database import get_db
from academy.schemas.group import GroupCreate, GroupResponse, GroupUpdate
from academy.services import group_service

router = APIRouter(prefix="/api/v1/groups", tags=["Groupes"])

staff = require_roles("admin", "assistant")


@router.post("", response_model=GroupResponse, status_code=201, summary="Créer un groupe")
def create_group(data: GroupCreate, db: Session = Depends(get_db), actor: Actor = Depends(staff)):
    """
    Crée un groupe avec son planning (jours sunday..saturday, heures HH:MM).
    400 si un créneau est invalide, 409 si le code existe déjà.
    """
    return group_service.create_group(db, data, created_by=actor.id)


@router.get("", response_model=List[GroupResponse], summary="Lister les groupes")
def list_groups(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return group_service.list_groups(db)


@router.get("/{group_id}", response_model=GroupResponse, summary="Détail d'un groupe")
def get_group(group_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return group_service.get_group(db, group_id)


@router.put("/{group_id}", response_model=GroupResponse, summary="Modifier un groupe")
def update_group(
    group_id: uuid.UUID,
    data: GroupUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(staff),
):
    return group_service.update_group(db, group_id, data)


@router.delete("/{group_id}", status_code=204, summary="Supprimer un groupe")
def delete_group(group_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(staff)):
    """Suppression définitive, bloquée (409) tant que des élèves référencent le groupe."""
    group_service.delete_group(db, group_id)
