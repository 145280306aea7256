"""
Tests unitaires pour le service des groupes et la validation des plannings.
"""

import uuid
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from academy.exceptions import DuplicateGroupCode, GroupHasStudents, GroupNotFound, InvalidSchedule
from academy.schemas.group import GroupCreate, GroupUpdate, ScheduleEntry
from academy.services.group_service import create_group, delete_group, get_group, update_group, validate_schedule


# --- Helpers ---

def make_group_mock(code="A-1"):
    g = MagicMock()
    g.id = uuid.uuid4()
    g.code = code
    g.schedule = []
    return g


def make_db_mock(group=None, scalar_value=0):
    db = MagicMock()
    db.get.return_value = group
    db.execute.return_value.scalar.return_value = scalar_value
    return db


def entry(day="monday", start="16:00", end="18:00"):
    return ScheduleEntry(day=day, start_time=start, end_time=end)


# --- validate_schedule ---

def test_validate_schedule_normalise_le_jour():
    assert validate_schedule([entry(day=" Monday ")]) == [
        {"day": "monday", "start_time": "16:00", "end_time": "18:00"}
    ]


def test_validate_schedule_jour_invalide():
    with pytest.raises(InvalidSchedule, match="Jour invalide"):
        validate_schedule([entry(day="funday")])


def test_validate_schedule_heure_invalide():
    with pytest.raises(InvalidSchedule, match="HH:MM"):
        validate_schedule([entry(start="25:00")])


def test_validate_schedule_vide_accepte():
    assert validate_schedule([]) == []


# --- create_group ---

def test_create_group_succes():
    db = make_db_mock()
    group = create_group(db, GroupCreate(code="A-1", academic_level="A", schedule=[entry()]))
    db.add.assert_called_once()
    db.commit.assert_called_once()
    assert group.code == "A-1"
    assert group.schedule[0]["day"] == "monday"


def test_create_group_code_duplique():
    db = make_db_mock()
    db.commit.side_effect = IntegrityError("", {}, Exception())
    with pytest.raises(DuplicateGroupCode, match="existe déjà"):
        create_group(db, GroupCreate(code="A-1", academic_level="A", schedule=[]))
    db.rollback.assert_called_once()


def test_create_group_planning_invalide_rien_ecrit():
    db = make_db_mock()
    with pytest.raises(InvalidSchedule):
        create_group(db, GroupCreate(code="A-1", academic_level="A", schedule=[entry(day="lundi")]))
    db.add.assert_not_called()


# --- get / update / delete ---

def test_get_group_introuvable():
    with pytest.raises(GroupNotFound, match="introuvable"):
        get_group(make_db_mock(group=None), uuid.uuid4())


def test_update_group_planning():
    group = make_group_mock()
    db = make_db_mock(group=group)
    update_group(db, group.id, GroupUpdate(schedule=[entry(day="friday")]))
    assert group.schedule == [{"day": "friday", "start_time": "16:00", "end_time": "18:00"}]
    db.commit.assert_called_once()


def test_update_group_renommage_repercute_sur_les_eleves():
    group = make_group_mock(code="A-1")
    db = make_db_mock(group=group)
    update_group(db, group.id, GroupUpdate(code="B-1"))
    assert group.code == "B-1"
    db.execute.assert_called_once()
    db.commit.assert_called_once()


def test_update_group_meme_code_sans_mise_a_jour_des_eleves():
    group = make_group_mock(code="A-1")
    db = make_db_mock(group=group)
    update_group(db, group.id, GroupUpdate(code="A-1"))
    db.execute.assert_not_called()


def test_delete_group_avec_eleves_bloque():
    group = make_group_mock()
    db = make_db_mock(group=group, scalar_value=3)
    with pytest.raises(GroupHasStudents, match="3 élève"):
        delete_group(db, group.id)
    db.delete.assert_not_called()


def test_delete_group_vide():
    group = make_group_mock()
    db = make_db_mock(group=group, scalar_value=0)
    delete_group(db, group.id)
    db.delete.assert_called_once_with(group)
    db.commit.assert_called_once()


# --- Validation des schémas ---

def test_group_create_code_invalide():
    with pytest.raises(ValidationError):
        GroupCreate(code="groupe1", academic_level="A", schedule=[])


def test_group_create_code_strip():
    assert GroupCreate(code=" B-12 ", academic_level="B", schedule=[]).code == "B-12"
