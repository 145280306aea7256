"""
Tests d'intégration API pour les élèves.
Testent les URLs, les codes HTTP, la validation et le format des réponses.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from academy.exceptions import DuplicateCardCode, StudentNotFound
from academy.schemas.student import StudentResponse

from conftest import ASSISTANT_ID


# --- Helper ---

def make_student_response(**kwargs) -> StudentResponse:
    return StudentResponse(
        id=kwargs.get("id", uuid.uuid4()),
        full_name=kwargs.get("full_name", "Ana Popescu"),
        photo=None,
        phone_number="0712345678",
        parent_whatsapp_number="+40712345678",
        academic_level="A",
        group_code=kwargs.get("group_code", "A-1"),
        attendance_card_code=kwargs.get("attendance_card_code", "CARD-001"),
        is_active=kwargs.get("is_active", True),
        created_at=datetime.now(),
    )


VALID_PAYLOAD = {
    "full_name": "Ana Popescu",
    "phone_number": "0712345678",
    "parent_whatsapp_number": "+40712345678",
    "academic_level": "A",
    "group_code": "A-1",
    "attendance_card_code": "CARD-001",
}


# ============================================================
# POST /api/v1/students
# ============================================================

def test_create_student_succes(client):
    """Création valide → 201, l'acteur connecté est transmis comme créateur."""
    with patch("academy.routers.students.student_service.create_student") as mock:
        mock.return_value = make_student_response()
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)

    assert response.status_code == 201
    assert response.json()["is_active"] is True
    assert mock.call_args.kwargs["created_by"] == ASSISTANT_ID


def test_create_student_code_groupe_invalide(client):
    """Code de groupe hors format → 422."""
    response = client.post("/api/v1/students", json={**VALID_PAYLOAD, "group_code": "Z-1"})
    assert response.status_code == 422


def test_create_student_carte_dupliquee(client):
    """Carte déjà attribuée → 409 avec le type d'erreur."""
    with patch("academy.routers.students.student_service.create_student") as mock:
        mock.side_effect = DuplicateCardCode("Le code de carte 'CARD-001' est déjà utilisé.")
        response = client.post("/api/v1/students", json=VALID_PAYLOAD)

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"
    assert "déjà utilisé" in response.json()["detail"]


def test_create_student_admin_interdit(admin_client):
    """Route réservée aux assistants → 403 pour un administrateur."""
    response = admin_client.post("/api/v1/students", json=VALID_PAYLOAD)
    assert response.status_code == 403


# ============================================================
# GET /api/v1/students
# ============================================================

def test_list_students(client):
    with patch("academy.routers.students.student_service.list_active_students") as mock:
        mock.return_value = [make_student_response(), make_student_response(full_name="Bogdan")]
        response = client.get("/api/v1/students")

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_list_my_students_filtre_sur_l_acteur(client):
    with patch("academy.routers.students.student_service.list_active_students") as mock:
        mock.return_value = []
        response = client.get("/api/v1/students/mine")

    assert response.status_code == 200
    assert mock.call_args.kwargs["created_by"] == ASSISTANT_ID


# ============================================================
# GET / PUT / DELETE /api/v1/students/{id}
# ============================================================

def test_get_student_introuvable(client):
    with patch("academy.routers.students.student_service.get_student") as mock:
        mock.side_effect = StudentNotFound("Élève introuvable.")
        response = client.get(f"/api/v1/students/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_get_student_id_invalide(client):
    response = client.get("/api/v1/students/pas-un-uuid")
    assert response.status_code == 422


def test_update_student(client):
    student_id = uuid.uuid4()
    with patch("academy.routers.students.student_service.update_student") as mock:
        mock.return_value = make_student_response(id=student_id, group_code="B-2")
        response = client.put(f"/api/v1/students/{student_id}", json={"group_code": "B-2"})

    assert response.status_code == 200
    assert response.json()["group_code"] == "B-2"


def test_deactivate_student(client):
    with patch("academy.routers.students.student_service.deactivate_student") as mock:
        response = client.delete(f"/api/v1/students/{uuid.uuid4()}")

    assert response.status_code == 204
    mock.assert_called_once()
