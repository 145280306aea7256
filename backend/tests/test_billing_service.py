"""
Tests unitaires de la facturation : fenêtre de retard, retardataires, paiements, rappels.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from academy.database import InsertOutcome
from academy.exceptions import DuplicatePayment, InvalidPaymentMethod, MissingBillingMonth, StudentNotFound
from academy.models.payment import Payment
from academy.models.student import Student
from academy.services.billing_service import (
    delinquents,
    late_window,
    payment_summary,
    previous_month,
    record_payment,
    send_payment_reminders,
)

BUCHAREST = ZoneInfo("Europe/Bucharest")
ASSISTANT = uuid.uuid4()


# --- Helpers ---

def make_student(name="Ana Popescu", group_code="A-1"):
    return Student(
        id=uuid.uuid4(),
        full_name=name,
        phone_number="0712345678",
        parent_whatsapp_number="+40 712 345 678",
        academic_level="A",
        group_code=group_code,
        attendance_card_code=f"CARD-{name}",
        is_active=True,
    )


def local(year, month, day, hour=0, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second, tzinfo=BUCHAREST)


# --- previous_month / late_window ---

def test_previous_month_janvier():
    assert previous_month(2027, 1) == (2026, 12)


def test_previous_month_courant():
    assert previous_month(2026, 10) == (2026, 9)


def test_late_window_avant_coupure():
    window = late_window(local(2026, 10, 9, 23, 59), BUCHAREST, 10)
    assert window.is_late_period is False
    assert (window.target_month, window.target_year) == (9, 2026)


def test_late_window_pile_a_la_coupure_pas_en_retard():
    window = late_window(local(2026, 10, 10, 0, 0, 0), BUCHAREST, 10)
    assert window.is_late_period is False


def test_late_window_apres_coupure():
    window = late_window(local(2026, 10, 10, 0, 0, 1), BUCHAREST, 10)
    assert window.is_late_period is True


def test_late_window_janvier_vise_decembre():
    window = late_window(local(2027, 1, 15), BUCHAREST, 10)
    assert window.is_late_period is True
    assert (window.target_month, window.target_year) == (12, 2026)


def test_late_window_coupure_en_heure_locale():
    # 9 oct 22:30 UTC = 10 oct 01:30 à Bucarest : déjà après la coupure
    window = late_window(datetime(2026, 10, 9, 22, 30, tzinfo=timezone.utc), BUCHAREST, 10)
    assert window.is_late_period is True


# --- delinquents ---

def test_delinquents_mode_naturel_hors_periode_vide():
    db = MagicMock()
    with patch("academy.services.billing_service._unpaid_students") as unpaid:
        report = delinquents(db, now=local(2026, 10, 5), tz=BUCHAREST)
    assert report.count == 0
    assert report.students == []
    assert report.is_late_period is False
    assert (report.month, report.year) == (9, 2026)
    unpaid.assert_not_called()


def test_delinquents_mode_naturel_en_periode():
    db = MagicMock()
    students = [make_student("Ana"), make_student("Bogdan")]
    with patch("academy.services.billing_service._unpaid_students", return_value=students) as unpaid:
        report = delinquents(db, now=local(2026, 10, 19), tz=BUCHAREST)
    assert report.count == 2
    assert report.group == "all"
    assert report.students[0].name == "Ana"
    unpaid.assert_called_once_with(db, 9, 2026, None)


def test_delinquents_mois_explicite_toujours_calcule():
    db = MagicMock()
    students = [make_student("Ana", "B-2")]
    with patch("academy.services.billing_service._unpaid_students", return_value=students) as unpaid:
        report = delinquents(db, now=local(2026, 10, 5), group_code="B-2", month=3, tz=BUCHAREST)
    assert report.is_late_period is False
    assert report.count == 1
    assert report.group == "B-2"
    assert (report.month, report.year) == (3, 2026)
    unpaid.assert_called_once_with(db, 3, 2026, "B-2")


def test_delinquents_mois_et_annee_explicites():
    db = MagicMock()
    with patch("academy.services.billing_service._unpaid_students", return_value=[]) as unpaid:
        report = delinquents(db, now=local(2026, 10, 19), month=12, year=2025, tz=BUCHAREST)
    assert (report.month, report.year) == (12, 2025)
    unpaid.assert_called_once_with(db, 12, 2025, None)


def test_delinquents_annee_sans_mois_refusee():
    db = MagicMock()
    with patch("academy.services.billing_service._unpaid_students") as unpaid:
        with pytest.raises(MissingBillingMonth, match="mois est obligatoire"):
            delinquents(db, now=local(2026, 10, 19), year=2025, tz=BUCHAREST)
    unpaid.assert_not_called()


# --- record_payment ---

def test_record_payment_moyen_invalide():
    with pytest.raises(InvalidPaymentMethod):
        record_payment(MagicMock(), "CARD-1", 9, 2026, Decimal("500"), "bitcoin", ASSISTANT)


def test_record_payment_carte_inconnue():
    db = MagicMock()
    with patch("academy.services.billing_service.student_service.get_student_by_card",
               side_effect=StudentNotFound("Aucun élève")):
        with pytest.raises(StudentNotFound):
            record_payment(db, "UNKNOWN", 9, 2026, Decimal("500"), "cash", ASSISTANT)


def test_record_payment_succes():
    student = make_student()
    db = MagicMock()
    now = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    with patch("academy.services.billing_service.student_service.get_student_by_card", return_value=student), \
         patch("academy.services.billing_service.insert_unique", return_value=InsertOutcome.INSERTED):
        payment = record_payment(db, "CARD-Ana", 9, 2026, Decimal("450.00"), "transfer", ASSISTANT, now=now)
    assert payment.student_id == student.id
    assert payment.status == "paid"
    assert payment.amount == Decimal("450.00")
    assert payment.payment_date == now
    assert payment.recorded_by == ASSISTANT


def test_record_payment_montant_par_defaut():
    student = make_student()
    with patch("academy.services.billing_service.student_service.get_student_by_card", return_value=student), \
         patch("academy.services.billing_service.insert_unique", return_value=InsertOutcome.INSERTED), \
         patch("academy.services.billing_service.settings") as settings:
        settings.DEFAULT_MONTHLY_FEE = 350.0
        payment = record_payment(MagicMock(), "CARD-Ana", 9, 2026, None, "cash", ASSISTANT)
    assert payment.amount == Decimal("350.0")


def test_record_payment_mois_deja_regle():
    student = make_student()
    with patch("academy.services.billing_service.student_service.get_student_by_card", return_value=student), \
         patch("academy.services.billing_service.insert_unique", return_value=InsertOutcome.ALREADY_EXISTS):
        with pytest.raises(DuplicatePayment, match="09/2026"):
            record_payment(MagicMock(), "CARD-Ana", 9, 2026, Decimal("500"), "cash", ASSISTANT)


# --- payment_summary ---

def test_payment_summary_regroupe_par_mois():
    student_id = uuid.uuid4()
    payments = [
        Payment(student_id=student_id, month=10, year=2026, amount=Decimal("500"), method="cash"),
        Payment(student_id=uuid.uuid4(), month=10, year=2026, amount=Decimal("450"), method="card"),
        Payment(student_id=student_id, month=9, year=2026, amount=Decimal("500"), method="transfer"),
    ]
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = payments

    summary = payment_summary(db, 2026)

    assert [(s.year, s.month) for s in summary] == [(2026, 10), (2026, 9)]
    assert summary[0].total_amount == Decimal("950")
    assert summary[0].payment_count == 2
    assert summary[0].cash_count == 1
    assert summary[0].card_count == 1
    assert summary[1].transfer_count == 1


# --- send_payment_reminders ---

def test_reminders_hors_periode_aucun_envoi():
    with patch("academy.services.notification_service.send_whatsapp_message") as send:
        summary = send_payment_reminders(MagicMock(), now=local(2026, 10, 3), tz=BUCHAREST)
    assert summary.is_late_period is False
    assert summary.notifications_sent == 0
    assert summary.message is not None
    send.assert_not_called()


def test_reminders_en_periode():
    students = [make_student("Ana"), make_student("Bogdan")]
    with patch("academy.services.billing_service._unpaid_students", return_value=students), \
         patch("academy.services.notification_service.send_whatsapp_message") as send:
        summary = send_payment_reminders(MagicMock(), now=local(2026, 10, 19), tz=BUCHAREST)
    assert summary.is_late_period is True
    assert summary.total_unpaid == 2
    assert summary.notifications_sent == 2
    assert (summary.month, summary.year) == (9, 2026)
    assert send.call_count == 2
    assert "September 2026" in send.call_args.args[1]
