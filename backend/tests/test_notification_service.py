"""
Tests unitaires de l'envoi WhatsApp (Twilio mocké).
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from twilio.base.exceptions import TwilioException

from academy.exceptions import UpstreamDegraded
from academy.models.student import Student
from academy.models.suspension import Suspension
from academy.schemas.notification import NotificationResult
from academy.services import notification_service
from academy.services.notification_service import (
    absence_message,
    digits_only,
    notify_batch,
    notify_one,
    payment_reminder_message,
    send_whatsapp_message,
    suspension_message,
)


def make_student(name="Ana Popescu", phone="+40 (712) 345-678"):
    return Student(id=uuid.uuid4(), full_name=name, parent_whatsapp_number=phone)


# --- Messages ---

def test_digits_only():
    assert digits_only("+40 (712) 345-678") == "40712345678"
    assert digits_only(None) == ""


def test_absence_message():
    assert "Ana Popescu" in absence_message(make_student())


def test_payment_reminder_message_mois_en_anglais():
    message = payment_reminder_message(make_student(), 12, 2026)
    assert "December 2026" in message


def test_suspension_message_temporaire():
    suspension = Suspension(kind="temporary", notes="Retards", end_date=datetime(2026, 10, 26, tzinfo=timezone.utc))
    message = suspension_message(make_student(), suspension)
    assert "temporarily" in message
    assert "Mon Oct 26 2026" in message
    assert "Retards" in message


def test_suspension_message_permanente():
    message = suspension_message(make_student(), Suspension(kind="permanent", notes=None, end_date=None))
    assert "permanently" in message
    assert "lifted" not in message


# --- send_whatsapp_message ---

def test_send_numero_vide():
    with pytest.raises(UpstreamDegraded):
        send_whatsapp_message("", "Bonjour")


def test_send_succes():
    client = MagicMock()
    client.messages.create.return_value.sid = "SM123"
    with patch("academy.services.notification_service._get_client", return_value=client):
        result = send_whatsapp_message("40712345678", "Bonjour")
    assert result.success is True
    assert result.sid == "SM123"
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["to"] == "whatsapp:+40712345678"
    assert kwargs["from_"].startswith("whatsapp:")


def test_send_erreur_twilio():
    client = MagicMock()
    client.messages.create.side_effect = TwilioException("refusé")
    with patch("academy.services.notification_service._get_client", return_value=client):
        with pytest.raises(UpstreamDegraded, match="Twilio"):
            send_whatsapp_message("40712345678", "Bonjour")


def test_client_sans_identifiants():
    notification_service._get_client.cache_clear()
    with patch("academy.services.notification_service.settings") as settings:
        settings.TWILIO_ACCOUNT_SID = ""
        settings.TWILIO_AUTH_TOKEN = ""
        with pytest.raises(UpstreamDegraded, match="non configuré"):
            notification_service._get_client()
    notification_service._get_client.cache_clear()


# --- notify_batch / notify_one ---

def test_notify_batch_vide():
    assert notify_batch([]) == (0, [])


def test_notify_batch_succes_et_echecs_melanges():
    ok, ko = make_student("Ana"), make_student("Bogdan", phone="")

    def fake_send(phone, message):
        if not phone:
            raise UpstreamDegraded("Numéro de téléphone vide.")
        return NotificationResult(success=True, sid="SM1")

    with patch("academy.services.notification_service.send_whatsapp_message", side_effect=fake_send):
        sent, errors = notify_batch([(ok, "a"), (ko, "b")])

    assert sent == 1
    assert len(errors) == 1
    assert errors[0].student_id == ko.id
    assert "vide" in errors[0].error


def test_notify_batch_parallelisme_borne():
    students = [make_student(f"Eleve {i}") for i in range(5)]
    with patch("academy.services.notification_service.send_whatsapp_message",
               return_value=NotificationResult(success=True)), \
         patch("academy.services.notification_service.ThreadPoolExecutor",
               wraps=notification_service.ThreadPoolExecutor) as pool, \
         patch("academy.services.notification_service.settings") as settings:
        settings.NOTIFICATION_MAX_WORKERS = 2
        sent, errors = notify_batch((s, "msg") for s in students)

    assert sent == 5
    assert errors == []
    assert pool.call_args.kwargs["max_workers"] == 2


def test_notify_one_echec_non_propage():
    with patch("academy.services.notification_service.send_whatsapp_message", side_effect=Exception("boom")):
        result = notify_one(make_student(), "msg")
    assert result.success is False
    assert result.error == "boom"
