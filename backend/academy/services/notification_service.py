"""
Service d'envoi des messages WhatsApp aux parents (via Twilio).

Envoi « best effort » : un échec est journalisé et collecté dans le rapport,
jamais relancé et jamais propagé comme échec de l'opération appelante.
"""

import logging
import re
import uuid
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Iterable, List, Tuple

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from academy.config import settings
from academy.exceptions import UpstreamDegraded
from academy.models.student import Student
from academy.models.suspension import Suspension
from academy.schemas.notification import NotificationError, NotificationResult

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def digits_only(phone: str) -> str:
    """Retire tout caractère non numérique d'un numéro de téléphone."""
    return re.sub(r"\D", "", phone or "")


@lru_cache(maxsize=1)
def _get_client() -> Client:
    if not settings.TWILIO_ACCOUNT_SID or not settings.TWILIO_AUTH_TOKEN:
        raise UpstreamDegraded("Service WhatsApp non configuré (identifiants Twilio manquants).")
    return Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)


def send_whatsapp_message(phone_digits: str, message: str) -> NotificationResult:
    """
    Envoie un message WhatsApp au numéro donné (chiffres uniquement, indicatif inclus).
    Lève UpstreamDegraded si Twilio refuse l'envoi ou n'est pas configuré.
    """
    if not phone_digits:
        raise UpstreamDegraded("Numéro de téléphone vide.")

    client = _get_client()
    try:
        response = client.messages.create(
            from_=f"whatsapp:{settings.TWILIO_WHATSAPP_FROM}",
            to=f"whatsapp:+{phone_digits}",
            body=message,
        )
    except TwilioException as exc:
        raise UpstreamDegraded(f"Échec Twilio : {exc}") from exc

    logger.info("Message WhatsApp envoyé à %s (sid=%s)", phone_digits, response.sid)
    return NotificationResult(success=True, sid=response.sid)


def absence_message(student: Student) -> str:
    return (
        f"Dear Parent, your child {student.full_name} did not attend their scheduled lesson today. "
        "Please contact the academy for details."
    )


def payment_reminder_message(student: Student, month: int, year: int) -> str:
    return (
        f"Dear Parent, this is a reminder that the {MONTH_NAMES[month - 1]} {year} tuition fee "
        f"for {student.full_name} is pending. Please make the payment at your earliest convenience."
    )


def suspension_message(student: Student, suspension: Suspension) -> str:
    adverb = "permanently" if suspension.kind == "permanent" else "temporarily"
    message = f"Dear Parent, your child {student.full_name} has been {adverb} suspended from the academy."
    if suspension.kind == "temporary" and suspension.end_date is not None:
        message += f" The suspension will be lifted on {suspension.end_date.strftime('%a %b %d %Y')}."
    if suspension.notes:
        message += f" Notes: {suspension.notes}"
    return message


def _send_one(student_id: uuid.UUID, phone: str, message: str) -> Tuple[uuid.UUID, str, NotificationResult]:
    try:
        result = send_whatsapp_message(phone, message)
    except Exception as exc:
        logger.error("Erreur envoi WhatsApp élève %s (%s) : %s", student_id, phone, exc)
        result = NotificationResult(success=False, error=str(exc))
    return student_id, phone, result


def notify_batch(messages: Iterable[Tuple[Student, str]]) -> Tuple[int, List[NotificationError]]:
    """
    Envoie un lot de messages (élève, texte) avec un parallélisme borné
    (NOTIFICATION_MAX_WORKERS). Retourne (nombre envoyés, liste des erreurs).
    """
    jobs = [
        (student.id, digits_only(student.parent_whatsapp_number), text)
        for student, text in messages
    ]
    if not jobs:
        return 0, []

    workers = max(1, min(settings.NOTIFICATION_MAX_WORKERS, len(jobs)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda job: _send_one(*job), jobs))

    sent = 0
    errors: List[NotificationError] = []
    for student_id, phone, result in outcomes:
        if result.success:
            sent += 1
        else:
            errors.append(NotificationError(student_id=student_id, phone=phone, error=result.error or ""))

    logger.info("Lot WhatsApp : %d envoyés, %d erreurs", sent, len(errors))
    return sent, errors


def notify_one(student: Student, message: str) -> NotificationResult:
    """Envoi unitaire non bloquant (ex. avis de suspension)."""
    _, _, result = _send_one(student.id, digits_only(student.parent_whatsapp_number), message)
    return result
