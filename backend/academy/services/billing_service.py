"""
Service de facturation : paiements mensuels et retards de paiement.

Règle unique de retard : un mois est en retard dès que l'instant courant dépasse
minuit (heure locale de l'académie) du jour de coupure (10 par défaut) du mois suivant.
Le mois cible est alors le mois calendaire précédent (janvier → décembre de l'année précédente).
"""

import uuid
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from academy.config import settings
from academy.database import InsertOutcome, insert_unique
from academy.exceptions import DuplicatePayment, InvalidPaymentMethod, MissingBillingMonth
from academy.models.payment import PAYMENT_METHODS, Payment
from academy.models.student import Student
from academy.schemas.payment import (
    DelinquencyReport,
    DelinquentStudent,
    MonthlyPaymentSummary,
    ReminderSummary,
)
from academy.services import notification_service, student_service
from academy.services.clock import as_utc, now_utc, resolve_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LateWindow:
    is_late_period: bool
    cutoff: datetime
    target_month: int
    target_year: int


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """Mois calendaire précédent, avec passage d'année en janvier."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def late_window(
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
    cutoff_day: Optional[int] = None,
) -> LateWindow:
    """Calcule la coupure du mois courant et le mois visé par les retards."""
    now = as_utc(now or now_utc())
    tz = resolve_timezone(tz)
    cutoff_day = cutoff_day or settings.BILLING_CUTOFF_DAY

    local_now = now.astimezone(tz)
    cutoff = datetime(local_now.year, local_now.month, cutoff_day, tzinfo=tz)
    target_year, target_month = previous_month(local_now.year, local_now.month)

    return LateWindow(
        is_late_period=now > cutoff,
        cutoff=cutoff,
        target_month=target_month,
        target_year=target_year,
    )


def _unpaid_students(db: Session, month: int, year: int, group_code: Optional[str] = None) -> List[Student]:
    """Élèves actifs (éventuellement d'un groupe) sans paiement « paid » pour le mois donné."""
    query = select(Student).where(Student.is_active.is_(True))
    if group_code:
        query = query.where(Student.group_code == group_code)
    students = db.execute(query.order_by(Student.full_name)).scalars().all()

    paid_ids = set(db.execute(
        select(Payment.student_id).where(
            Payment.month == month,
            Payment.year == year,
            Payment.status == "paid",
        )
    ).scalars().all())

    return [s for s in students if s.id not in paid_ids]


def delinquents(
    db: Session,
    now: Optional[datetime] = None,
    group_code: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    tz: Optional[ZoneInfo] = None,
) -> DelinquencyReport:
    """
    Élèves en retard de paiement.

    Deux modes distincts :
    - mois explicite (month fourni, year = année locale courante par défaut) :
      toujours calculé, y compris hors période de retard (consultation historique) ;
    - mode naturel : mois précédent, liste vide tant que la coupure n'est pas dépassée.

    Lève MissingBillingMonth si year est fourni sans month.
    """
    if month is None and year is not None:
        raise MissingBillingMonth("Le mois est obligatoire lorsque l'année est précisée.")

    tz = resolve_timezone(tz)
    window = late_window(now, tz)

    if month is not None:
        target_month = month
        target_year = year or as_utc(now or now_utc()).astimezone(tz).year
        students = _unpaid_students(db, target_month, target_year, group_code)
    else:
        target_month, target_year = window.target_month, window.target_year
        students = (
            _unpaid_students(db, target_month, target_year, group_code)
            if window.is_late_period else []
        )

    return DelinquencyReport(
        month=target_month,
        year=target_year,
        group=group_code or "all",
        is_late_period=window.is_late_period,
        cutoff_date=window.cutoff,
        count=len(students),
        students=[
            DelinquentStudent(
                id=s.id,
                name=s.full_name,
                group_code=s.group_code,
                level=s.academic_level,
                parent_contact=s.parent_whatsapp_number,
            )
            for s in students
        ],
    )


def record_payment(
    db: Session,
    card_code: str,
    month: int,
    year: int,
    amount: Optional[Decimal],
    method: str,
    recorded_by: uuid.UUID,
    now: Optional[datetime] = None,
) -> Payment:
    """
    Enregistre le paiement d'un mois pour l'élève identifié par sa carte.

    Lève InvalidPaymentMethod, StudentNotFound, ou DuplicatePayment si le mois
    est déjà réglé (contrainte d'unicité élève/mois/année).
    """
    if amount is None:
        amount = Decimal(str(settings.DEFAULT_MONTHLY_FEE))
    if method not in PAYMENT_METHODS:
        raise InvalidPaymentMethod(f"Moyen de paiement invalide : {method}")

    student = student_service.get_student_by_card(db, card_code)

    payment = Payment(
        student_id=student.id,
        month=month,
        year=year,
        amount=amount,
        method=method,
        payment_date=as_utc(now or now_utc()),
        status="paid",
        recorded_by=recorded_by,
    )
    if insert_unique(db, payment) is InsertOutcome.ALREADY_EXISTS:
        raise DuplicatePayment(f"Paiement déjà enregistré pour {month:02d}/{year}.")

    logger.info("Paiement enregistré : élève %s, %02d/%d, %s (%s)", student.id, month, year, amount, method)
    return payment


def student_payments(db: Session, student_id: uuid.UUID) -> List[Payment]:
    """Paiements d'un élève, du plus récent au plus ancien."""
    student_service.get_student(db, student_id)
    return list(db.execute(
        select(Payment)
        .where(Payment.student_id == student_id)
        .order_by(Payment.year.desc(), Payment.month.desc())
    ).scalars().all())


def list_recorded_by(
    db: Session,
    actor_id: uuid.UUID,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Payment]:
    query = select(Payment).where(Payment.recorded_by == actor_id)
    if month:
        query = query.where(Payment.month == month)
    if year:
        query = query.where(Payment.year == year)
    return list(db.execute(query.order_by(Payment.year.desc(), Payment.month.desc())).scalars().all())


def payment_summary(db: Session, year: Optional[int] = None) -> List[MonthlyPaymentSummary]:
    """Totaux par mois (montant, nombre, répartition par moyen de paiement), du plus récent au plus ancien."""
    query = select(Payment)
    if year:
        query = query.where(Payment.year == year)
    payments = db.execute(query.order_by(Payment.year.desc(), Payment.month.desc())).scalars().all()

    summary: "OrderedDict[Tuple[int, int], MonthlyPaymentSummary]" = OrderedDict()
    for payment in payments:
        key = (payment.year, payment.month)
        if key not in summary:
            summary[key] = MonthlyPaymentSummary(
                year=payment.year,
                month=payment.month,
                total_amount=Decimal("0"),
                payment_count=0,
                cash_count=0,
                transfer_count=0,
                card_count=0,
            )
        entry = summary[key]
        entry.total_amount += Decimal(payment.amount)
        entry.payment_count += 1
        if payment.method == "cash":
            entry.cash_count += 1
        elif payment.method == "transfer":
            entry.transfer_count += 1
        elif payment.method == "card":
            entry.card_count += 1

    return list(summary.values())


def send_payment_reminders(
    db: Session,
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> ReminderSummary:
    """
    Envoie un rappel WhatsApp aux parents des élèves en retard (mode naturel).
    Hors période de retard, aucun message n'est envoyé.
    """
    window = late_window(now, tz)
    if not window.is_late_period:
        return ReminderSummary(
            is_late_period=False,
            month=window.target_month,
            year=window.target_year,
            total_unpaid=0,
            notifications_sent=0,
            notification_errors=[],
            message="Pas encore en période de retard de paiement.",
        )

    unpaid = _unpaid_students(db, window.target_month, window.target_year)
    sent, errors = notification_service.notify_batch(
        (s, notification_service.payment_reminder_message(s, window.target_month, window.target_year))
        for s in unpaid
    )

    logger.info(
        "Rappels de paiement %02d/%d : %d impayés, %d envoyés, %d erreurs",
        window.target_month, window.target_year, len(unpaid), sent, len(errors),
    )

    return ReminderSummary(
        is_late_period=True,
        month=window.target_month,
        year=window.target_year,
        total_unpaid=len(unpaid),
        notifications_sent=sent,
        notification_errors=errors,
    )
