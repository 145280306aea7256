"""
Registre des suspensions d'élèves.

Règles :
- Une suspension est effective si elle est permanente, ou temporaire avec start_date ≤ t ≤ end_date.
- Student.is_active est recalculé à chaque émission / levée : is_active = aucune suspension effective.
- Levée : temporaire → end_date = juste avant maintenant (historique conservé) ; permanente → suppression.
"""

import enum
import uuid
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, distinct, func, or_, select
from sqlalchemy.orm import Session

from academy.exceptions import (
    InvalidSuspensionKind,
    InvalidSuspensionPeriod,
    MissingEndDate,
    NoSuspensionsFound,
    NotAuthorized,
    StudentNotFound,
)
from academy.models.student import Student
from academy.models.suspension import SUSPENSION_KINDS, Suspension
from academy.schemas.suspension import LiftResult, StudentSuspensions, SuspensionResponse
from academy.services import notification_service
from academy.services.clock import as_utc, now_utc

logger = logging.getLogger(__name__)

# Précision des horodatages stockés (microseconde, PostgreSQL comme SQLite)
LIFT_RESOLUTION = timedelta(microseconds=1)


class LiftOutcome(str, enum.Enum):
    ENDED = "ended"        # temporaire : end_date ramenée juste avant maintenant
    DELETED = "deleted"    # permanente : enregistrement supprimé


def is_effective(suspension: Suspension, at: datetime) -> bool:
    """Vrai si la suspension est en vigueur à l'instant `at`."""
    if suspension.kind == "permanent":
        return True
    if suspension.end_date is None:
        return False
    at = as_utc(at)
    return as_utc(suspension.start_date) <= at <= as_utc(suspension.end_date)


def effective_clause(at: datetime):
    """Équivalent SQL de is_effective, pour les requêtes de comptage et de recherche."""
    return or_(
        Suspension.kind == "permanent",
        and_(
            Suspension.kind == "temporary",
            Suspension.start_date <= at,
            Suspension.end_date >= at,
        ),
    )


def lift(db: Session, suspension: Suspension, now: datetime) -> LiftOutcome:
    """Lève une suspension selon son type. Le commit est laissé à l'appelant."""
    if suspension.kind == "permanent":
        db.delete(suspension)
        return LiftOutcome.DELETED
    # Fin ramenée juste avant `now` : la suspension n'est plus effective à l'instant de la levée.
    # Une suspension déjà échue garde sa date de fin d'origine.
    lifted_end = as_utc(now) - LIFT_RESOLUTION
    if as_utc(suspension.end_date) > lifted_end:
        suspension.end_date = lifted_end
    return LiftOutcome.ENDED


def find_effective_suspension(db: Session, student_id: uuid.UUID, at: datetime) -> Optional[Suspension]:
    """Retourne une suspension effective de l'élève à l'instant donné, ou None."""
    return db.execute(
        select(Suspension)
        .where(Suspension.student_id == student_id, effective_clause(as_utc(at)))
        .order_by(Suspension.start_date.desc())
        .limit(1)
    ).scalars().first()


def issue_suspension(
    db: Session,
    student_id: uuid.UUID,
    kind: str,
    notes: Optional[str],
    end_date: Optional[datetime],
    issued_by: uuid.UUID,
    now: Optional[datetime] = None,
) -> Suspension:
    """
    Émet une suspension et désactive l'élève (toujours, même s'il l'était déjà).

    Lève InvalidSuspensionKind si le type est inconnu, MissingEndDate si une
    suspension temporaire n'a pas de date de fin, InvalidSuspensionPeriod si
    cette date n'est pas dans le futur, StudentNotFound si l'élève n'existe pas.
    """
    now = as_utc(now or now_utc())

    if kind not in SUSPENSION_KINDS:
        raise InvalidSuspensionKind(f"Type de suspension invalide : {kind}")
    if kind == "temporary" and end_date is None:
        raise MissingEndDate("La date de fin est obligatoire pour une suspension temporaire.")

    student = db.get(Student, student_id)
    if student is None:
        raise StudentNotFound("Élève introuvable.")

    if kind == "temporary" and as_utc(end_date) <= now:
        raise InvalidSuspensionPeriod("La date de fin d'une suspension temporaire doit être dans le futur.")

    suspension = Suspension(
        student_id=student_id,
        kind=kind,
        notes=notes,
        start_date=now,
        end_date=as_utc(end_date) if kind == "temporary" else None,
        issued_by=issued_by,
    )
    db.add(suspension)
    student.is_active = False
    db.commit()
    db.refresh(suspension)

    logger.info(
        "Suspension %s émise pour l'élève %s par %s (fin : %s)",
        kind, student_id, issued_by, suspension.end_date,
    )

    # Avis au parent : non bloquant, un échec est seulement journalisé
    notification_service.notify_one(student, notification_service.suspension_message(student, suspension))

    return suspension


def lift_by_issuer(
    db: Session,
    student_id: uuid.UUID,
    issuer_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> LiftResult:
    """
    Lève toutes les suspensions de l'élève émises par `issuer_id`, puis recalcule
    is_active sur l'ensemble des suspensions restantes (tous émetteurs confondus).

    Lève StudentNotFound, NoSuspensionsFound si l'élève n'a aucune suspension,
    NotAuthorized si aucune n'a été émise par cet acteur.
    """
    now = as_utc(now or now_utc())

    student = db.get(Student, student_id)
    if student is None:
        raise StudentNotFound("Élève introuvable.")

    suspensions = db.execute(
        select(Suspension).where(Suspension.student_id == student_id)
    ).scalars().all()
    if not suspensions:
        raise NoSuspensionsFound("Aucune suspension trouvée pour cet élève.")

    own = [s for s in suspensions if s.issued_by == issuer_id]
    if not own:
        raise NotAuthorized("Aucune suspension émise par vous pour cet élève.")

    for suspension in own:
        lift(db, suspension, now)

    # Les suspensions levées à l'instant ne comptent plus, y compris les permanentes supprimées
    lifted_ids = {s.id for s in own}
    remaining = [s for s in suspensions if s.id not in lifted_ids]
    student.is_active = not any(is_effective(s, now) for s in remaining)
    db.commit()

    logger.info(
        "%d suspension(s) levée(s) pour l'élève %s par %s, actif : %s",
        len(own), student_id, issuer_id, student.is_active,
    )

    return LiftResult(
        student_id=student_id,
        lifted_count=len(own),
        is_active=student.is_active,
        message=f"{len(own)} suspension(s) levée(s).",
    )


def list_student_suspensions(
    db: Session,
    student_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> StudentSuspensions:
    """Répartit les suspensions d'un élève en actives / expirées / permanentes."""
    now = as_utc(now or now_utc())

    if db.get(Student, student_id) is None:
        raise StudentNotFound("Élève introuvable.")

    suspensions = db.execute(
        select(Suspension)
        .where(Suspension.student_id == student_id)
        .order_by(Suspension.start_date.desc())
    ).scalars().all()

    result = StudentSuspensions(active=[], expired=[], permanent=[])
    for suspension in suspensions:
        item = SuspensionResponse.model_validate(suspension)
        if suspension.kind == "permanent":
            result.permanent.append(item)
        elif is_effective(suspension, now):
            result.active.append(item)
        else:
            result.expired.append(item)
    return result


def count_currently_suspended(db: Session, now: Optional[datetime] = None) -> int:
    """Nombre d'élèves distincts ayant au moins une suspension effective."""
    now = as_utc(now or now_utc())
    return db.execute(
        select(func.count(distinct(Suspension.student_id))).where(effective_clause(now))
    ).scalar() or 0


def list_issued_by(db: Session, issuer_id: uuid.UUID) -> List[Suspension]:
    """Suspensions émises par un acteur, de la plus récente à la plus ancienne."""
    return list(db.execute(
        select(Suspension)
        .where(Suspension.issued_by == issuer_id)
        .order_by(Suspension.start_date.desc())
    ).scalars().all())
