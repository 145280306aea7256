"""
Configuration de la connexion à la base de données PostgreSQL.
Fournit aussi la primitive d'insertion conditionnelle atomique utilisée
pour les présences et les paiements.
"""

import enum
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from academy.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class InsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"


def insert_unique(db: Session, instance) -> InsertOutcome:
    """
    Insère `instance` en une seule écriture et laisse la contrainte UNIQUE
    de la table trancher en cas de course entre deux requêtes.

    Aucun SELECT préalable : deux scans simultanés passeraient tous les deux
    un contrôle d'existence. Le second INSERT est rejeté par la base,
    la session est annulée et ALREADY_EXISTS est retourné.
    """
    db.add(instance)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.debug("Insertion rejetée par contrainte d'unicité : %s", exc.orig)
        return InsertOutcome.ALREADY_EXISTS
    db.refresh(instance)
    return InsertOutcome.INSERTED
