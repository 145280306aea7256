"""
Modèle SQLAlchemy pour les suspensions d'élèves.

Deux types aux sémantiques de levée différentes :
- temporary : end_date obligatoire, levée = end_date ramenée à maintenant (historique conservé)
- permanent : pas de end_date, levée = suppression de l'enregistrement
"""

import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, Text, Uuid, func

from academy.database import Base

SUSPENSION_KINDS = ("temporary", "permanent")


class Suspension(Base):
    __tablename__ = "suspensions"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'permanent' AND end_date IS NULL) OR (kind = 'temporary' AND end_date IS NOT NULL)",
            name="ck_suspensions_kind_end_date",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(20), nullable=False)                # temporary, permanent
    notes = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    issued_by = Column(Uuid, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
