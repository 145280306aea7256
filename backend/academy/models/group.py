"""
Modèle SQLAlchemy pour les groupes et leur planning hebdomadaire.
Le planning est la référence des dates de séance d'un mois.
"""

import uuid
from sqlalchemy import JSON, Column, DateTime, Integer, String, Uuid, func

from academy.database import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(20), unique=True, nullable=False)   # Ex: "A-1"
    academic_level = Column(String(1), nullable=False)
    # Liste ordonnée de {"day": "monday", "start_time": "16:00", "end_time": "18:00"}
    schedule = Column(JSON, nullable=False, default=list)
    max_students = Column(Integer, nullable=False, default=20)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
