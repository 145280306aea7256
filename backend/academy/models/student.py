"""
Modèle SQLAlchemy pour la table students.

is_active est un champ dérivé : vrai si aucune suspension effective n'existe.
Il n'est modifié que par le registre des suspensions et par la désactivation explicite.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Uuid, func

from academy.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    full_name = Column(String(200), nullable=False)
    photo = Column(String(500), nullable=True)
    phone_number = Column(String(30), nullable=False)
    parent_whatsapp_number = Column(String(30), nullable=False)
    academic_level = Column(String(1), nullable=False)      # A à F
    group_code = Column(String(20), nullable=False, index=True)  # Ex: "A-1"
    attendance_card_code = Column(String(100), unique=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Uuid, nullable=True)                 # Acteur fourni par l'authentification
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
