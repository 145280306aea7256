"""
Modèle SQLAlchemy pour les présences scannées.

day = instant UTC de minuit local (fuseau de l'académie).
La contrainte uq_attendances_student_day garantit une seule présence par élève et par jour,
y compris lorsque deux postes de scan envoient le même élève dans la même seconde.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func

from academy.database import Base


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("student_id", "day", name="uq_attendances_student_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    day = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="present")  # present, absent, late
    scanned_at = Column(String(100), nullable=False)                 # Horodatage lisible
    recorded_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
