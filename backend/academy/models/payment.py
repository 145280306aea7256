"""
Modèle SQLAlchemy pour les paiements mensuels de scolarité.
Un seul paiement par (élève, mois, année), garanti par contrainte d'unicité.
"""

import uuid
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    func,
)

from academy.database import Base

PAYMENT_METHODS = ("cash", "transfer", "card")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("student_id", "month", "year", name="uq_payments_student_month_year"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_payments_month"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(20), nullable=False)              # cash, transfer, card
    payment_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="unpaid")  # paid, unpaid
    recorded_by = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
