"""
Schémas Pydantic pour l'envoi des messages WhatsApp.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class NotificationResult(BaseModel):
    success: bool
    sid: Optional[str] = None
    error: Optional[str] = None


class NotificationError(BaseModel):
    student_id: uuid.UUID
    phone: str
    error: str
