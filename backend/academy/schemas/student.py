"""
Schémas Pydantic pour les élèves.
"""

import re
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

AcademicLevel = Literal["A", "B", "C", "D", "E", "F"]
GROUP_CODE_REGEX = re.compile(r"^[A-F]-\d+$")


def _check_group_code(v: str) -> str:
    if not GROUP_CODE_REGEX.match(v):
        raise ValueError("Le code de groupe doit être au format A-1, B-2, etc.")
    return v


class StudentCreate(BaseModel):
    """Schéma de création d'un élève (POST /students)."""
    full_name: str
    photo: Optional[str] = None
    phone_number: str
    parent_whatsapp_number: str
    academic_level: AcademicLevel
    group_code: str
    attendance_card_code: str

    @field_validator("full_name", "phone_number", "parent_whatsapp_number", "attendance_card_code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("group_code")
    @classmethod
    def valid_group_code(cls, v: str) -> str:
        return _check_group_code(v.strip())


class StudentUpdate(BaseModel):
    """
    Schéma de mise à jour (PUT /students/{id}).
    is_active n'en fait pas partie : il est dérivé des suspensions.
    """
    full_name: Optional[str] = None
    photo: Optional[str] = None
    phone_number: Optional[str] = None
    parent_whatsapp_number: Optional[str] = None
    academic_level: Optional[AcademicLevel] = None
    group_code: Optional[str] = None
    attendance_card_code: Optional[str] = None

    @field_validator("full_name", "phone_number", "parent_whatsapp_number", "attendance_card_code")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("group_code")
    @classmethod
    def valid_group_code(cls, v: Optional[str]) -> Optional[str]:
        return _check_group_code(v.strip()) if v is not None else v


class StudentResponse(BaseModel):
    id: uuid.UUID
    full_name: str
    photo: Optional[str]
    phone_number: str
    parent_whatsapp_number: str
    academic_level: str
    group_code: str
    attendance_card_code: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StudentSummary(BaseModel):
    """Vue réduite d'un élève, utilisée dans les rapports."""
    id: uuid.UUID
    full_name: str
    academic_level: str
    group_code: str
    parent_whatsapp_number: str

    model_config = {"from_attributes": True}
