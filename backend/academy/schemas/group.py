"""
Schémas Pydantic pour les groupes et leur planning hebdomadaire.
La validation métier du planning (jours, format HH:MM) est faite par group_service.
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

GROUP_CODE_REGEX = re.compile(r"^[A-Z]-\d+$")


def _check_code(v: str) -> str:
    v = v.strip()
    if not GROUP_CODE_REGEX.match(v):
        raise ValueError("Le code de groupe doit être au format A-1, B-2, etc.")
    return v


class ScheduleEntry(BaseModel):
    day: str
    start_time: str
    end_time: str


class GroupCreate(BaseModel):
    code: str
    academic_level: str
    schedule: List[ScheduleEntry]
    max_students: int = Field(default=20, ge=1)

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return _check_code(v)


class GroupUpdate(BaseModel):
    code: Optional[str] = None
    academic_level: Optional[str] = None
    schedule: Optional[List[ScheduleEntry]] = None
    max_students: Optional[int] = Field(default=None, ge=1)

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: Optional[str]) -> Optional[str]:
        return _check_code(v) if v is not None else v


class GroupResponse(BaseModel):
    id: uuid.UUID
    code: str
    academic_level: str
    schedule: List[ScheduleEntry]
    max_students: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
