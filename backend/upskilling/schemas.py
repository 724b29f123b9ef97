"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Any validation failure here is reported
as a 400 by the request-validation handler in `main.py`.

Update payloads use the empty string / zero as "leave unchanged", which
means a field cannot be cleared through an update. A JSON `null` on an
optional field is read the same way.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import EnrollmentStatus, TrackLevel

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TRACK_LEVELS = [level.value for level in TrackLevel]

# largest id a BIGINT column can hold
MAX_ID = 2**63 - 1


def _check_length(value: str, field: str, min_len: int, max_len: int) -> str:
    if value and not (min_len <= len(value) <= max_len):
        raise ValueError(f"{field} deve ter entre {min_len} e {max_len} caracteres")
    return value


def _null_as_empty(value):
    return "" if value is None else value


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; every stored one is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ErrorResponse(BaseModel):
    """Failure envelope returned for every error status."""
    message: str
    details: str = ""


class UserCreate(BaseModel):
    """Payload for `POST /usuarios`."""
    nome: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=255)
    area_atuacao: Optional[str] = Field(default="", max_length=100)
    nivel_carreira: Optional[str] = Field(default="", max_length=50)

    nulls_as_empty = field_validator("area_atuacao", "nivel_carreira", mode="before")(_null_as_empty)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_RE.match(value):
            raise ValueError("email inválido")
        return value


class UserUpdate(BaseModel):
    """Payload for `PUT /usuarios/{id}`; the email cannot be changed."""
    nome: Optional[str] = ""
    area_atuacao: Optional[str] = Field(default="", max_length=100)
    nivel_carreira: Optional[str] = Field(default="", max_length=50)

    nulls_as_empty = field_validator("nome", "area_atuacao", "nivel_carreira", mode="before")(_null_as_empty)

    @field_validator("nome")
    @classmethod
    def nome_length(cls, value: str) -> str:
        return _check_length(value, "nome", 3, 100)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nome: str
    email: str
    area_atuacao: str = ""
    nivel_carreira: str = ""
    data_cadastro: datetime

    utc_timestamp = field_validator("data_cadastro")(_as_utc)


class TrackCreate(BaseModel):
    """Payload for `POST /trilhas`."""
    nome: str = Field(min_length=5, max_length=150)
    descricao: Optional[str] = ""
    nivel: TrackLevel
    carga_horaria: int = Field(gt=0)
    foco_principal: Optional[str] = Field(default="", max_length=100)

    nulls_as_empty = field_validator("descricao", "foco_principal", mode="before")(_null_as_empty)


class TrackUpdate(BaseModel):
    """Payload for `PUT /trilhas/{id}`. Every field is optional."""
    nome: Optional[str] = ""
    descricao: Optional[str] = ""
    nivel: Optional[str] = ""
    carga_horaria: Optional[int] = Field(default=0, ge=0)
    foco_principal: Optional[str] = Field(default="", max_length=100)

    nulls_as_empty = field_validator("nome", "descricao", "nivel", "foco_principal", mode="before")(_null_as_empty)

    @field_validator("carga_horaria", mode="before")
    @classmethod
    def null_workload(cls, value):
        return 0 if value is None else value

    @field_validator("nome")
    @classmethod
    def nome_length(cls, value: str) -> str:
        return _check_length(value, "nome", 5, 150)

    @field_validator("nivel")
    @classmethod
    def known_level(cls, value: str) -> str:
        if value and value not in TRACK_LEVELS:
            raise ValueError(f"nivel deve ser um de: {', '.join(TRACK_LEVELS)}")
        return value


class TrackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nome: str
    descricao: str = ""
    nivel: TrackLevel
    carga_horaria: int
    foco_principal: str = ""


class EnrollmentIn(BaseModel):
    """Payload for `POST /matriculas`."""
    usuario_id: int = Field(gt=0, le=MAX_ID)
    trilha_id: int = Field(gt=0, le=MAX_ID)


class EnrollmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    usuario_id: int
    trilha_id: int
    data_inscricao: datetime
    status: EnrollmentStatus

    utc_timestamp = field_validator("data_inscricao")(_as_utc)
