"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Column names follow the public JSON contract (`nome`, `email`, ...), so
records serialize without a renaming layer.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackLevel(str, Enum):
    """Fixed difficulty levels of a learning track."""
    INICIANTE = "INICIANTE"
    INTERMEDIARIO = "INTERMEDIARIO"
    AVANCADO = "AVANCADO"


class EnrollmentStatus(str, Enum):
    ATIVA = "ATIVA"
    CONCLUIDA = "CONCLUIDA"
    CANCELADA = "CANCELADA"


class User(SQLModel, table=True):
    """A professional/learner registered on the platform.

    Fields:
    - `email`: unique across all users
    - `data_cadastro`: registration timestamp, assigned on insert
    """
    __tablename__ = "usuarios"

    id: Optional[int] = Field(default=None, primary_key=True)
    nome: str = Field(max_length=100)
    email: str = Field(index=True, nullable=False, unique=True, max_length=255)
    area_atuacao: str = Field(default="", max_length=100)
    nivel_carreira: str = Field(default="", max_length=50)
    data_cadastro: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Track(SQLModel, table=True):
    """A learning track with a level and a workload in hours."""
    __tablename__ = "trilhas"

    id: Optional[int] = Field(default=None, primary_key=True)
    nome: str = Field(max_length=150)
    descricao: str = ""
    nivel: str = Field(max_length=20)
    carga_horaria: int
    foco_principal: str = Field(default="", max_length=100)


class Competency(SQLModel, table=True):
    """A future-of-work skill. Storage only; linked to tracks by seed data."""
    __tablename__ = "competencias"

    id: Optional[int] = Field(default=None, primary_key=True)
    nome: str = Field(index=True, unique=True, max_length=100)
    categoria: str = Field(default="", max_length=50)
    descricao: str = ""


class TrackCompetency(SQLModel, table=True):
    __tablename__ = "trilha_competencia"

    trilha_id: int = Field(foreign_key="trilhas.id", primary_key=True)
    competencia_id: int = Field(foreign_key="competencias.id", primary_key=True)


class Enrollment(SQLModel, table=True):
    """Binds one user to one track.

    No uniqueness is enforced on (usuario_id, trilha_id): the same user may
    hold several enrollments in the same track.
    """
    __tablename__ = "matriculas"

    id: Optional[int] = Field(default=None, primary_key=True)
    usuario_id: int = Field(foreign_key="usuarios.id", index=True)
    trilha_id: int = Field(foreign_key="trilhas.id")
    data_inscricao: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    status: str = Field(default=EnrollmentStatus.ATIVA.value, max_length=20)
