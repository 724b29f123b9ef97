"""Store classes encapsulating database operations.

Each entity has a narrow `Protocol` describing what the services need
and one SQL implementation working on a SQLModel `Session` handed over
at construction. Tests implement the same protocols in memory.

SQL stores translate storage outcomes into the error taxonomy: a missing
row becomes `NotFoundError`, a unique violation `ConflictError`, anything
else raised by SQLAlchemy a `StorageError` (logged here, with the session
rolled back).
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from . import models
from .errors import ConflictError, NotFoundError, StorageError

logger = logging.getLogger("upskilling.repositories")

USER_RESOURCE = "Usuário"
TRACK_RESOURCE = "Trilha"
ENROLLMENT_RESOURCE = "Matrícula"


class UserStore(Protocol):
    def create(self, user: models.User) -> models.User: ...
    def find_by_id(self, user_id: int) -> models.User: ...
    def find_by_email(self, email: str) -> Optional[models.User]: ...
    def find_all(self) -> List[models.User]: ...
    def update(self, user: models.User) -> models.User: ...
    def delete(self, user_id: int) -> None: ...


class TrackStore(Protocol):
    def create(self, track: models.Track) -> models.Track: ...
    def find_by_id(self, track_id: int) -> models.Track: ...
    def find_by_name(self, name: str) -> Optional[models.Track]: ...
    def find_all(self) -> List[models.Track]: ...
    def update(self, track: models.Track) -> models.Track: ...
    def delete(self, track_id: int) -> None: ...


class EnrollmentStore(Protocol):
    def create(self, enrollment: models.Enrollment) -> models.Enrollment: ...
    def find_by_id(self, enrollment_id: int) -> models.Enrollment: ...
    def list_by_user(self, user_id: int) -> List[models.Enrollment]: ...


class CompetencyStore(Protocol):
    def create(self, competency: models.Competency) -> models.Competency: ...
    def find_by_name(self, name: str) -> Optional[models.Competency]: ...
    def find_all(self) -> List[models.Competency]: ...
    def link_track(self, track_id: int, competency_id: int) -> None: ...


class _SqlStore:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Roll back and re-raise SQLAlchemy failures as `StorageError`."""
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Erro ao %s: %s", action, exc)
            raise StorageError(f"erro ao {action}: {exc}") from exc

    def _add(self, record, action: str):
        with self._guard(action):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record


class SqlUserStore(_SqlStore):
    """CRUD operations for `User` rows."""

    def create(self, user: models.User) -> models.User:
        """Persist a new user; a duplicate email raises `ConflictError`."""
        user.id = None
        user.data_cadastro = models.utcnow()
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.info("Email duplicado rejeitado pelo banco: %s", user.email)
            raise ConflictError("Email já cadastrado.") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Erro ao criar usuário: %s", exc)
            raise StorageError(f"erro ao criar usuário: {exc}") from exc
        self.session.refresh(user)
        return user

    def find_by_id(self, user_id: int) -> models.User:
        with self._guard("buscar usuário por ID"):
            user = self.session.get(models.User, user_id)
        if user is None:
            raise NotFoundError(USER_RESOURCE, user_id)
        return user

    def find_by_email(self, email: str) -> Optional[models.User]:
        """Return the user owning `email` or `None` if there is none."""
        stmt = select(models.User).where(models.User.email == email)
        with self._guard("buscar usuário por email"):
            return self.session.exec(stmt).first()

    def find_all(self) -> List[models.User]:
        stmt = select(models.User).order_by(models.User.id)
        with self._guard("buscar todos os usuários"):
            return list(self.session.exec(stmt).all())

    def update(self, user: models.User) -> models.User:
        """Replace the mutable fields (name, area, career level) by id."""
        with self._guard("atualizar usuário"):
            existing = self.session.get(models.User, user.id)
            if existing is None:
                raise NotFoundError(USER_RESOURCE, user.id)
            existing.nome = user.nome
            existing.area_atuacao = user.area_atuacao
            existing.nivel_carreira = user.nivel_carreira
            self.session.add(existing)
            self.session.commit()
            self.session.refresh(existing)
        return existing

    def delete(self, user_id: int) -> None:
        with self._guard("deletar usuário"):
            existing = self.session.get(models.User, user_id)
            if existing is None:
                raise NotFoundError(USER_RESOURCE, user_id)
            self.session.delete(existing)
            self.session.commit()


class SqlTrackStore(_SqlStore):
    """CRUD operations for `Track` rows."""

    def create(self, track: models.Track) -> models.Track:
        track.id = None
        return self._add(track, "criar trilha")

    def find_by_id(self, track_id: int) -> models.Track:
        with self._guard("buscar trilha por ID"):
            track = self.session.get(models.Track, track_id)
        if track is None:
            raise NotFoundError(TRACK_RESOURCE, track_id)
        return track

    def find_by_name(self, name: str) -> Optional[models.Track]:
        stmt = select(models.Track).where(models.Track.nome == name)
        with self._guard("buscar trilha por nome"):
            return self.session.exec(stmt).first()

    def find_all(self) -> List[models.Track]:
        stmt = select(models.Track).order_by(models.Track.id)
        with self._guard("buscar todas as trilhas"):
            return list(self.session.exec(stmt).all())

    def update(self, track: models.Track) -> models.Track:
        with self._guard("atualizar trilha"):
            existing = self.session.get(models.Track, track.id)
            if existing is None:
                raise NotFoundError(TRACK_RESOURCE, track.id)
            existing.nome = track.nome
            existing.descricao = track.descricao
            existing.nivel = track.nivel
            existing.carga_horaria = track.carga_horaria
            existing.foco_principal = track.foco_principal
            self.session.add(existing)
            self.session.commit()
            self.session.refresh(existing)
        return existing

    def delete(self, track_id: int) -> None:
        with self._guard("deletar trilha"):
            existing = self.session.get(models.Track, track_id)
            if existing is None:
                raise NotFoundError(TRACK_RESOURCE, track_id)
            self.session.delete(existing)
            self.session.commit()


class SqlEnrollmentStore(_SqlStore):
    """Persist enrollments and list them per user."""

    def create(self, enrollment: models.Enrollment) -> models.Enrollment:
        """Insert an enrollment stamped with the current time."""
        enrollment.id = None
        enrollment.data_inscricao = models.utcnow()
        return self._add(enrollment, "criar matrícula")

    def find_by_id(self, enrollment_id: int) -> models.Enrollment:
        with self._guard("buscar matrícula por ID"):
            enrollment = self.session.get(models.Enrollment, enrollment_id)
        if enrollment is None:
            raise NotFoundError(ENROLLMENT_RESOURCE, enrollment_id)
        return enrollment

    def list_by_user(self, user_id: int) -> List[models.Enrollment]:
        """Return the user's enrollments, most recent first."""
        stmt = (
            select(models.Enrollment)
            .where(models.Enrollment.usuario_id == user_id)
            .order_by(models.Enrollment.data_inscricao.desc(), models.Enrollment.id.desc())
        )
        with self._guard("buscar matrículas por usuário"):
            return list(self.session.exec(stmt).all())


class SqlCompetencyStore(_SqlStore):
    """Competencies and their track links; only the seeder writes here."""

    def create(self, competency: models.Competency) -> models.Competency:
        competency.id = None
        return self._add(competency, "criar competência")

    def find_by_name(self, name: str) -> Optional[models.Competency]:
        stmt = select(models.Competency).where(models.Competency.nome == name)
        with self._guard("buscar competência por nome"):
            return self.session.exec(stmt).first()

    def find_all(self) -> List[models.Competency]:
        stmt = select(models.Competency).order_by(models.Competency.id)
        with self._guard("buscar todas as competências"):
            return list(self.session.exec(stmt).all())

    def link_track(self, track_id: int, competency_id: int) -> None:
        link = models.TrackCompetency(trilha_id=track_id, competencia_id=competency_id)
        with self._guard("associar trilha e competência"):
            self.session.add(link)
            self.session.commit()
