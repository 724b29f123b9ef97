"""Business logic services used by HTTP controllers.

Services coordinate the stores declared in `repositories`: they map
request schemas to records, apply the domain rules and map records back
to response schemas. Stores are injected at construction, so the same
services run against SQL in the application and in-memory fakes in tests.
"""

import logging
from typing import List

from . import models, schemas
from .errors import BusinessRuleError, ConflictError, NotFoundError
from .repositories import EnrollmentStore, TrackStore, UserStore

logger = logging.getLogger("upskilling.services")


class UserService:
    """Create, read, update and delete users."""
    def __init__(self, users: UserStore):
        self.users = users

    def create(self, req: schemas.UserCreate) -> schemas.UserOut:
        """Register a user after checking the email is free.

        The store's unique constraint still backs this check for requests
        racing each other.
        """
        if self.users.find_by_email(req.email) is not None:
            raise ConflictError(f"O email '{req.email}' já está cadastrado.")
        user = models.User(
            nome=req.nome,
            email=req.email,
            area_atuacao=req.area_atuacao,
            nivel_carreira=req.nivel_carreira,
        )
        user = self.users.create(user)
        logger.info("usuario_criado id=%s", user.id)
        return schemas.UserOut.model_validate(user)

    def get(self, user_id: int) -> schemas.UserOut:
        return schemas.UserOut.model_validate(self.users.find_by_id(user_id))

    def list(self) -> List[schemas.UserOut]:
        return [schemas.UserOut.model_validate(u) for u in self.users.find_all()]

    def update(self, user_id: int, req: schemas.UserUpdate) -> schemas.UserOut:
        """Overlay the non-empty fields of `req` on the stored user."""
        user = self.users.find_by_id(user_id)
        if req.nome:
            user.nome = req.nome
        if req.area_atuacao:
            user.area_atuacao = req.area_atuacao
        if req.nivel_carreira:
            user.nivel_carreira = req.nivel_carreira
        return schemas.UserOut.model_validate(self.users.update(user))

    def delete(self, user_id: int) -> None:
        self.users.delete(user_id)


class TrackService:
    """Create, read, update and delete learning tracks."""
    def __init__(self, tracks: TrackStore):
        self.tracks = tracks

    def create(self, req: schemas.TrackCreate) -> schemas.TrackOut:
        track = models.Track(
            nome=req.nome,
            descricao=req.descricao,
            nivel=req.nivel.value,
            carga_horaria=req.carga_horaria,
            foco_principal=req.foco_principal,
        )
        track = self.tracks.create(track)
        logger.info("trilha_criada id=%s", track.id)
        return schemas.TrackOut.model_validate(track)

    def get(self, track_id: int) -> schemas.TrackOut:
        return schemas.TrackOut.model_validate(self.tracks.find_by_id(track_id))

    def list(self) -> List[schemas.TrackOut]:
        return [schemas.TrackOut.model_validate(t) for t in self.tracks.find_all()]

    def update(self, track_id: int, req: schemas.TrackUpdate) -> schemas.TrackOut:
        """Overlay the non-empty / non-zero fields of `req` on the stored track."""
        track = self.tracks.find_by_id(track_id)
        if req.nome:
            track.nome = req.nome
        if req.descricao:
            track.descricao = req.descricao
        if req.nivel:
            track.nivel = req.nivel
        if req.carga_horaria:
            track.carga_horaria = req.carga_horaria
        if req.foco_principal:
            track.foco_principal = req.foco_principal
        return schemas.TrackOut.model_validate(self.tracks.update(track))

    def delete(self, track_id: int) -> None:
        self.tracks.delete(track_id)


class EnrollmentService:
    """Enroll users in tracks and list a user's enrollments.

    A missing user or track is a precondition of the enrollment, not a
    lookup result: the stores' `NotFoundError` is re-raised here as a
    `BusinessRuleError` (422). Storage failures pass through unchanged.
    """
    def __init__(self, enrollments: EnrollmentStore, users: UserStore, tracks: TrackStore):
        self.enrollments = enrollments
        self.users = users
        self.tracks = tracks

    def _require_user(self, user_id: int) -> models.User:
        try:
            return self.users.find_by_id(user_id)
        except NotFoundError as exc:
            raise BusinessRuleError(f"Usuário com ID {user_id} não encontrado.") from exc

    def _require_track(self, track_id: int) -> models.Track:
        try:
            return self.tracks.find_by_id(track_id)
        except NotFoundError as exc:
            raise BusinessRuleError(f"Trilha com ID {track_id} não encontrada.") from exc

    def enroll(self, user_id: int, track_id: int) -> schemas.EnrollmentOut:
        """Create an active enrollment of `user_id` in `track_id`.

        Repeated enrollments of the same user in the same track are
        accepted; nothing checks for an existing active one.
        """
        self._require_user(user_id)
        self._require_track(track_id)
        enrollment = models.Enrollment(
            usuario_id=user_id,
            trilha_id=track_id,
            status=models.EnrollmentStatus.ATIVA.value,
        )
        enrollment = self.enrollments.create(enrollment)
        logger.info("matricula_criada id=%s usuario=%s trilha=%s", enrollment.id, user_id, track_id)
        return schemas.EnrollmentOut.model_validate(enrollment)

    def list_by_user(self, user_id: int) -> List[schemas.EnrollmentOut]:
        """Return the user's enrollments, most recent first."""
        self._require_user(user_id)
        return [schemas.EnrollmentOut.model_validate(e) for e in self.enrollments.list_by_user(user_id)]
