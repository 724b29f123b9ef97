import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

# keep the module-level application database off disk during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402

from upskilling import models  # noqa: E402
from upskilling.database import Database  # noqa: E402
from upskilling.errors import NotFoundError  # noqa: E402
from upskilling.main import app, get_session  # noqa: E402


def _clone(record):
    return type(record)(**record.model_dump())


@pytest.fixture()
def db():
    """Fresh in-memory SQLite database with the full schema."""
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_session] = db.get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeUserStore:
    """In-memory `UserStore`."""

    def __init__(self):
        self.rows: Dict[int, models.User] = {}
        self._next_id = 1

    def create(self, user: models.User) -> models.User:
        user.id = self._next_id
        user.data_cadastro = datetime.now(timezone.utc)
        self._next_id += 1
        self.rows[user.id] = _clone(user)
        return user

    def find_by_id(self, user_id: int) -> models.User:
        if user_id not in self.rows:
            raise NotFoundError("Usuário", user_id)
        return _clone(self.rows[user_id])

    def find_by_email(self, email: str) -> Optional[models.User]:
        return next((_clone(u) for u in self.rows.values() if u.email == email), None)

    def find_all(self) -> List[models.User]:
        return [_clone(self.rows[k]) for k in sorted(self.rows)]

    def update(self, user: models.User) -> models.User:
        if user.id not in self.rows:
            raise NotFoundError("Usuário", user.id)
        self.rows[user.id] = _clone(user)
        return user

    def delete(self, user_id: int) -> None:
        if self.rows.pop(user_id, None) is None:
            raise NotFoundError("Usuário", user_id)


class FakeTrackStore:
    """In-memory `TrackStore`."""

    def __init__(self):
        self.rows: Dict[int, models.Track] = {}
        self._next_id = 1

    def create(self, track: models.Track) -> models.Track:
        track.id = self._next_id
        self._next_id += 1
        self.rows[track.id] = _clone(track)
        return track

    def find_by_id(self, track_id: int) -> models.Track:
        if track_id not in self.rows:
            raise NotFoundError("Trilha", track_id)
        return _clone(self.rows[track_id])

    def find_by_name(self, name: str) -> Optional[models.Track]:
        return next((_clone(t) for t in self.rows.values() if t.nome == name), None)

    def find_all(self) -> List[models.Track]:
        return [_clone(self.rows[k]) for k in sorted(self.rows)]

    def update(self, track: models.Track) -> models.Track:
        if track.id not in self.rows:
            raise NotFoundError("Trilha", track.id)
        self.rows[track.id] = _clone(track)
        return track

    def delete(self, track_id: int) -> None:
        if self.rows.pop(track_id, None) is None:
            raise NotFoundError("Trilha", track_id)


class FakeEnrollmentStore:
    """In-memory `EnrollmentStore`."""

    def __init__(self):
        self.rows: Dict[int, models.Enrollment] = {}
        self._next_id = 1

    def create(self, enrollment: models.Enrollment) -> models.Enrollment:
        enrollment.id = self._next_id
        enrollment.data_inscricao = datetime.now(timezone.utc)
        self._next_id += 1
        self.rows[enrollment.id] = _clone(enrollment)
        return enrollment

    def find_by_id(self, enrollment_id: int) -> models.Enrollment:
        if enrollment_id not in self.rows:
            raise NotFoundError("Matrícula", enrollment_id)
        return _clone(self.rows[enrollment_id])

    def list_by_user(self, user_id: int) -> List[models.Enrollment]:
        found = [_clone(e) for e in self.rows.values() if e.usuario_id == user_id]
        return sorted(found, key=lambda e: (e.data_inscricao, e.id), reverse=True)


@pytest.fixture()
def fake_users():
    return FakeUserStore()


@pytest.fixture()
def fake_tracks():
    return FakeTrackStore()


@pytest.fixture()
def fake_enrollments():
    return FakeEnrollmentStore()
