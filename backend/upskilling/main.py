"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the upskilling platform.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Errors raised below the controllers
are turned into `{message, details}` bodies by the exception handlers
registered here.

Endpoints implemented (under `API_PREFIX`, default `/api/v1`):
- POST/GET /usuarios, GET/PUT/DELETE /usuarios/{id}
- POST/GET /trilhas, GET/PUT/DELETE /trilhas/{id}
- POST /matriculas
- GET /usuarios/{id}/matriculas
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Annotated, List

from fastapi import APIRouter, Depends, FastAPI, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlmodel import Session

from . import schemas
from .config import settings
from .database import Database
from .errors import AppError, ValidationError
from .repositories import SqlEnrollmentStore, SqlTrackStore, SqlUserStore
from .seed import seed
from .services import EnrollmentService, TrackService, UserService

logger = logging.getLogger("upskilling.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)

INTERNAL_ERROR = "Ocorreu um erro interno no servidor."

# positive and within the range of a BIGINT primary key
ResourceId = Annotated[int, Path(gt=0, le=schemas.MAX_ID)]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    database.create_all()
    if settings.SEED_ON_STARTUP:
        with database.session() as session:
            seed(session)
    logger.info("Banco de dados pronto: %s", database.engine.url.render_as_string(hide_password=True))
    yield
    database.dispose()
    logger.info("Conexão com o banco de dados fechada.")


app = FastAPI(
    title="Plataforma de Upskilling/Reskilling API",
    version="1.0",
    description="API RESTful para uma plataforma de Upskilling/Reskilling voltada ao futuro do trabalho.",
    lifespan=lifespan,
)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def _error_body(message: str, details: str = "") -> dict:
    return schemas.ErrorResponse(message=message, details=details).model_dump()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        # storage details stay in the log
        logger.error("Erro interno não tratado em %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message()))
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message(), str(exc)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("loc") and err["loc"][0] == "path" for err in errors):
        msg = "ID de Usuário inválido." if request.url.path.endswith("/matriculas") else "ID inválido."
        return await app_error_handler(request, ValidationError("O ID deve ser um inteiro positivo.", msg))
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in errors
    )
    return await app_error_handler(request, ValidationError(details))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Erro interno não tratado em %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body(INTERNAL_ERROR))


def get_session():
    """Request-scoped session; tests override this dependency."""
    yield from database.get_session()


def get_user_service(db: Session = Depends(get_session)) -> UserService:
    return UserService(SqlUserStore(db))


def get_track_service(db: Session = Depends(get_session)) -> TrackService:
    return TrackService(SqlTrackStore(db))


def get_enrollment_service(db: Session = Depends(get_session)) -> EnrollmentService:
    return EnrollmentService(SqlEnrollmentStore(db), SqlUserStore(db), SqlTrackStore(db))


def _errors(*codes: int) -> dict:
    return {code: {"model": schemas.ErrorResponse} for code in codes}


api = APIRouter(prefix=settings.API_PREFIX)


@api.post('/usuarios', status_code=201, response_model=schemas.UserOut, tags=["Usuarios"], responses=_errors(400, 409, 500))
def create_user(payload: schemas.UserCreate, svc: UserService = Depends(get_user_service)):
    """Create a new user. The email must not be registered yet."""
    return svc.create(payload)


@api.get('/usuarios', response_model=List[schemas.UserOut], tags=["Usuarios"], responses=_errors(500))
def list_users(svc: UserService = Depends(get_user_service)):
    """List every registered user ordered by id."""
    return svc.list()


@api.get('/usuarios/{user_id}', response_model=schemas.UserOut, tags=["Usuarios"], responses=_errors(400, 404, 500))
def get_user(user_id: ResourceId, svc: UserService = Depends(get_user_service)):
    return svc.get(user_id)


@api.put('/usuarios/{user_id}', response_model=schemas.UserOut, tags=["Usuarios"], responses=_errors(400, 404, 500))
def update_user(user_id: ResourceId, payload: schemas.UserUpdate, svc: UserService = Depends(get_user_service)):
    """Update a user. Empty fields keep their stored value."""
    return svc.update(user_id, payload)


@api.delete('/usuarios/{user_id}', status_code=204, tags=["Usuarios"], responses=_errors(400, 404, 500))
def delete_user(user_id: ResourceId, svc: UserService = Depends(get_user_service)):
    svc.delete(user_id)
    return Response(status_code=204)


@api.post('/trilhas', status_code=201, response_model=schemas.TrackOut, tags=["Trilhas"], responses=_errors(400, 500))
def create_track(payload: schemas.TrackCreate, svc: TrackService = Depends(get_track_service)):
    """Create a learning track."""
    return svc.create(payload)


@api.get('/trilhas', response_model=List[schemas.TrackOut], tags=["Trilhas"], responses=_errors(500))
def list_tracks(svc: TrackService = Depends(get_track_service)):
    return svc.list()


@api.get('/trilhas/{track_id}', response_model=schemas.TrackOut, tags=["Trilhas"], responses=_errors(400, 404, 500))
def get_track(track_id: ResourceId, svc: TrackService = Depends(get_track_service)):
    return svc.get(track_id)


@api.put('/trilhas/{track_id}', response_model=schemas.TrackOut, tags=["Trilhas"], responses=_errors(400, 404, 500))
def update_track(track_id: ResourceId, payload: schemas.TrackUpdate, svc: TrackService = Depends(get_track_service)):
    """Update a track. Empty strings and a zero workload keep the stored value."""
    return svc.update(track_id, payload)


@api.delete('/trilhas/{track_id}', status_code=204, tags=["Trilhas"], responses=_errors(400, 404, 500))
def delete_track(track_id: ResourceId, svc: TrackService = Depends(get_track_service)):
    svc.delete(track_id)
    return Response(status_code=204)


@api.post('/matriculas', status_code=201, response_model=schemas.EnrollmentOut, tags=["Matriculas"], responses=_errors(400, 422, 500))
def enroll(payload: schemas.EnrollmentIn, svc: EnrollmentService = Depends(get_enrollment_service)):
    """Enroll a user in a track.

    Returns 422 when either the user or the track does not exist.
    """
    return svc.enroll(payload.usuario_id, payload.trilha_id)


@api.get('/usuarios/{user_id}/matriculas', response_model=List[schemas.EnrollmentOut], tags=["Matriculas"], responses=_errors(400, 422, 500))
def list_user_enrollments(user_id: ResourceId, svc: EnrollmentService = Depends(get_enrollment_service)):
    """List a user's enrollments, most recent first."""
    return svc.list_by_user(user_id)


app.include_router(api)


@app.get("/", include_in_schema=False)
def home():
    return RedirectResponse(url="/docs")


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
