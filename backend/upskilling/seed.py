"""Reference data for local development and demos.

`seed()` fills each table only while it is still empty, so running it
repeatedly (at startup or from `scripts/seed_db.py`) never duplicates rows.
"""

import logging
from datetime import timedelta

from sqlalchemy import func
from sqlmodel import Session, select

from . import models
from .repositories import SqlCompetencyStore, SqlTrackStore, SqlUserStore

logger = logging.getLogger("upskilling.seed")

USERS = [
    {"nome": "Ana Silva", "email": "ana.silva@exemplo.com", "area_atuacao": "TI", "nivel_carreira": "Pleno"},
    {"nome": "Bruno Costa", "email": "bruno.costa@exemplo.com", "area_atuacao": "Finanças", "nivel_carreira": "Em transição"},
    {"nome": "Carla Souza", "email": "carla.souza@exemplo.com", "area_atuacao": "Marketing", "nivel_carreira": "Junior"},
    {"nome": "Daniel Pereira", "email": "daniel.pereira@exemplo.com", "area_atuacao": "Recursos Humanos", "nivel_carreira": "Senior"},
]

TRACKS = [
    {
        "nome": "Inteligência Artificial para Negócios",
        "descricao": "Trilha focada em aplicação de IA em processos empresariais.",
        "nivel": models.TrackLevel.AVANCADO.value,
        "carga_horaria": 80,
        "foco_principal": "IA",
    },
    {
        "nome": "Análise de Dados com Python",
        "descricao": "Fundamentos e práticas de Data Science.",
        "nivel": models.TrackLevel.INTERMEDIARIO.value,
        "carga_horaria": 60,
        "foco_principal": "Dados",
    },
    {
        "nome": "Comunicação e Liderança Remota",
        "descricao": "Desenvolvimento de soft skills essenciais para o trabalho híbrido.",
        "nivel": models.TrackLevel.INICIANTE.value,
        "carga_horaria": 40,
        "foco_principal": "Soft Skills",
    },
]

COMPETENCIES = [
    {"nome": "Machine Learning", "categoria": "Tecnologia", "descricao": "Capacidade de desenvolver modelos de aprendizado de máquina."},
    {"nome": "Pensamento Crítico", "categoria": "Humana", "descricao": "Habilidade de analisar informações de forma objetiva."},
    {"nome": "Gestão de Projetos Ágeis", "categoria": "Gestão", "descricao": "Conhecimento em metodologias ágeis como Scrum e Kanban."},
]

# (user index, track index, days before now)
ENROLLMENTS = [(0, 0, 30), (1, 1, 5)]


def _is_empty(session: Session, table) -> bool:
    return session.exec(select(func.count()).select_from(table)).one() == 0


def seed(session: Session) -> dict:
    """Populate empty tables with reference data.

    Returns the number of rows inserted per table.
    """
    counts = {"usuarios": 0, "trilhas": 0, "competencias": 0, "trilha_competencia": 0, "matriculas": 0}
    users = SqlUserStore(session)
    tracks = SqlTrackStore(session)
    competencies = SqlCompetencyStore(session)

    if _is_empty(session, models.User):
        for data in USERS:
            users.create(models.User(**data))
            counts["usuarios"] += 1
        logger.info("Usuários populados: %d", counts["usuarios"])
    else:
        logger.info("Tabela de usuários já possui dados, pulando.")

    if _is_empty(session, models.Track):
        for data in TRACKS:
            tracks.create(models.Track(**data))
            counts["trilhas"] += 1
        logger.info("Trilhas populadas: %d", counts["trilhas"])
    else:
        logger.info("Tabela de trilhas já possui dados, pulando.")

    if _is_empty(session, models.Competency):
        for data in COMPETENCIES:
            competencies.create(models.Competency(**data))
            counts["competencias"] += 1
        logger.info("Competências populadas: %d", counts["competencias"])
    else:
        logger.info("Tabela de competências já possui dados, pulando.")

    if _is_empty(session, models.TrackCompetency):
        # i-th seeded track is linked to the i-th seeded competency
        for track_data, comp_data in zip(TRACKS, COMPETENCIES):
            track = tracks.find_by_name(track_data["nome"])
            comp = competencies.find_by_name(comp_data["nome"])
            if track and comp:
                competencies.link_track(track.id, comp.id)
                counts["trilha_competencia"] += 1
        logger.info("Associações trilha-competência populadas: %d", counts["trilha_competencia"])

    if _is_empty(session, models.Enrollment):
        now = models.utcnow()
        for user_idx, track_idx, days_ago in ENROLLMENTS:
            user = users.find_by_email(USERS[user_idx]["email"])
            track = tracks.find_by_name(TRACKS[track_idx]["nome"])
            if user and track:
                session.add(models.Enrollment(
                    usuario_id=user.id,
                    trilha_id=track.id,
                    data_inscricao=now - timedelta(days=days_ago),
                    status=models.EnrollmentStatus.ATIVA.value,
                ))
                counts["matriculas"] += 1
        session.commit()
        logger.info("Matrículas populadas: %d", counts["matriculas"])

    return counts
