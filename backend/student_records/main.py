"""
Point d'entrée principal de l'application de gestion des élèves.
Démarrage : uvicorn student_records.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from student_records.config import settings
from student_records.database import init_local_db
from student_records.logging_config import configure_logging
from student_records.routers import account, auth, pages, students
from student_records.scheduler import start_scheduler, stop_scheduler
from student_records.workspace import registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : logging, base locale éventuelle, planificateur et espaces de travail."""
    configure_logging(settings.LOG_LEVEL)
    if settings.BACKEND_MODE == "local":
        init_local_db()
        logger.info("Backend local actif (%s)", settings.LOCAL_DATABASE_URL)
    start_scheduler()
    yield
    stop_scheduler()
    await registry.close_all()


app = FastAPI(
    title="Sistema de Alunos",
    description="Gestion des élèves (nom, e-mail, matricule) sur un backend Supabase",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
# Les cookies d'espace de travail exigent allow_credentials.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


app.include_router(pages.router)
app.include_router(auth.router)
app.include_router(account.router)
app.include_router(students.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Ocorreu um erro interno."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Sistema de Alunos", "backend": settings.BACKEND_MODE, "version": "0.1.0"}
