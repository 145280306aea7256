"""
Application FastAPI de l'académie : présences par carte, suspensions, paiements mensuels.
Lancement local : uvicorn academy.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import academy.models  # noqa: F401 : tables enregistrées avant l'import des routers
from academy.config import settings
from academy.exceptions import Conflict, DomainError, InvalidInput, NotAuthorized, NotFound
from academy.routers import attendance, dashboard, groups, payments, students, suspensions
from academy.scheduler import start_scheduler, stop_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s : %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

# Famille d'erreur métier → code HTTP
STATUS_BY_ERROR = (
    (NotFound, 404),
    (Conflict, 409),
    (InvalidInput, 400),
    (NotAuthorized, 403),
)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Le balayage planifié vit aussi longtemps que l'API."""
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Academy API",
    description="Présences, suspensions et facturation des élèves d'une académie",
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

for module in (students, groups, attendance, suspensions, payments, dashboard):
    app.include_router(module.router)


def status_for(exc: DomainError) -> int:
    for family, status_code in STATUS_BY_ERROR:
        if isinstance(exc, family):
            return status_code
    return 500


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Erreur métier → 404, 409, 400 ou 403 selon sa famille, avec son type dans `error`."""
    status_code = status_for(exc)
    if status_code == 500:
        logger.error("Erreur métier sans code HTTP associé : %s", exc, exc_info=True)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.kind})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Dernier filet : journalise la trace et renvoie un 500 générique.
    La réponse repasse par CORSMiddleware, le navigateur reçoit donc bien les en-têtes CORS.
    """
    logger.error("Erreur inattendue sur %s %s : %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Une erreur interne est survenue."})


@app.get("/api/health", tags=["Santé"])
def health_check():
    return {"status": "ok", "service": "Academy API", "version": API_VERSION}
