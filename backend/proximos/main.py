"""
FastAPI application entrypoint. Run with: uvicorn proximos.main:app --reload --port 8000 (from backend/)

API base path: routes are mounted at root (no /api/v1 prefix).
  - Auth: POST /auth/setup, /auth/register, /auth/login, /auth/logout, GET /auth/me
  - Topics: /topics (tree, delete modes: cascade | reparent)
  - Questions: /questions, /questions/{id}/feedback, /questions/{id}/submissions
  - Submissions: /question-submissions/me, /question-submissions/{id}, /question-submissions/{id}/grade
  - Library: /video-lessons, /handouts, /open-exercise-lists, /simulated-exams
  - Groups: /groups, /me/groups, /groups/{id}/members
  - Activities: /groups/{id}/activities, /activities/{id}, /activities/{id}/items, /activity-items/{id}

Errors are rendered as {"code", "message", "details"} (see proximos.errors).
"""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from proximos import errors
from proximos.config import settings, DEFAULT_SECRET_KEY
from proximos.api.auth import router as auth_router
from proximos.api.topics import router as topics_router
from proximos.api.questions import router as questions_router
from proximos.api.submissions import router as submissions_router
from proximos.api.library import routers as library_routers
from proximos.api.groups import router as groups_router
from proximos.api.activities import router as activities_router

app = FastAPI(
    title="Próximos Passos API",
    description="Topics, question bank, content library, groups and activities with graded submissions.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(errors.AppError, errors.app_error_handler)
app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
app.add_exception_handler(Exception, errors.unexpected_error_handler)

app.include_router(auth_router)
app.include_router(topics_router)
app.include_router(questions_router)
app.include_router(submissions_router)
for _router in library_routers:
    app.include_router(_router)
app.include_router(groups_router)
app.include_router(activities_router)


@app.on_event("startup")
def startup():
    """Init SQLite DB. Fail fast if production uses the default SECRET_KEY."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO, format="%(levelname)s %(name)s: %(message)s"
    )
    _log = logging.getLogger("proximos.main")
    if settings.is_production and (settings.secret_key or "").strip() == DEFAULT_SECRET_KEY:
        _log.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
        raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    from proximos.database import init_sqlite_db
    init_sqlite_db()
    _log.info("Próximos Passos API started (env=%s)", settings.env or "development")


@app.get("/health")
def health():
    """Health check (JSON)."""
    return {"status": "ok", "message": "Próximos Passos API"}
