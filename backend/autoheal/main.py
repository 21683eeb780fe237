import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from autoheal.api import auth, failures, suggestions, approvals, runs, selectors, dashboard, git
from autoheal.config import get_settings
from autoheal.db.database import Database
from autoheal.exceptions import StorageError, register_exception_handlers
from autoheal.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup: open the pool once and create tables
    database = Database.from_settings(settings)
    await database.connect()
    try:
        await database.create_all()
    except StorageError:
        logger.exception("Database is unreachable at startup")
        await database.disconnect()
        raise
    app.state.database = database

    yield

    # Shutdown: release pooled connections
    await database.disconnect()


app = FastAPI(
    title="AutoHeal API",
    description="Failure triage and selector approval for Cypress end-to-end runs",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(failures.router, prefix="/api/failures", tags=["failures"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])
app.include_router(approvals.router, prefix="/api/approvals", tags=["approvals"])
app.include_router(runs.router, prefix="/api/runs", tags=["runs"])
app.include_router(selectors.router, prefix="/api/selectors", tags=["selectors"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(git.router, prefix="/api/git", tags=["git"])


@app.get("/health")
async def health():
    return {"status": "healthy"}
