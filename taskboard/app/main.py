import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.app.config import get_settings
from taskboard.app.db import init_db
from taskboard.app.routers import tasks as tasks_router
from taskboard.core.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Taskboard API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    # Initialize database schema on boot (safe no-op if tables already exist)
    if (settings.task_repo_backend or "sql").lower() != "file":
        init_db()
    logger.info("taskboard api ready backend=%s", settings.task_repo_backend)


app.include_router(tasks_router.api_router)


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok", "service": "taskboard"}
