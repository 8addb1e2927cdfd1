import logging.config

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unrecorded.api.errors import register_exception_handlers
from unrecorded.api.metrics import router as metrics_router
from unrecorded.api.routes import router as api_router
from unrecorded.config import get_settings
from unrecorded.database import SessionLocal
from unrecorded.services.housekeeping import HousekeepingScheduler

settings = get_settings()

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "redact": {
            "()": "unrecorded.core.redaction.RedactingFilter",
        }
    },
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "filters": ["redact"],
        }
    },
    "root": {
        "handlers": ["default"],
        "level": settings.log_level,
    },
    "loggers": {
        "unrecorded.services.housekeeping": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        }
    },
}


logging.config.dictConfig(LOGGING_CONFIG)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.state.session_factory = SessionLocal
app.state.housekeeping = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", tags=["system"])
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok", "environment": settings.environment}


@app.on_event("startup")
async def _startup() -> None:
    if settings.housekeeping_enabled:
        scheduler = HousekeepingScheduler(
            settings.housekeeping_run_at,
            session_factory=app.state.session_factory,
        )
        await scheduler.start()
        app.state.housekeeping = scheduler


@app.on_event("shutdown")
async def _shutdown() -> None:
    scheduler = app.state.housekeeping
    if scheduler is not None:
        await scheduler.stop()
        app.state.housekeeping = None


app.include_router(api_router, prefix="/api")
app.include_router(metrics_router)
