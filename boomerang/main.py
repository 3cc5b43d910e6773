import os
from fastapi import FastAPI
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from boomerang.api.endpoints import captures, tasks, contacts, cron, profile
from boomerang.services.scheduler_service import start_scheduler, stop_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - start/stop scheduler."""
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="Boomerang Capture API", version="0.1.0", lifespan=lifespan)


def _configured(var: str) -> str:
    return "configured" if os.getenv(var) else "not configured"


@app.get("/")
async def root():
    return {"message": "Boomerang Capture API is online"}


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "database": _configured("DATABASE_URL"),
            "openai": _configured("OPENAI_API_KEY"),
        },
    }

# Include routers
app.include_router(captures.router, prefix="/api/v1/captures", tags=["captures"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["tasks"])
app.include_router(contacts.router, prefix="/api/v1/contacts", tags=["contacts"])
app.include_router(profile.router, prefix="/api/v1/user/profile", tags=["profile"])
app.include_router(cron.router, prefix="/api/v1/cron", tags=["cron"])
