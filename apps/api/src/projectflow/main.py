from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from projectflow.core.config import settings
from projectflow.core.logging import configure_logging

from projectflow.api.health import router as health_router
from projectflow.api.workspaces import router as workspaces_router
from projectflow.api.events import router as events_router

configure_logging()

app = FastAPI(title="Projectflow API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(workspaces_router)
app.include_router(events_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("projectflow.main:app", host=settings.API_HOST, port=settings.API_PORT)
