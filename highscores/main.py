import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from .core.events import shutdown_event, startup_event
from .routes import health, leaderboard, users
from .storage import SnapshotStore


def create_app(store: Optional[SnapshotStore] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup_event(app, store)
        try:
            yield
        finally:
            await shutdown_event(app)

    app = FastAPI(
        default_response_class=ORJSONResponse,
        title="High Scores Tracker",
        description="Daily leaderboard snapshots, all-time records and player history",
        version="1.0.0",
        lifespan=lifespan
    )
    app.include_router(health.router)
    app.include_router(leaderboard.router)
    app.include_router(users.router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "highscores.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        log_level="info"
    )
