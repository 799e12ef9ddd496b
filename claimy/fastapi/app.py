"""
FastAPI application exposing the claim scheduler commands.

The scheduler is created and entered for the lifetime of the app, so recovery runs at
startup and a final snapshot is written at shutdown.
"""

from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI

from claimy.fastapi.endpoints import add_endpoints, add_exception_handlers
from claimy.scheduler import Scheduler, create_scheduler


def create_app(scheduler_factory: Callable[[], Scheduler] = create_scheduler) -> FastAPI:
    scheduler_holder: dict[str, Scheduler] = {}

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """
        Manage the application lifecycle.

        Enters the scheduler on startup and exits it (snapshotting state) on shutdown.
        """
        scheduler = scheduler_factory()
        async with scheduler:
            scheduler_holder["scheduler"] = scheduler
            add_endpoints(fastapi_app, scheduler)
            yield
        scheduler_holder.clear()

    fastapi_app = FastAPI(
        title="Claimy",
        description="Claim / queue / offer scheduler for shared respawns",
        version="0.1.0",
        lifespan=lifespan,
    )
    add_exception_handlers(fastapi_app)

    @fastapi_app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns:
            dict: Application health status
        """
        scheduler = scheduler_holder.get("scheduler")
        return {
            "status": "healthy",
            "scheduler_active": scheduler is not None,
            "reconnecting": scheduler.reconnecting if scheduler else False,
        }

    return fastapi_app


app = create_app()
