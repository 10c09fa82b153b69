"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from fit_planner.api.admin import router as admin_router
from fit_planner.api.models import (
    DietPlanRequest,
    WorkoutPlanRequest,
    error_envelope,
    is_rejected,
    report_envelope,
)
from fit_planner.app_logging import configure_logging
from fit_planner.containers import AppContainer
from fit_planner.errors import GenerationError, GenerationTimeoutError
from fit_planner.services.reporting import generation_error_body

_logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499

T = TypeVar("T")


async def cancel_on_disconnect(
    request: Request,
    call: Awaitable[T],
    *,
    poll_seconds: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """Await a service call, cancelling it if the client disconnects first."""
    task = asyncio.ensure_future(call)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_seconds)
            if done:
                return task.result()
            if await request.is_disconnected():
                _logger.info("Client disconnected: path=%s", request.url.path)
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise HTTPException(
                    status_code=CLIENT_CLOSED_REQUEST, detail="Client disconnected"
                )
    finally:
        if not task.done():
            task.cancel()


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(GenerationError)
    async def generation_error_handler(
        request: Request, exc: GenerationError
    ) -> JSONResponse:
        status_code = (
            status.HTTP_504_GATEWAY_TIMEOUT
            if isinstance(exc, GenerationTimeoutError)
            else status.HTTP_502_BAD_GATEWAY
        )
        _logger.warning(
            "Generation error: path=%s code=%s message=%s",
            request.url.path,
            exc.code,
            exc.message,
        )
        return JSONResponse(
            status_code=status_code,
            content=error_envelope(generation_error_body(exc)),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/diet/generate")
    async def generate_diet(payload: DietPlanRequest, request: Request) -> JSONResponse:
        """Generate a validated meal plan."""
        container: AppContainer = request.app.state.container
        report = await cancel_on_disconnect(
            request,
            container.diet_plan_service.generate(
                payload.profile,
                payload.preferences,
                payload.nutrition_target,
                payload.plan_day,
            ),
        )
        return JSONResponse(
            status_code=(
                status.HTTP_422_UNPROCESSABLE_ENTITY
                if is_rejected(report)
                else status.HTTP_200_OK
            ),
            content=report_envelope(report),
        )

    @app.post("/workout/generate")
    async def generate_workout(
        payload: WorkoutPlanRequest, request: Request
    ) -> JSONResponse:
        """Generate a workout grounded on catalog exercises."""
        container: AppContainer = request.app.state.container
        report = await cancel_on_disconnect(
            request,
            container.workout_plan_service.generate(
                payload.profile,
                payload.workout_type,
                payload.duration_minutes,
                payload.plan_day,
            ),
        )
        return JSONResponse(
            status_code=(
                status.HTTP_422_UNPROCESSABLE_ENTITY
                if is_rejected(report)
                else status.HTTP_200_OK
            ),
            content=report_envelope(report),
        )

    @app.get("/exercises/search")
    async def search_exercises(  # noqa: PLR0913
        request: Request,
        query: str | None = None,
        body_part: str | None = None,
        equipment: str | None = None,
        muscle: str | None = None,
        limit: int = Query(default=20, ge=1, le=100),
        offset: int = Query(default=0, ge=0),
    ) -> dict[str, object]:
        """Search the exercise catalog."""
        container: AppContainer = request.app.state.container
        catalog = await container.catalog_service.get_catalog()
        page = catalog.search(
            query,
            body_part=body_part,
            equipment=equipment,
            muscle=muscle,
            limit=limit,
            offset=offset,
        )
        return {
            "exercises": [
                {
                    "id": entry.id,
                    "name": entry.name,
                    "body_part": entry.body_part,
                    "target_muscles": sorted(entry.target_muscles),
                    "equipment": entry.equipment,
                    "media_ref": entry.media_ref,
                }
                for entry in page.exercises
            ],
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "has_more": page.has_more,
        }

    return app
