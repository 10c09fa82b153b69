"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from fit_planner.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health(request: Request) -> dict[str, object]:
    """Admin health check endpoint."""
    container: AppContainer = request.app.state.container
    return {
        "status": "ok",
        "environment": container.settings.environment,
        "cache_backend": container.settings.plan_cache_backend,
        "in_flight": container.coordinator.in_flight_count(),
    }


@router.get("/catalog", dependencies=[Depends(require_admin)])
async def catalog_summary(request: Request) -> dict[str, object]:
    """Return catalog size and media coverage."""
    container: AppContainer = request.app.state.container
    catalog = await container.catalog_service.get_catalog()
    return {
        "total": len(catalog),
        "with_media": len(catalog.with_media()),
        "media_coverage": round(catalog.media_coverage(), 4),
    }


@router.delete("/cache/{fingerprint}", dependencies=[Depends(require_admin)])
async def invalidate_cache(fingerprint: str, request: Request) -> dict[str, object]:
    """Drop a cached plan so the next request regenerates it."""
    container: AppContainer = request.app.state.container
    removed = await container.coordinator.invalidate(fingerprint)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"fingerprint": fingerprint, "removed": True}
