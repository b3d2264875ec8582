"""API router aggregation."""

from fastapi import APIRouter

from allmind.routes.api import chinvex, repos, services, strap

router = APIRouter(prefix="/api", tags=["api"])
router.include_router(repos.router)
router.include_router(strap.router)
router.include_router(services.router)
router.include_router(chinvex.router)
