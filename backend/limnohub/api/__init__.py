"""API router package."""

from fastapi import APIRouter

from limnohub.api.v1 import abiotic_column, health

router = APIRouter()

router.include_router(health.router, tags=["Health"])
router.include_router(
    abiotic_column.router,
    prefix="/furnas/abiotico-coluna",
    tags=["Furnas"],
)
