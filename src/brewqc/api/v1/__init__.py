"""API v1 module."""

from fastapi import APIRouter

from brewqc.api.v1.endpoints import health, quality

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(quality.router, prefix="/quality", tags=["quality"])
