from fastapi import APIRouter

from .endpoints import aggregated, events, health

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(events.router)
api_router.include_router(aggregated.router)
