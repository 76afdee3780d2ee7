from fastapi import APIRouter
from launchcache.api.endpoints import launches

api_router = APIRouter()

api_router.include_router(launches.router, prefix="/launches", tags=["launches"])
