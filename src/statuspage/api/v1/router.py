from fastapi import APIRouter

from src.statuspage.api.v1 import admin, public

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(public.router)
api_router.include_router(admin.router)
