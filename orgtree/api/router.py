from fastapi import APIRouter

from orgtree.api.v1.router import api_v1_router
from orgtree.core.config import settings

api_router = APIRouter()

api_router.include_router(api_v1_router)


@api_router.get("/version")
def get_version():
    return {"version": settings.app_version, "api_version": "v1"}
