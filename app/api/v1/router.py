from fastapi import APIRouter

from app.api.v1 import comics, creator, moderation


api_router = APIRouter(prefix="/v1")

api_router.include_router(creator.router)
api_router.include_router(moderation.router)
api_router.include_router(comics.router)
