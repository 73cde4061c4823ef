from fastapi import APIRouter

from questlog.api.v1.endpoints import auth, health, items, players, quests

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(items.router)
api_router.include_router(quests.router)
api_router.include_router(players.router)
