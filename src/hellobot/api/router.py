from fastapi import APIRouter

from hellobot.api.routes.system import router as system_router
from hellobot.api.routes.telegram import router as telegram_router

api_router = APIRouter()
api_router.include_router(system_router)
api_router.include_router(telegram_router)
