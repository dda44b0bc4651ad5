# app/modules/router.py
from fastapi import APIRouter
from app.modules.chat.api.router import v1 as chat_router

router = APIRouter()
router.include_router(chat_router)
