from fastapi import APIRouter
from app.api import health
from app.features.notes.api import router as notes_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(notes_router)
api_router.include_router(health.router)
