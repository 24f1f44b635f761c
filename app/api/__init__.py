# API module exports
from app.api import errors, health
from app.api.base import api_router

__all__ = ["errors", "health", "api_router"]
