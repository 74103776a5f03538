"""API routes."""

from fastapi import APIRouter

from quotes_api.routes import quotes

api_router = APIRouter()

# REST quote endpoints
api_router.include_router(quotes.router, prefix="/api/quotes", tags=["quotes"])
