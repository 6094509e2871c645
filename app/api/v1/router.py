"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1 import analytics, conversations, health, knowledge, proposals

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(proposals.router)
api_router.include_router(conversations.router)
api_router.include_router(knowledge.router)
api_router.include_router(analytics.router)


def get_api_router() -> APIRouter:
    return api_router
