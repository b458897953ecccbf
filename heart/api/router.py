"""
Heart: Main API Router

Aggregates all sub-routers so that ``heart.main`` can mount the entire API
surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from heart.api import matches, messages, swipes, users

router = APIRouter()

router.include_router(users.router, tags=["Users"])
router.include_router(swipes.router, tags=["Swipes"])
router.include_router(matches.router, tags=["Matches"])
router.include_router(messages.router, tags=["Chat"])
