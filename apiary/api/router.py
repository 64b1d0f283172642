"""Top-level APIRouter for the Apiary REST API.

Sub-routers included:
- hives_router  - /hives, /hives/{id}, /hives/{id}/queens/{qid} (bearer auth, owner-scoped)
- queens_router - /queens, /queens/{id} (global)
- users_router  - /users (beekeeper registration and listing)
"""

from __future__ import annotations

from fastapi import APIRouter

from apiary.api.routes.hives import hives_router
from apiary.api.routes.queens import queens_router
from apiary.api.routes.users import users_router

api_router = APIRouter()

api_router.include_router(hives_router)
api_router.include_router(queens_router)
api_router.include_router(users_router)
