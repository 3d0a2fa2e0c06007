"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from guide_api.api.v1.endpoints import appadmin, auth, business, secret, system

api_router = APIRouter()

# Registration, login, self-service profile
api_router.include_router(auth.router)

# Admin account management
api_router.include_router(appadmin.router)

# Business filing, approval, dedicated accounts
api_router.include_router(business.router)

# Role-guard checks and health
api_router.include_router(secret.router)
api_router.include_router(system.router)
