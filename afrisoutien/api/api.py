"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from afrisoutien.api.endpoints import (admin, admin_content, admin_reports, auth,
                                       boutique, campaigns, content, donations,
                                       users)

api_router = APIRouter()

# Auth (register, login, refresh, verification, password reset)
api_router.include_router(auth.router)

# Public platform: campaigns, donations, boutique, self-service
api_router.include_router(campaigns.router)
api_router.include_router(donations.router)
api_router.include_router(boutique.router)
api_router.include_router(users.router)

# Contact, pages, health
api_router.include_router(content.router)

# Back-office
api_router.include_router(admin.router)
api_router.include_router(admin_reports.router)
api_router.include_router(admin_content.router)
