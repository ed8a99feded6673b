"""API router aggregation.

Includes all endpoint modules with consistent tags. Paths are the ones the
UI calls (/api/projects, /api/data/{projectId}, /api/all-members,
/api/remove-member) plus health probes.
"""

from fastapi import APIRouter

from membership_api.api.endpoints import health, membership, projects, records

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(projects.router, tags=["projects"])
api_router.include_router(records.router, tags=["records"])
api_router.include_router(membership.router, tags=["membership"])
