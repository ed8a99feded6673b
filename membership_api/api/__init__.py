"""HTTP API: routers, dependencies and endpoints."""

from membership_api.api.router import api_router

__all__ = ["api_router"]
