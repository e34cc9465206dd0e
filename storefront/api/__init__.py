# ==============================================================================
# API PACKAGE INITIALIZATION
# ==============================================================================

"""
API Layer
=========

- router: Aggregated API router
- dependencies: Authentication, database and service injection
- v1: Endpoint modules
"""

from storefront.api.router import api_router

__all__ = ["api_router"]
