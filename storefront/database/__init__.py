# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================
# Document store abstraction over MongoDB
# ==============================================================================

"""
Database Module
===============

Key Components:
- Adapters: BaseDatabaseAdapter interface and the Motor implementation
- Factory: Adapter singleton, index creation and health checks
"""

from storefront.database.factory import DatabaseFactory
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter

__all__ = [
    "DatabaseFactory",
    "BaseDatabaseAdapter",
]
