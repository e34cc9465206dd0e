# ==============================================================================
# STOREFRONT PACKAGE INITIALIZATION
# ==============================================================================
# E-commerce storefront API with FastAPI, MongoDB and Stripe
# ==============================================================================

"""
Storefront API
==============

Backend for an online store: catalog, cart and wishlist, checkout through
Stripe, webhook reconciliation of payments, and an admin back-office.

Features:
---------
- Product catalog with categories, filtering and search
- Per-user cart and wishlist stored on the user document
- Order creation with atomic stock reservation
- Stripe payment intents, hosted checkout sessions and signed webhooks
- Reviews, order messages, notifications and analytics
- JWT-based authentication with admin roles

Usage:
------
    from storefront.main import app

    # Run with uvicorn
    uvicorn storefront.main:app --reload
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
