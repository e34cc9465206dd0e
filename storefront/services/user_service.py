# ==============================================================================
# USER SERVICE - Authentication & User Management
# ==============================================================================
# Business logic for accounts, login and profile management
# ==============================================================================

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from storefront.core.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    BadRequestError,
    BusinessRuleError,
)
from storefront.core.constants import DatabaseConstants, ErrorMessages, UserRoles
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.schemas.user import (
    AuthResponse,
    PasswordChange,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from storefront.services.base_service import BaseService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class UserService(BaseService[UserResponse]):
    """
    User service for authentication and profile management.

    Provides registration, login, profile updates, password changes
    and the admin account listing.
    """

    _not_found_message = ErrorMessages.USER_NOT_FOUND

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        """Initialize user service."""
        super().__init__(adapter, DatabaseConstants.USERS_COLLECTION)

    def _to_response(self, entity: Dict[str, Any]) -> UserResponse:
        """Convert user document to response schema."""
        return UserResponse.model_validate(entity)

    def _issue(self, user: Dict[str, Any]) -> AuthResponse:
        token = create_access_token(subject=user["id"], additional_claims={"role": user.get("role")})
        return AuthResponse(user=self._to_response(user), token=token)

    # ==========================================================================
    # AUTHENTICATION
    # ==========================================================================

    async def register(self, schema: UserCreate) -> Tuple[Dict[str, Any], AuthResponse]:
        """
        Register a new user.

        Returns:
            Tuple of (stored user document, auth response)

        Raises:
            AlreadyExistsError: If email or username is taken
        """
        if await self._adapter.exists(self._collection_name, {"email": schema.email}):
            raise AlreadyExistsError(message="Email already registered", resource_type="user")
        if await self._adapter.exists(self._collection_name, {"username": schema.username}):
            raise AlreadyExistsError(message="Username already taken", resource_type="user")

        user = await self._insert({
            "username": schema.username,
            "email": schema.email,
            "hashed_password": hash_password(schema.password),
            "role": UserRoles.USER,
            "is_active": True,
            "shipping_address": None,
            "cart": [],
            "wishlist": [],
            "last_login": None,
        })
        logger.info(f"Registered user {user['id']}")
        return user, self._issue(user)

    async def authenticate(self, email: str, password: str) -> AuthResponse:
        """
        Authenticate user and issue a token.

        Raises:
            AuthenticationError: If credentials invalid or account deactivated
        """
        user = await self._adapter.find_one(self._collection_name, {"email": email.lower()})

        if not user or not verify_password(password, user.get("hashed_password", "")):
            raise AuthenticationError(message=ErrorMessages.INVALID_CREDENTIALS)

        if not user.get("is_active", True):
            raise AuthenticationError(message=ErrorMessages.ACCOUNT_DEACTIVATED)

        user = await self._adapter.update(
            self._collection_name,
            user["id"],
            {"last_login": utc_now()},
        ) or user
        return self._issue(user)

    # ==========================================================================
    # USER OPERATIONS
    # ==========================================================================

    async def get_document(self, user_id: str) -> Dict[str, Any]:
        """Raw user document, including cart and wishlist."""
        return await self._get_document(user_id)

    async def update_profile(self, user_id: str, schema: UserUpdate) -> UserResponse:
        """
        Update username, email or saved shipping address.

        Raises:
            AlreadyExistsError: If the new email or username belongs to another user
        """
        data = schema.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            raise BadRequestError(message="No fields to update")

        for field in ("email", "username"):
            if field in data:
                other = await self._adapter.find_one(self._collection_name, {field: data[field]})
                if other and other["id"] != user_id:
                    raise AlreadyExistsError(
                        message=f"{field.capitalize()} already in use",
                        resource_type="user",
                    )

        data["updated_at"] = utc_now()
        user = await self._adapter.update(self._collection_name, user_id, data)
        if not user:
            await self._get_document(user_id)
        return self._to_response(user)

    async def save_shipping_address(self, user_id: str, address: Dict[str, Any]) -> None:
        await self._adapter.update(
            self._collection_name,
            user_id,
            {"shipping_address": address, "updated_at": utc_now()},
        )

    async def change_password(self, user_id: str, schema: PasswordChange) -> None:
        """
        Replace the password after checking the current one.

        Raises:
            BadRequestError: If the current password is wrong
        """
        user = await self._get_document(user_id)
        if not verify_password(schema.current_password, user.get("hashed_password", "")):
            raise BadRequestError(message="Current password is incorrect")

        await self._adapter.update(
            self._collection_name,
            user_id,
            {"hashed_password": hash_password(schema.new_password), "updated_at": utc_now()},
        )

    async def first_admin(self) -> Optional[Dict[str, Any]]:
        admins = await self._adapter.get_all(
            self._collection_name,
            limit=1,
            filters={"role": UserRoles.ADMIN, "is_active": True},
            sort_by="created_at",
        )
        return admins[0] if admins else None

    # ==========================================================================
    # ADMIN OPERATIONS
    # ==========================================================================

    async def list_users(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
    ) -> Tuple[List[UserResponse], Pagination]:
        filters: Dict[str, Any] = {}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            filters["$or"] = [{"username": pattern}, {"email": pattern}]
        return await self.get_paginated(page, limit, filters)

    async def set_active(self, admin_id: str, user_id: str, is_active: bool) -> UserResponse:
        """
        Activate or deactivate an account.

        Raises:
            BusinessRuleError: If an admin tries to deactivate themselves
        """
        if admin_id == user_id and not is_active:
            raise BusinessRuleError(
                message="You cannot deactivate your own account",
                rule="self_deactivation",
            )
        await self._get_document(user_id)
        user = await self._adapter.update(
            self._collection_name,
            user_id,
            {"is_active": is_active, "updated_at": utc_now()},
        )
        logger.info(f"User {user_id} is_active set to {is_active} by {admin_id}")
        return self._to_response(user)
