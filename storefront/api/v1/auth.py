# ==============================================================================
# AUTH ENDPOINTS - Authentication Routes
# ==============================================================================
# Signup, login and the current user's profile
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, status

from storefront.api.dependencies import (
    AnalyticsServiceDep,
    CurrentUser,
    CurrentUserID,
    NotificationServiceDep,
    UserServiceDep,
)
from storefront.core.constants import AnalyticsEvents, SuccessMessages
from storefront.schemas.base import APIResponse
from storefront.schemas.user import (
    AuthResponse,
    PasswordChange,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from storefront.services.effects import PostCommitEffects

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=APIResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a customer account and return an access token.",
)
async def signup(
    schema: UserCreate,
    service: UserServiceDep,
    notifications: NotificationServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[AuthResponse]:
    """Register a new user."""
    user, auth = await service.register(schema)

    effects = PostCommitEffects(f"signup {user['id']}")
    effects.add("track_registration", analytics.track_user_event, AnalyticsEvents.USER_REGISTRATION, user["id"])
    effects.add("notify_welcome", notifications.notify_welcome, user)
    await effects.run()

    return APIResponse.ok(data=auth, message=SuccessMessages.USER_REGISTERED)


@router.post(
    "/login",
    response_model=APIResponse[AuthResponse],
    summary="User login",
    description="Authenticate with email and password to receive a JWT.",
)
async def login(
    credentials: UserLogin,
    service: UserServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[AuthResponse]:
    auth = await service.authenticate(credentials.email, credentials.password)
    await analytics.track_safely(AnalyticsEvents.USER_LOGIN, user_id=auth.user.id)
    return APIResponse.ok(data=auth, message=SuccessMessages.LOGIN_SUCCESS)


@router.get(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Get current user",
)
async def me(user: CurrentUser) -> APIResponse[UserResponse]:
    return APIResponse.ok(data=UserResponse.model_validate(user))


@router.put(
    "/profile",
    response_model=APIResponse[UserResponse],
    summary="Update profile",
    description="Change username, email or the saved shipping address.",
)
async def update_profile(
    user_id: CurrentUserID,
    schema: UserUpdate,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    user = await service.update_profile(user_id, schema)
    return APIResponse.ok(data=user, message=SuccessMessages.PROFILE_UPDATED)


@router.put(
    "/change-password",
    response_model=APIResponse[dict],
    summary="Change password",
)
async def change_password(
    user_id: CurrentUserID,
    schema: PasswordChange,
    service: UserServiceDep,
) -> APIResponse[dict]:
    await service.change_password(user_id, schema)
    return APIResponse.ok(message=SuccessMessages.PASSWORD_CHANGED)
