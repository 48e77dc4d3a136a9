"""
devboard/routes_auth.py

Auth endpoints: registration, email verification, login/logout, password
reset and token rotation.

[PUBLIC]    register, verify-email, login, forgot-password, reset-password, refresh
[AUTH_ONLY] logout, profile, rotate-keys
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from devboard.auth_context import AuthContext, require_auth_context
from devboard.dependencies import get_identity_store
from devboard.identity import IdentityStore
from devboard.models import PublicUser
from devboard.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailRequest,
)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(req: RegisterRequest, identity: IdentityStore = Depends(get_identity_store)):
    user = identity.register(req.username, req.email, req.fullname, req.password)
    return RegisterResponse(user=user)


@router.post("/verify-email", response_model=MessageResponse)
def verify_email(req: VerifyEmailRequest, identity: IdentityStore = Depends(get_identity_store)):
    identity.verify_email(req.token)
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, identity: IdentityStore = Depends(get_identity_store)):
    result = identity.login(req.email, req.password)
    return LoginResponse(
        user=result.user,
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    ctx: AuthContext = Depends(require_auth_context),
    identity: IdentityStore = Depends(get_identity_store),
):
    identity.logout(ctx.user_id)
    return MessageResponse(message="User logged out successfully")


@router.get("/profile", response_model=PublicUser)
def profile(
    ctx: AuthContext = Depends(require_auth_context),
    identity: IdentityStore = Depends(get_identity_store),
):
    return identity.get_profile(ctx.user_id)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(req: ForgotPasswordRequest, identity: IdentityStore = Depends(get_identity_store)):
    identity.request_password_reset(req.email)
    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(req: ResetPasswordRequest, identity: IdentityStore = Depends(get_identity_store)):
    identity.reset_password(req.token, req.new_password, req.confirm_password)
    return MessageResponse(message="Password reset successfully")


@router.post("/rotate-keys", response_model=TokenResponse)
def rotate_keys(
    ctx: AuthContext = Depends(require_auth_context),
    identity: IdentityStore = Depends(get_identity_store),
):
    pair = identity.rotate_keys(ctx.user_id)
    return TokenResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/refresh", response_model=TokenResponse)
def refresh(req: RefreshRequest, identity: IdentityStore = Depends(get_identity_store)):
    """Exchange a refresh token for a new pair (rotation; the old one stops working)."""
    pair = identity.refresh(req.refresh_token)
    return TokenResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)
