from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import (
    AuthContext,
    create_access_token,
    get_auth_context,
    get_current_user,
    hash_password,
    verify_password,
)
from ..models import UserEntity
from ..repositories import EmailAlreadyRegistered, UserRepository, get_user_repository
from ..schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: UserEntity) -> AuthResponse:
    token, _ = create_access_token(user["id"])
    return AuthResponse(token=token, **user)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return its public fields with a bearer token.",
    responses={400: {"description": "Validation error or email already registered"}},
)
def register(payload: RegisterRequest, users: UserRepository = Depends(get_user_repository)) -> AuthResponse:
    if users.get_by_email(payload.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
    try:
        user = users.create(payload.name, payload.email, hash_password(payload.password))
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists")
    logger.info("Registered user %s", user["id"])
    return _auth_response(user)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange email and password for a bearer token.",
    responses={401: {"description": "Invalid email or password"}},
)
def login(payload: LoginRequest, users: UserRepository = Depends(get_user_repository)) -> AuthResponse:
    user = users.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user["password_hash"]):
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return _auth_response(user)


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserOut, summary="Current user")
def me(user: UserEntity = Depends(get_current_user)) -> UserOut:
    return UserOut(**user)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post("/logout", response_model=MessageResponse, summary="Logout")
def logout(
    ctx: AuthContext = Depends(get_auth_context),
    users: UserRepository = Depends(get_user_repository),
) -> MessageResponse:
    """
    Revoke the presented bearer token. Other tokens of the same user stay valid.
    """
    users.revoke_token(ctx.jti, ctx.expires_at)
    logger.info("User %s logged out", ctx.user["id"])
    return MessageResponse(message="Logged out")
