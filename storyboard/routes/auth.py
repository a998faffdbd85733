"""
Storyboard Backend — Auth Route Handlers
=========================================

What:  POST /api/auth/login, POST /api/auth/logout, GET /api/auth/status.
How:   Thin wrappers over AuthService operating on request.session
       (Starlette SessionMiddleware, signed cookie).
"""

import logging

from fastapi import APIRouter, Request

from storyboard.schemas.part import (
    AuthResponse,
    AuthStatusResponse,
    ErrorResponse,
    LoginRequest,
)
from storyboard.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in as the editor",
)
async def login(payload: LoginRequest, request: Request) -> AuthResponse:
    await auth_service.login(request.session, payload.username, payload.password)
    return AuthResponse(message="Login successful")


@router.post("/logout", response_model=AuthResponse, summary="End the editor session")
async def logout(request: Request) -> AuthResponse:
    auth_service.logout(request.session)
    return AuthResponse(message="Logout successful")


@router.get(
    "/status",
    response_model=AuthStatusResponse,
    response_model_exclude_none=True,
    summary="Report whether this session is authenticated",
)
async def status(request: Request) -> AuthStatusResponse:
    return AuthStatusResponse(**auth_service.status(request.session))
