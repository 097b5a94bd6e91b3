# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..errors import AuthenticationRequired
from .models import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from .security import create_access_token, get_current_user, hash_password, verify_password
from .storage import create_user, get_user_by_email

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _user_public(row: dict) -> UserPublic:
    return UserPublic(id=row["id"], email=row["email"], created_at=row["created_at"])


def _auth_response(user: dict) -> AuthResponse:
    token = create_access_token(user_id=user["id"], email=user["email"])
    return AuthResponse(user=_user_public(user), access_token=token)


@router.post("/register", response_model=AuthResponse, summary="Register a new user")
def register(request: RegisterRequest):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    user = create_user(email=request.email, password_hash=hash_password(request.password))
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest):
    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        raise AuthenticationRequired("Invalid email or password")
    return _auth_response(user)


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return _user_public(user)
