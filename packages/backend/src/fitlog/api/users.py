"""User API — registration and the caller's own profile.

Learn: Routes handle HTTP concerns (status codes, error responses),
UserService handles the rules:
- POST /users → register (password hashed with bcrypt, never returned)
- GET /users/me → the authenticated caller
- PUT /users/me → change username/email/bio
- GET /users/search?q= → public profiles by username fragment
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from fitlog.auth.dependencies import get_current_user
from fitlog.db.models import User
from fitlog.errors import UserAlreadyExists
from fitlog.schemas.user import UserCreate, UserPublic, UserRead, UserUpdate
from fitlog.services.user_service import UserService
from fitlog.stores import UserStore, get_user_store

router = APIRouter(prefix="/users")


def _svc(users: UserStore = Depends(get_user_store)) -> UserService:
    return UserService(users)


@router.post("", response_model=UserRead, status_code=201)
async def register(body: UserCreate, svc: UserService = Depends(_svc)):
    """Create a new user account."""
    try:
        return await svc.register(
            username=body.username,
            email=body.email,
            password=body.password,
            bio=body.bio,
        )
    except UserAlreadyExists:
        raise HTTPException(status_code=409, detail="Username or email already registered")


@router.get("/me", response_model=UserRead)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserRead)
async def update_me(
    body: UserUpdate,
    user: User = Depends(get_current_user),
    svc: UserService = Depends(_svc),
):
    try:
        return await svc.update_profile(
            user,
            username=body.username,
            email=body.email,
            bio=body.bio,
        )
    except UserAlreadyExists:
        raise HTTPException(status_code=409, detail="Username or email already registered")


@router.get("/search", response_model=list[UserPublic])
async def search_users(
    q: str = Query(..., min_length=1, max_length=50),
    svc: UserService = Depends(_svc),
):
    return await svc.search(q)
