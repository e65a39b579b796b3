from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth import get_optional_user

router = APIRouter(prefix="/auth", tags=["Auth"])


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


class AuthUserResponse(BaseModel):
    user: Optional[AuthUser] = None


@router.get("/user", response_model=AuthUserResponse)
async def get_auth_user(user: Optional[dict] = Depends(get_optional_user)):
    """Who is signed in; ``user`` is null for anonymous requests"""
    return {"user": user}
