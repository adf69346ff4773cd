"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Callable, Optional
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from fleet_deductions.domain.enums import UserRole
from fleet_deductions.infrastructure.clients.email import EmailClient
from fleet_deductions.infrastructure.database.models import User
from fleet_deductions.infrastructure.database.repositories import UserRepository
from fleet_deductions.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_email_client() -> EmailClient:
    """Provide mail relay client instance"""
    return EmailClient()


def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id, set by the API gateway"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user; authentication itself happens upstream"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing user id")
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user id")

    user = UserRepository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory rejecting users outside the given roles"""
    allowed = {role.value for role in roles}

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker
