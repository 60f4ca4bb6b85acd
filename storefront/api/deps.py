# storefront/api/deps.py
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import ForbiddenError, UnauthorizedError
from storefront.repos.user_repo import UserRepo
from storefront.services import payment_client
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService


@dataclass(frozen=True)
class RequestContext:
    """Who is calling, resolved per request (no session-held state)."""

    user_id: int
    is_admin: bool


def get_request_context(
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
) -> RequestContext:
    if x_user_id is None:
        raise UnauthorizedError("Missing X-User-Id header")

    user = UserRepo(db).get_user(x_user_id)
    if not user:
        raise UnauthorizedError("Unknown user")

    return RequestContext(user_id=user.id, is_admin=user.is_admin)


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not ctx.is_admin:
        raise ForbiddenError("Admin access required")
    return ctx


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


def get_payment_client():
    return payment_client.get_payment_client()


def get_notification_service() -> NotificationService:
    return NotificationService()
