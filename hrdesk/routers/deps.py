"""
Request dependencies: the authenticated account and its membership in the
company named by the `company_id` path parameter.
"""
import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hrdesk.core.exceptions import NotAuthenticatedError
from hrdesk.database import get_db
from hrdesk.models.user import User
from hrdesk.services import auth as auth_service
from hrdesk.services.membership import MembershipResolver, ResolvedMembership

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else request.cookies.get("token")
    if not token:
        raise NotAuthenticatedError()

    payload = auth_service.decode_access_token(token)
    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise NotAuthenticatedError("Could not validate credentials")
    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise NotAuthenticatedError("Token expired")
    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise NotAuthenticatedError("Invalid token type")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise NotAuthenticatedError("Missing subject in token")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Authentication failed: User {user_id} not found or inactive")
        raise NotAuthenticatedError("User not found")
    return user


def get_membership(
    company_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ResolvedMembership:
    return MembershipResolver(db).resolve(current_user.id, company_id)
