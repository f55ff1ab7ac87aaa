"""
Request dependencies: the wired components and the caller's identity.

Handlers declare what they need (any signed-in user, or an admin) and
FastAPI resolves it before the handler body runs.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from paysheet.auth import ForbiddenError, UnauthorizedError
from paysheet.models.user import TokenUser
from paysheet.orchestrator import AppComponents


bearer_scheme = HTTPBearer(auto_error=False)


def get_components(request: Request) -> AppComponents:
    return request.app.state.components


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    components: AppComponents = Depends(get_components),
) -> TokenUser:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access denied. No token provided.")
    return components.auth.identify(credentials.credentials)


def require_admin(user: TokenUser = Depends(get_current_user)) -> TokenUser:
    # Role was lower-cased when the token was decoded.
    if not user.is_admin:
        raise ForbiddenError("Access denied. Admin privileges required.")
    return user
