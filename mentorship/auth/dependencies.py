"""Bearer token verification and role/ownership checks shared by every router."""

import logging
from typing import Any, Callable, Coroutine

import jwt
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.routing import APIRoute
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from mentorship.auth import jwt_handler
from mentorship.models.session_request import SessionRequest
from mentorship.models.user import UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

SESSION_NOT_FOUND_DETAIL = "Session not found or unauthorized"


class TokenIdentity(BaseModel):
    user_id: int
    role: UserRole

    def as_payload(self) -> dict:
        return {"userId": self.user_id, "role": self.role.value}


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenIdentity:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
        )

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
        identity = TokenIdentity(user_id=payload.get("userId"), role=payload.get("role"))
    except (jwt.PyJWTError, ValidationError) as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.") from exc

    request.state.user = identity
    return identity


def require_role(*roles: UserRole, detail: str = "Access denied.") -> Callable[..., TokenIdentity]:
    """Build a dependency that admits only callers holding one of ``roles``."""
    allowed = frozenset(roles)

    def check_role(identity: TokenIdentity = Depends(get_current_identity)) -> TokenIdentity:
        if identity.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return identity

    return check_role


def role_gated_route(*roles: UserRole, detail: str = "Access denied.") -> type[APIRoute]:
    """Build a route class that rejects callers outside ``roles`` before the request body is read."""
    check_role = require_role(*roles, detail=detail)

    class RoleGatedRoute(APIRoute):
        def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
            route_handler = super().get_route_handler()

            async def gated_route_handler(request: Request) -> Response:
                credentials = await security(request)
                check_role(identity=get_current_identity(request, credentials))
                return await route_handler(request)

            return gated_route_handler

    return RoleGatedRoute


def get_owned_session(db: Session, session_id: int, owner: str, identity: TokenIdentity) -> SessionRequest:
    """Load a session request the caller owns as ``owner`` ("mentor" or "mentee").

    A missing row and a row owned by someone else are indistinguishable to the caller.
    """
    session_request = db.get(SessionRequest, session_id)
    if session_request is None or getattr(session_request, f"{owner}_id") != identity.user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SESSION_NOT_FOUND_DETAIL)
    return session_request
