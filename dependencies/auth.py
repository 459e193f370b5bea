from fastapi import HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from schemas.auth_schema import UserAuthInfo
from utils.jwt_utils import read_claims, is_expired

logger = logging.getLogger("auth")

# Security scheme for bearer token
security = HTTPBearer(
    scheme_name="JWT Authentication",
    description="Token JWT del backend (sin el prefijo 'bearer')",
    auto_error=False
)


class AuthContext:
    """
    Bearer token of the console session, forwarded to the dealership backend.

    Created per request from the Authorization header and handed explicitly to
    the API client; discard() drops the token when the session ends.
    """

    def __init__(self, token: Optional[str], user: Optional[UserAuthInfo] = None):
        self.token = token
        self.user = user or UserAuthInfo()

    @classmethod
    def from_token(cls, token: str) -> "AuthContext":
        claims = read_claims(token)
        if is_expired(claims):
            raise ValueError("Token expirado")
        user = UserAuthInfo(
            user_id=claims.get("user_id") or claims.get("userId"),
            email=claims.get("email") or claims.get("sub"),
            role=claims.get("role"),
            permissions=claims.get("permissions") or [],
        )
        return cls(token, user)

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls(None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def discard(self) -> None:
        self.token = None
        self.user = UserAuthInfo()


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> AuthContext:
    """
    Build the AuthContext for this request.

    Requests without a token get an anonymous context (the backend decides
    whether it accepts them); a malformed or expired token is rejected here.
    """
    if not credentials:
        return AuthContext.anonymous()

    try:
        context = AuthContext.from_token(credentials.credentials)
    except ValueError as e:
        logger.warning(f"Token rechazado: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token inválido: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )
    logger.debug(f"Sesión de consola para {context.user.email}, rol: {context.user.role}")
    return context
