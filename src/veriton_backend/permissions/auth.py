"""
Principal resolution.

Turns the claims of an authenticated request into a ``Principal``. Token
validation is delegated to an authenticator; the default one decodes an HS256
bearer token with python-jose.
"""

import logging
from typing import Annotated, Any, Dict, Mapping, Optional
from uuid import UUID
from fastapi import Depends, Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import JWTError, jwt

from veriton_backend.api.exceptions import UnauthorizedException
from veriton_backend.permissions.principal import Principal, Role
from veriton_backend.settings import settings

logger = logging.getLogger(__name__)

ROLE_CLAIMS = ("role", "Role", "http://schemas.microsoft.com/ws/2008/06/identity/claims/role")
USER_ID_CLAIMS = ("UserId", "user_id", "sub")


def _claim(claims: Mapping[str, Any], *names: str) -> Optional[Any]:
    for name in names:
        value = claims.get(name)
        if value not in (None, ""):
            return value
    return None


def _uuid_claim(claims: Mapping[str, Any], *names: str) -> Optional[str]:
    value = _claim(claims, *names)
    if value is None:
        return None
    try:
        return str(UUID(str(value)))
    except ValueError:
        logger.warning("Ignoring malformed %s claim", names[0])
        return None


def parse_role(value: Optional[str]) -> Optional[Role]:
    """Map a role claim onto ``Role``; unknown roles are rejected"""
    if value is None or str(value).strip() == "":
        return None

    normalized = str(value).strip().lower()
    for role in Role:
        if role.value.lower() == normalized:
            return role

    logger.warning("Rejecting unknown role claim %r", value)
    raise UnauthorizedException("Unknown role")


def principal_from_claims(claims: Optional[Mapping[str, Any]]) -> Principal:
    """Build a principal from decoded token claims.

    ``None`` means no authentication took place and yields an anonymous
    principal, which sees nothing.
    """
    if claims is None:
        return Principal.anonymous()

    return Principal(
        is_authenticated=True,
        role=parse_role(_claim(claims, *ROLE_CLAIMS)),
        user_id=_uuid_claim(claims, *USER_ID_CLAIMS),
        school_id=_uuid_claim(claims, "SchoolId"),
        teacher_id=_uuid_claim(claims, "TeacherId"),
        student_id=_uuid_claim(claims, "StudentId"),
        grade_id=_uuid_claim(claims, "GradeId"),
    )


class JWTAuthenticator:
    """Validates bearer tokens and returns their claims"""

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm], options={"verify_aud": False})
        except JWTError as e:
            logger.info(f"Token rejected: {e}")
            raise UnauthorizedException("Invalid authentication credentials")


def get_authenticator() -> JWTAuthenticator:
    return JWTAuthenticator(settings.JWT_SECRET_KEY, settings.JWT_ALGORITHM)


def get_current_principal(request: Request, authenticator: Annotated[JWTAuthenticator, Depends(get_authenticator)]) -> Principal:
    """FastAPI dependency resolving the principal of the current request"""

    authorization = request.headers.get("Authorization")
    scheme, token = get_authorization_scheme_param(authorization)

    if not authorization:
        return Principal.anonymous()

    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedException("Unsupported authorization scheme")

    return principal_from_claims(authenticator.decode(token))
