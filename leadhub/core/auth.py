from dataclasses import dataclass

from jose import JWTError, jwt
from starlette.requests import Request

from leadhub.core.config import get_settings
from leadhub.core.errors import AuthenticationError


@dataclass
class AuthUser:
    sub: str
    role: str


async def get_current_user(request: Request) -> AuthUser:
    auth_header = request.headers.get("authorization", "")
    token = auth_header.replace("Bearer ", "") if auth_header.startswith("Bearer ") else ""
    if not token:
        raise AuthenticationError("Access token required")

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError("Invalid or expired token") from exc

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid or expired token")
    role = str(payload.get("role", "user")).lower()
    if role not in {"user", "admin"}:
        role = "user"
    return AuthUser(sub=str(subject), role=role)
