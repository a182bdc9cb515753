from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import decode_access_token
from app.domain.lease import SignerIdentity

security = HTTPBearer(auto_error=False)


class UserRole(str, Enum):
    TENANT = "TENANT"
    LANDLORD = "LANDLORD"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: UserRole
    email: Optional[str] = None
    name: Optional[str] = None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        role = UserRole(str(payload.get("role", "")).upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown role")

    return CurrentUser(
        id=str(user_id),
        role=role,
        email=payload.get("email"),
        name=payload.get("name"),
    )


def require_role(*roles: UserRole):
    def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user
    return role_checker


def signer_identity(user: CurrentUser, request: Request) -> SignerIdentity:
    """Resolve client IP and user agent for the signature audit trail."""
    client_ip = (
        request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else None)
    )
    return SignerIdentity(
        user_id=user.id,
        name=user.name,
        email=user.email,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
    )
