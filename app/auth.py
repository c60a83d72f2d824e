from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.security import decode_token
from app.core.permissions import Principal, ADMIN_ROLE

# Use HTTPBearer for JWT token authentication
# This will show a simple "Authorize" button in Swagger UI where you can paste your JWT token
security = HTTPBearer()


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """
    Build the calling principal from a verified JWT.

    Identity is owned by the upstream user service, so no user lookup happens
    here: the token claims are the identity profile.

    Args:
        credentials: HTTP Bearer credentials containing the JWT token

    Returns:
        Principal for the caller

    Raises:
        HTTPException: If token is invalid or not an access token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise credentials_exception

    if payload.get("type", "access") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise credentials_exception

    return Principal(
        user_id=str(user_id),
        role=payload.get("role") or "user",
        name=payload.get("name"),
        email=payload.get("email"),
    )


def role_required(required_role: str):
    """
    Dependency to require specific role for endpoint access.

    Args:
        required_role: Role name required (e.g., 'admin')

    Returns:
        Dependency function
    """
    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != required_role and principal.role != ADMIN_ROLE:
            raise HTTPException(status_code=403, detail="Forbidden")
        return principal
    return role_checker


admin_required = role_required(ADMIN_ROLE)
