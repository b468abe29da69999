from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from timegrid.core.security import decode_token
from timegrid.db.session import SessionLocal
from timegrid.models.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _token_subject(token: str) -> str:
    try:
        subject = decode_token(token).get("sub")
    except JWTError as exc:
        raise _unauthorized() from exc
    if not subject:
        raise _unauthorized()
    return subject


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    user = db.get(User, _token_subject(credentials.credentials))
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency that lets only ``roles`` through; everyone else gets 403."""
    allowed = frozenset(roles)

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of: {', '.join(sorted(role.value for role in allowed))}",
            )
        return current_user

    return checker


# Viewers may read the board; only these roles may change it.
require_editor = require_roles(UserRole.admin, UserRole.scheduler)
