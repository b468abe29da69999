import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timegrid.api.deps import get_current_user, get_db
from timegrid.core.config import get_settings
from timegrid.core.security import create_access_token, get_password_hash, verify_password
from timegrid.models.user import User, UserRole
from timegrid.schemas.user import Token, UserCreate, UserLogin, UserOut
from timegrid.services.rate_limit import rate_limited

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)

register_limit = rate_limited(
    "auth.register",
    limit=lambda: settings.auth_rate_limit_register_max_requests,
    window_seconds=lambda: settings.auth_rate_limit_window_seconds,
)
login_limit = rate_limited(
    "auth.login",
    limit=lambda: settings.auth_rate_limit_login_max_requests,
    window_seconds=lambda: settings.auth_rate_limit_window_seconds,
)


def _find_user(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def _role_for_new_user(db: Session, requested: UserRole) -> UserRole:
    """The first account administers the board; nobody else can self-promote to admin."""
    if db.execute(select(User.id).limit(1)).first() is None:
        return UserRole.admin
    return UserRole.scheduler if requested == UserRole.admin else requested


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(register_limit)])
def register(payload: UserCreate, db: Session = Depends(get_db)) -> UserOut:
    if _find_user(db, payload.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        role=_role_for_new_user(db, payload.role),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent sign-up for the same address.
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from exc

    db.refresh(user)
    logger.info("Registered %s as %s", user.email, user.role.value)
    return user


@router.post("/login", response_model=Token, dependencies=[Depends(login_limit)])
def login(payload: UserLogin, db: Session = Depends(get_db)) -> Token:
    user = _find_user(db, payload.email)
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    token = create_access_token(user.id, expires_delta=timedelta(minutes=settings.access_token_expire_minutes))
    return Token(access_token=token, token_type="bearer", user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)) -> dict:
    # Tokens are stateless; the client drops its copy.
    return {"success": True}
