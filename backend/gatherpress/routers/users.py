"""User API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gatherpress.config import settings
from gatherpress.database import get_db
from gatherpress.exceptions import CacheError
from gatherpress.models.user import LeadershipRole, User
from gatherpress.schemas.user import UserCreate, UserOut, UserRoleUpdate
from gatherpress.services.cache import get_aggregate_cache
from gatherpress.services.interfaces import AggregateCache
from gatherpress.services.ordering import DEFAULT_ROLE

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_out(user: User) -> UserOut:
    return UserOut(
        user_id=user.user_id,
        user_login=user.user_login,
        display_name=user.display_name,
        email=user.email,
        role=user.leadership.role if user.leadership else DEFAULT_ROLE,
        created_at=user.created_at,
    )


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new user."""
    if db.query(User).filter(User.user_login == payload.user_login).first():
        raise HTTPException(status_code=409, detail="Login already taken")
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.display_name)
    return _to_out(user)


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return [_to_out(user) for user in db.query(User).order_by(User.user_id).all()]


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _to_out(user)


@router.put("/{user_id}/role", response_model=UserOut)
def set_user_role(
    user_id: int,
    payload: UserRoleUpdate,
    db: Session = Depends(get_db),
    cache: AggregateCache = Depends(get_aggregate_cache),
):
    """Assign or clear a user's leadership role."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if payload.role is not None and payload.role not in settings.leadership_roles:
        raise HTTPException(status_code=400, detail=f"Unknown role: {payload.role}")

    if payload.role is None:
        user.leadership = None
    elif user.leadership:
        user.leadership.role = payload.role
    else:
        user.leadership = LeadershipRole(role=payload.role)
    db.commit()
    db.refresh(user)
    # Role labels are part of every cached response view.
    try:
        cache.clear()
    except CacheError:
        logger.warning("Response cache unavailable; cached role labels may be stale")
    logger.info("Set role of user %s to %s", user_id, payload.role or DEFAULT_ROLE)
    return _to_out(user)
