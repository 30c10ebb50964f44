import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from blogapi.api.deps import success
from blogapi.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    get_current_user,
    get_optional_current_user,
)
from blogapi.db.database import get_session, unit_of_work
from blogapi.models.user import User
from blogapi.schemas.user import UserCreate, UserResponse, UserLogin

router = APIRouter()

logger = logging.getLogger(__name__)

def _auth_payload(user: User) -> dict:
    return {
        "user": UserResponse.model_validate(user),
        "token": create_access_token(user),
    }

@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register a new user")
def register(
    user_in: UserCreate,
    session: Annotated[Session, Depends(get_session)]
):
    """Create a new user and return an access token"""
    email = user_in.email.lower()
    result = session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use"
        )

    user = User(
        name=user_in.name,
        email=email,
        password_hash=get_password_hash(user_in.password),
        image=user_in.image
    )
    with unit_of_work(session):
        session.add(user)
    session.refresh(user)
    return success(_auth_payload(user))

@router.post("/login", summary="Log in with email and password")
def login(
    user_in: UserLogin,
    session: Annotated[Session, Depends(get_session)]
):
    """Login a user"""
    result = session.execute(
        select(User).where(User.email == user_in.email.lower())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(user_in.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return success(_auth_payload(user))

@router.post("/logout", summary="Log out")
def logout(
    current_user: Annotated[Optional[User], Depends(get_optional_current_user)]
):
    """Tokens are stateless; clients discard them"""
    if current_user is not None:
        logger.info(f"User {current_user.id} logged out")
    return success()

@router.get("/user", summary="Get the current user")
def read_current_user(
    current_user: Annotated[User, Depends(get_current_user)]
):
    """Get the current user"""
    return success(UserResponse.model_validate(current_user))
