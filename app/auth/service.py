"""
User lifecycle: registration, credential checks and profile lookup.
"""
from sqlalchemy.orm import Session
from app.auth.models import User
from app.auth.schemas import UserCreate, UserLogin
from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.core.logger import logger, audit_log
from app.core.security import get_password_hash, verify_password, create_access_token


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": user.id, "name": user.name})


def register_user(db: Session, data: UserCreate) -> User:
    existing = db.query(User).filter(User.email == data.email).first()
    if existing:
        raise ConflictError("Email already taken")

    user = User(
        name=data.name,
        email=data.email,
        hashed_password=get_password_hash(data.password)
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    audit_log(action="user_register", user=user.id, resource=f"user_id={user.id}")
    logger.info(f"User registered: id={user.id}")
    return user


def authenticate_user(db: Session, data: UserLogin) -> User:
    """
    Checks credentials.
    An unknown email is reported as not found, a wrong password as unauthenticated.
    """
    user = db.query(User).filter(User.email == data.email).first()
    if not user:
        raise NotFoundError("Email does not exist")
    if not verify_password(data.password, user.hashed_password):
        logger.info(f"Failed login attempt: user_id={user.id}")
        raise AuthenticationError("Invalid password")
    return user


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
