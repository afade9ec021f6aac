from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.auth.dependencies import get_current_user
from app.auth.models import User
from app.auth.schemas import UserCreate, UserLogin, UserResponse, AuthResponse
from app.auth.service import register_user, authenticate_user, get_user, issue_token

router = APIRouter()

# Session endpoints mounted under /api/auth
session_router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
        token=issue_token(user)
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(data: UserCreate, db: Session = Depends(get_db)) -> AuthResponse:
    user = register_user(db, data)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@session_router.post("/", response_model=AuthResponse)
def login(data: UserLogin, db: Session = Depends(get_db)) -> AuthResponse:
    user = authenticate_user(db, data)
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
@session_router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)) -> User:
    """Returns the profile of the authenticated caller."""
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> User:
    return get_user(db, user_id)
