from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import AuthenticationError
from app.core.security import decode_access_token
from app.auth.models import User

# auto_error is off so a missing header goes through the same 401 path as a bad token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/users/login", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolves the caller from the `Authorization: Bearer <token>` header.
    """
    if not token:
        raise AuthenticationError("not authenticated")

    user_id = decode_access_token(token)

    user = db.get(User, user_id)
    if not user:
        raise AuthenticationError("not authenticated")

    return user
