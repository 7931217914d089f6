from fastapi import Depends, Request
from sqlalchemy.orm import Session

from minter_service.app.core.errors import ErrorCode, ErrorMessage, not_found, unauthorized
from minter_service.app.db.session import get_db
from minter_service.app.models.user import User

SESSION_TOKEN_KEY = "auth_token"


def require_auth_token(request: Request) -> str:
    auth_token = request.session.get(SESSION_TOKEN_KEY)
    if not auth_token:
        raise unauthorized()
    return auth_token


def get_current_user(
    auth_token: str = Depends(require_auth_token),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.auth_token == auth_token).first()
    if not user:
        raise not_found(ErrorCode.USER_NOT_FOUND, ErrorMessage.USER_NOT_FOUND)
    return user
