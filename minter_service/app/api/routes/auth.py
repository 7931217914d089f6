import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from minter_service.app.core.auth import SESSION_TOKEN_KEY
from minter_service.app.db.session import get_db
from minter_service.app.models.user import User
from minter_service.app.services import handcash_service
from minter_service.app.services.handcash_service import HandCashError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _upsert_user(db: Session, handle: str, auth_token: str) -> User:
    user = db.query(User).filter_by(handle=handle).first()
    if user:
        user.auth_token = auth_token
        db.commit()
        return user

    user = User(handle=handle, auth_token=auth_token)
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        # same handle logged in twice at once
        db.rollback()
        user = db.query(User).filter_by(handle=handle).first()
        user.auth_token = auth_token
        db.commit()

    return user


@router.get("/auth")
async def handcash_auth(
    request: Request,
    auth_token: str | None = Query(None, alias="authToken"),
    db: Session = Depends(get_db),
):
    """HandCash redirects here with ?authToken= after the user grants access."""
    if not auth_token:
        return RedirectResponse("/?error=no_auth_token", status_code=302)

    try:
        profile = await handcash_service.get_current_profile(auth_token)
        handle = profile["publicProfile"]["handle"]
    except (HandCashError, KeyError, TypeError) as e:
        logger.warning("HandCash auth failed: %s", e)
        return RedirectResponse("/?error=auth_failed", status_code=302)

    _upsert_user(db, handle, auth_token)

    request.session[SESSION_TOKEN_KEY] = auth_token
    logger.info("User %s connected", handle)

    return RedirectResponse("/dashboard", status_code=302)


@router.post("/api/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out successfully"}
