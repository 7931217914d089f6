import logging

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from minter_service.app.api.routes import auth, items, payments, profile, webhooks
from minter_service.app.core.config import settings
from minter_service.app.core.exceptions import AppException
from minter_service.app.core.handlers import (
    app_exception_handler,
    handcash_error_handler,
    mint_timeout_handler,
    unhandled_exception_handler,
)
from minter_service.app.db.base import Base
from minter_service.app.db.session import engine
from minter_service.app.services.handcash_service import HandCashError
from minter_service.app.services.mint_service import MintTimeoutError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="HandCash Service", version="1.0.0")

Base.metadata.create_all(bind=engine)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_MAX_AGE,
    https_only=settings.SESSION_HTTPS_ONLY,
    same_site="lax",
)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HandCashError, handcash_error_handler)
app.add_exception_handler(MintTimeoutError, mint_timeout_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(payments.router)
app.include_router(items.router)
app.include_router(webhooks.router)


@app.get("/")
def root():
    return {"status": "healthy", "version": "1.0.0"}
