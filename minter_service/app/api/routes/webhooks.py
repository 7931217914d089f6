import hmac
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from minter_service.app.core.config import settings
from minter_service.app.core.errors import (
    ErrorCode,
    ErrorMessage,
    bad_request,
    forbidden,
    not_found,
)
from minter_service.app.db.session import SessionLocal, get_db
from minter_service.app.models.payment import PaymentRequest, PaymentStatus, WebhookEvent
from minter_service.app.models.user import User
from minter_service.app.schemas.payment import HandCashWebhook
from minter_service.app.services.mint_service import make_item_props, mint_item

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])

DEFAULT_MINT_SEED = 0
DEFAULT_MINT_SUPPLY = 1


def verify_app_secret(app_secret: str | None) -> bool:
    if not app_secret or not settings.HANDCASH_APP_SECRET:
        return False
    return hmac.compare_digest(app_secret.encode(), settings.HANDCASH_APP_SECRET.encode())


def derive_event_type(data: HandCashWebhook) -> str:
    if data.status:
        return data.status
    return PaymentStatus.COMPLETED if data.transactionId else PaymentStatus.PENDING


async def mint_default_item(user_id: int, destination: str | None):
    db: Session = SessionLocal()
    try:
        user = db.query(User).filter_by(id=user_id).first()
        if not user:
            logger.warning("Webhook mint skipped, user %s is gone", user_id)
            return
        props = make_item_props(db, DEFAULT_MINT_SEED, DEFAULT_MINT_SUPPLY)
        await mint_item(db, props, user, destination)
    except Exception:
        logger.exception("Webhook mint failed for user %s", user_id)
    finally:
        db.close()


@router.post("/handcash")
async def handcash_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    try:
        payload = await request.json()
    except ValueError:
        raise bad_request(ErrorCode.INVALID_PAYLOAD, "Invalid JSON payload")

    if not isinstance(payload, dict) or not verify_app_secret(payload.get("appSecret")):
        raise forbidden(ErrorCode.WEBHOOK_SIGNATURE_INVALID, ErrorMessage.WEBHOOK_SIGNATURE_INVALID)

    try:
        data = HandCashWebhook.model_validate(payload)
    except ValidationError as e:
        raise bad_request(
            ErrorCode.INVALID_PAYLOAD,
            "Invalid webhook payload",
            {"errors": e.errors(include_url=False, include_context=False)},
        )

    logger.info("HandCash webhook for payment request %s", data.paymentRequestId)

    payment = (
        db.query(PaymentRequest)
        .filter_by(handcash_request_id=data.paymentRequestId)
        .with_for_update()
        .first()
    )
    if not payment:
        raise not_found(ErrorCode.PAYMENT_REQUEST_NOT_FOUND, ErrorMessage.PAYMENT_REQUEST_NOT_FOUND)

    event_type = derive_event_type(data)

    db.add(WebhookEvent(
        payment_request_id=payment.id,
        event_type=event_type,
        payload=payload,
    ))

    was_completed = payment.status == PaymentStatus.COMPLETED

    # a completed payment stays completed, late or replayed events only get logged
    if not was_completed:
        payment.status = event_type

    db.commit()

    # mint once, on the transition to completed
    if settings.WEBHOOK_MINT_ENABLED and event_type == PaymentStatus.COMPLETED and not was_completed:
        destination = (data.userData or {}).get("id")
        background_tasks.add_task(mint_default_item, payment.user_id, destination)

    return {"message": "Webhook processed successfully"}
