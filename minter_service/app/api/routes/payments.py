from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from minter_service.app.core.auth import get_current_user
from minter_service.app.db.session import get_db
from minter_service.app.models.payment import PaymentRequest, PaymentStatus
from minter_service.app.models.user import User
from minter_service.app.schemas.payment import PaymentRequestCreate
from minter_service.app.services import handcash_service

router = APIRouter(prefix="/api/payment-requests", tags=["Payments"])


def _isoformat(value):
    return value.isoformat() if value else None


def serialize_payment_request(payment: PaymentRequest) -> dict:
    return {
        "id": payment.id,
        "handcashRequestId": payment.handcash_request_id,
        "userId": payment.user_id,
        "amount": payment.amount,
        "status": payment.status,
        "paymentRequestUrl": payment.payment_request_url,
        "qrCodeUrl": payment.qr_code_url,
        "createdAt": _isoformat(payment.created_at),
        "updatedAt": _isoformat(payment.updated_at),
        "webhookEvents": [
            {
                "id": event.id,
                "eventType": event.event_type,
                "payload": event.payload,
                "createdAt": _isoformat(event.created_at),
            }
            for event in payment.webhook_events
        ],
    }


@router.post("")
async def create_request(
    data: PaymentRequestCreate | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    data = data or PaymentRequestCreate()

    response = await handcash_service.create_payment_request(user.handle, data.amount, user.id)

    payment = PaymentRequest(
        handcash_request_id=response["id"],
        user_id=user.id,
        amount=data.amount,
        status=PaymentStatus.PENDING,
        payment_request_url=response["paymentRequestUrl"],
        qr_code_url=response["paymentRequestQrCodeUrl"],
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)

    return {
        "id": payment.id,
        "paymentUrl": payment.payment_request_url,
        "qrCodeUrl": payment.qr_code_url,
    }


@router.get("")
def list_requests(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    payments = (
        db.query(PaymentRequest)
        .options(selectinload(PaymentRequest.webhook_events))
        .filter(PaymentRequest.user_id == user.id)
        .order_by(PaymentRequest.created_at.desc(), PaymentRequest.id.desc())
        .all()
    )
    return [serialize_payment_request(p) for p in payments]
