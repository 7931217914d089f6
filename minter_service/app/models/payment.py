from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from minter_service.app.db.base import Base
from minter_service.app.models.user import User


class PaymentStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


class PaymentRequest(Base):
    __tablename__ = "payment_requests"

    id = Column(Integer, primary_key=True, index=True)

    handcash_request_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    amount = Column(Integer, nullable=False)  # satoshis
    status = Column(String, default=PaymentStatus.PENDING, nullable=False)

    payment_request_url = Column(String, nullable=False)
    qr_code_url = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user = relationship(User)
    webhook_events = relationship(
        "WebhookEvent",
        back_populates="payment_request",
        order_by="WebhookEvent.id",
    )


class WebhookEvent(Base):
    """Raw vendor callback. Rows are only ever inserted."""

    __tablename__ = "webhook_events"

    id = Column(Integer, primary_key=True, index=True)

    payment_request_id = Column(Integer, ForeignKey("payment_requests.id"), nullable=True)
    event_type = Column(String, nullable=False)
    payload = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    payment_request = relationship("PaymentRequest", back_populates="webhook_events")
