from pydantic import BaseModel, Field


class PaymentRequestCreate(BaseModel):
    amount: int = Field(1, gt=0, description="Amount in satoshis")


class HandCashWebhook(BaseModel):
    """Only the fields we act on; the raw body is stored as-is."""

    paymentRequestId: str
    appSecret: str | None = None
    status: str | None = None
    transactionId: str | None = None
    userData: dict | None = None
    customParameters: dict | None = None
