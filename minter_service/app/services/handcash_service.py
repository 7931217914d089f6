import logging
from typing import Any

import httpx
from minter_service.app.core.config import settings
from minter_service.app.schemas.handcash import MintOrder

logger = logging.getLogger(__name__)

SATOSHIS_PER_BSV = 100_000_000

PAYMENT_PRODUCT = {
    "name": "Micropayment",
    "description": "Payment request created with HandCash",
    "imageUrl": "https://res.cloudinary.com/dcerwavw6/image/upload/v1731101495/bober.exe_to3xyg.png",
}

# tests swap this for an httpx.MockTransport
_transport: httpx.AsyncBaseTransport | None = None


class HandCashError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _base_url() -> str:
    return str(settings.HANDCASH_BASE_URL).rstrip("/")


def _app_url() -> str:
    return str(settings.APP_URL).rstrip("/")


def _app_headers() -> dict:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "App-Id": settings.HANDCASH_APP_ID,
        "App-Secret": settings.HANDCASH_APP_SECRET,
    }


def _user_headers(auth_token: str) -> dict:
    headers = _app_headers()
    headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def _minter_headers() -> dict:
    if not (
        settings.HANDCASH_MINTER_APP_ID
        and settings.HANDCASH_MINTER_APP_SECRET
        and settings.HANDCASH_MINTER_AUTH_TOKEN
    ):
        raise HandCashError("Missing minting credentials")

    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "App-Id": settings.HANDCASH_MINTER_APP_ID,
        "App-Secret": settings.HANDCASH_MINTER_APP_SECRET,
        "Authorization": f"Bearer {settings.HANDCASH_MINTER_AUTH_TOKEN}",
    }


async def _request(
    method: str,
    path: str,
    headers: dict,
    json: dict | None = None,
    params: dict | None = None,
) -> Any:
    url = f"{_base_url()}{path}"

    try:
        async with httpx.AsyncClient(timeout=30, transport=_transport) as client:
            resp = await client.request(method, url, json=json, params=params, headers=headers)
    except httpx.RequestError as e:
        logger.error("HandCash %s %s network error: %s", method, path, e)
        raise HandCashError(f"HandCash network error: {str(e)[:200]}") from e

    if resp.status_code < 200 or resp.status_code >= 300:
        detail = (resp.text or "")[:500]
        logger.error("HandCash %s %s failed %s: %s", method, path, resp.status_code, detail)
        raise HandCashError(
            f"HandCash error {resp.status_code}: {_error_message(resp)}",
            status_code=resp.status_code,
            body=detail,
        )

    if not resp.content:
        return {}
    return resp.json()


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or "request failed"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or resp.reason_phrase
    return resp.reason_phrase


# PROFILE

async def get_current_profile(auth_token: str) -> dict:
    return await _request(
        "GET",
        "/v3/connect/profile/currentUserProfile",
        headers=_user_headers(auth_token),
    )


# PAYMENTS

async def create_payment_request(handle: str, amount: int, user_id: int) -> dict:
    """
    Opens a payment request paying `amount` satoshis to `handle`. HandCash
    calls back /api/webhooks/handcash with `userId` echoed in customParameters.
    """
    payload = {
        "product": PAYMENT_PRODUCT,
        "instrumentCurrencyCode": "BSV",
        "denominationCurrencyCode": "BSV",
        "receivers": [
            {
                "sendAmount": amount / SATOSHIS_PER_BSV,
                "destination": handle,
            }
        ],
        "requestedUserData": ["paymail"],
        "notifications": {
            "webhook": {
                "webhookUrl": f"{_app_url()}/api/webhooks/handcash",
                "customParameters": {"userId": str(user_id)},
            },
        },
        "expirationType": "onPaymentCompleted",
        "redirectUrl": f"{_app_url()}/dashboard",
    }

    response = await _request("POST", "/v3/paymentRequests", headers=_app_headers(), json=payload)
    logger.info("HandCash payment request created: %s", response.get("id"))
    return response


# MINTING

async def create_collection_order(name: str, description: str, image_url: str) -> MintOrder:
    payload = {
        "name": name,
        "description": description,
        "mediaDetails": {
            "image": {"url": image_url, "contentType": "image/png"},
        },
    }
    data = await _request(
        "POST",
        "/v3/itemsMinter/orders/collection",
        headers=_minter_headers(),
        json=payload,
    )
    return MintOrder.from_response(data)


async def create_items_order(collection_id: str, items: list[dict]) -> MintOrder:
    data = await _request(
        "POST",
        "/v3/itemsMinter/orders/items",
        headers=_minter_headers(),
        json={"collectionId": collection_id, "items": items},
    )
    return MintOrder.from_response(data)


async def get_order(order_id: str) -> MintOrder:
    data = await _request(
        "GET",
        f"/v3/itemsMinter/orders/{order_id}",
        headers=_minter_headers(),
    )
    return MintOrder.from_response(data)


async def get_user_items() -> list[dict]:
    data = await _request("GET", "/v3/itemsMinter/items", headers=_minter_headers())
    return data.get("items", [])


# INVENTORY

async def get_inventory_page(auth_token: str, filters: dict) -> list[dict]:
    data = await _request(
        "POST",
        "/v3/connect/items/inventory",
        headers=_user_headers(auth_token),
        json=filters,
    )
    if isinstance(data, list):
        return data
    return data.get("items", [])
