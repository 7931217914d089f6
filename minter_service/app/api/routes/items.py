import asyncio
import json

from fastapi import APIRouter, Depends, Query
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from minter_service.app.core.auth import get_current_user, require_auth_token
from minter_service.app.core.errors import ErrorCode, ErrorMessage, bad_request
from minter_service.app.db.session import get_db
from minter_service.app.models.item import Collection, Item
from minter_service.app.models.user import User
from minter_service.app.schemas.handcash import AttributeFilter
from minter_service.app.schemas.item import ItemCreate
from minter_service.app.services import handcash_service
from minter_service.app.services.inventory_service import collections_in_inventory, fetch_inventory
from minter_service.app.services.mint_service import make_item_props, mint_item

router = APIRouter(prefix="/api", tags=["Items"])

_attribute_filters = TypeAdapter(list[AttributeFilter])


def serialize_item(item: Item) -> dict:
    return {
        "id": item.id,
        "userId": item.user_id,
        "collectionId": item.collection_id,
        "handcashItemId": item.handcash_item_id,
        "origin": item.origin,
        "name": item.name,
        "description": item.description,
        "imageUrl": item.image_url,
        "tokenSupply": item.token_supply,
        "createdAt": item.created_at.isoformat() if item.created_at else None,
    }


def parse_attributes(raw: str | None) -> list[dict] | None:
    if not raw:
        return None
    try:
        attributes = json.loads(raw)
        _attribute_filters.validate_python(attributes)
    except (ValueError, ValidationError):
        raise bad_request(ErrorCode.INVALID_ATTRIBUTES, ErrorMessage.INVALID_ATTRIBUTES)
    return attributes


# session helpers, called through asyncio.to_thread
def local_item_ids(db: Session, user_id: int) -> dict[str, int]:
    db_items = (
        db.query(Item)
        .filter(Item.user_id == user_id)
        .order_by(Item.created_at.desc())
        .all()
    )
    return {item.handcash_item_id: item.id for item in db_items}


def list_all_collections(db: Session) -> list[Collection]:
    return db.query(Collection).order_by(Collection.created_at.desc()).all()


@router.post("/items")
async def create_item(
    data: ItemCreate,
    auth_token: str = Depends(require_auth_token),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    props = await asyncio.to_thread(make_item_props, db, data.seed, data.tokenSupply)

    profile = await handcash_service.get_current_profile(auth_token)
    destination = (profile.get("publicProfile") or {}).get("id")

    item = await mint_item(db, props, user, destination)
    return serialize_item(item)


@router.get("/items")
async def list_items(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    handcash_items = await handcash_service.get_user_items()
    db_ids = await asyncio.to_thread(local_item_ids, db, user.id)

    return [
        {**handcash_item, "dbId": db_ids.get(handcash_item.get("id"))}
        for handcash_item in handcash_items
    ]


@router.get("/collections")
async def list_collections(
    auth_token: str = Depends(require_auth_token),
    db: Session = Depends(get_db),
):
    collections = await asyncio.to_thread(list_all_collections, db)
    inventory = await fetch_inventory(auth_token)
    return collections_in_inventory(collections, inventory)


@router.get("/inventory")
async def inventory(
    collection_id: str | None = Query(None, alias="collectionId"),
    search: str | None = Query(None),
    attributes: str | None = Query(None),
    auth_token: str = Depends(require_auth_token),
):
    return await fetch_inventory(
        auth_token,
        collection_id=collection_id,
        search=search,
        attributes=parse_attributes(attributes),
    )
