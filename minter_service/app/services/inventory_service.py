import logging

from minter_service.app.core.config import settings
from minter_service.app.models.item import Collection
from minter_service.app.services import handcash_service

logger = logging.getLogger(__name__)


async def fetch_inventory(
    auth_token: str,
    collection_id: str | None = None,
    search: str | None = None,
    attributes: list[dict] | None = None,
) -> list[dict]:
    """
    Pulls the user's whole HandCash inventory, one page at a time.

    A page shorter than INVENTORY_PAGE_SIZE is the last one. Filters are
    handed to HandCash untouched.
    """
    page_size = settings.INVENTORY_PAGE_SIZE
    offset = 0
    items: list[dict] = []

    while True:
        filters = {
            "from": offset,
            "to": offset + page_size,
            "fetchAttributes": True,
        }
        if collection_id:
            filters["collectionId"] = collection_id
        if search:
            filters["searchString"] = search
        if attributes:
            filters["attributes"] = attributes

        page = await handcash_service.get_inventory_page(auth_token, filters)
        items.extend(page)

        if len(page) < page_size:
            break
        offset += page_size

    logger.info("Fetched %d inventory items", len(items))
    return items


def collections_in_inventory(collections: list[Collection], inventory: list[dict]) -> list[dict]:
    counts: dict[str, int] = {}
    for item in inventory:
        collection_id = (item.get("collection") or {}).get("id")
        if collection_id:
            counts[collection_id] = counts.get(collection_id, 0) + 1

    return [
        {
            "id": c.id,
            "handcashCollectionId": c.handcash_collection_id,
            "name": c.name,
            "description": c.description,
            "imageUrl": c.image_url,
            "createdAt": c.created_at.isoformat() if c.created_at else None,
            "itemCount": counts[c.handcash_collection_id],
        }
        for c in collections
        if c.handcash_collection_id in counts
    ]
