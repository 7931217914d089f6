import asyncio
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from minter_service.app.core.config import settings
from minter_service.app.models.item import Collection, Item, Seed
from minter_service.app.models.user import User
from minter_service.app.schemas.handcash import ItemProps, MintOrder, OrderItem
from minter_service.app.services import handcash_service
from minter_service.app.services.handcash_service import HandCashError

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = {
    "name": "Seeds Collection",
    "description": "Collection holding every item minted by this app",
    "image_url": "https://res.cloudinary.com/dcerwavw6/image/upload/v1731101495/bober.exe_to3xyg.png",
}

ITEM_ATTRIBUTES = [
    {"name": "Edition", "value": "First", "displayType": "string"},
    {"name": "Generation", "value": "1", "displayType": "string"},
]


class MintTimeoutError(TimeoutError):
    def __init__(self, order_id: str, timeout: float):
        super().__init__(f"Order {order_id} not final after {timeout:.0f}s")
        self.order_id = order_id
        self.timeout = timeout


async def wait_for_order(
    order_id: str,
    timeout: float | None = None,
    initial_delay: float | None = None,
    base_interval: float | None = None,
    max_interval: float | None = None,
) -> MintOrder:
    """
    Polls a HandCash order until it is final.

    Sleeps double after every non-final poll, capped at max_interval, and
    gives up with MintTimeoutError once `timeout` seconds have passed.
    """
    timeout = settings.MINT_POLL_TIMEOUT if timeout is None else timeout
    initial_delay = settings.MINT_POLL_INITIAL_DELAY if initial_delay is None else initial_delay
    base_interval = settings.MINT_POLL_BASE_INTERVAL if base_interval is None else base_interval
    max_interval = settings.MINT_POLL_MAX_INTERVAL if max_interval is None else max_interval

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    if initial_delay > 0:
        await asyncio.sleep(initial_delay)

    attempt = 0
    while True:
        order = await handcash_service.get_order(order_id)
        if order.is_final:
            logger.info("Order %s final after %d polls", order_id, attempt + 1)
            return order

        remaining = deadline - loop.time()
        if remaining <= 0:
            logger.warning("Order %s still %s after %.1fs", order_id, order.status, timeout)
            raise MintTimeoutError(order_id, timeout)

        delay = min(base_interval * (2 ** attempt), max_interval, remaining)
        logger.debug("Order %s status=%s, next poll in %.2fs", order_id, order.status, delay)
        await asyncio.sleep(delay)
        attempt += 1


def make_item_props(db: Session, seed: int, token_supply: int) -> ItemProps:
    image_url = f"{str(settings.SEED_IMAGE_BASE_URL).rstrip('/')}/{seed}.png"

    db.add(Seed(seed=seed, image_url=image_url, active=True, token_supply=token_supply))
    db.commit()

    return ItemProps(
        name=f"Seed #{seed}",
        description=f"Generated from seed {seed}",
        image_url=image_url,
        token_supply=token_supply,
    )


async def get_or_create_collection(db: Session) -> Collection:
    existing = db.query(Collection).order_by(Collection.id).first()
    if existing:
        return existing

    order = await handcash_service.create_collection_order(**DEFAULT_COLLECTION)
    if not order.is_final:
        order = await wait_for_order(order.id)

    handcash_collection_id = order.items[0].id if order.items and order.items[0].id else order.id

    collection = Collection(
        handcash_collection_id=handcash_collection_id,
        name=DEFAULT_COLLECTION["name"],
        description=DEFAULT_COLLECTION["description"],
        image_url=DEFAULT_COLLECTION["image_url"],
    )

    try:
        db.add(collection)
        db.commit()
        logger.info("Created collection %s", handcash_collection_id)
    except IntegrityError:
        db.rollback()

    # oldest row wins when two requests created one at the same time
    return db.query(Collection).order_by(Collection.id).first()


def release_seed(db: Session, image_url: str):
    db.query(Seed).filter(
        Seed.image_url == image_url,
        Seed.active.is_(True),
    ).update({"active": False}, synchronize_session=False)


async def mint_item(
    db: Session,
    props: ItemProps,
    user: User,
    destination: str | None = None,
) -> Item:
    try:
        collection = await get_or_create_collection(db)
        minted = await _submit_items_order(collection, props, user, destination)
    except Exception:
        # a failed mint must not leave its seed active
        db.rollback()
        release_seed(db, props.image_url)
        db.commit()
        raise

    item = Item(
        user_id=user.id,
        collection_id=collection.id,
        handcash_item_id=minted.id,
        origin=minted.origin,
        name=minted.name or props.name,
        description=minted.description or props.description,
        image_url=minted.image_url or props.image_url,
        token_supply=props.token_supply,
    )
    db.add(item)
    release_seed(db, props.image_url)

    db.commit()
    db.refresh(item)

    logger.info("Minted item %s (%s) for user %s", item.handcash_item_id, item.name, user.handle)
    return item


async def _submit_items_order(
    collection: Collection,
    props: ItemProps,
    user: User,
    destination: str | None,
) -> OrderItem:
    item_payload = {
        "name": props.name,
        "description": props.description,
        "rarity": "Common",
        "attributes": ITEM_ATTRIBUTES,
        "mediaDetails": {
            "image": {"url": props.image_url, "contentType": "image/png"},
        },
        "quantity": props.token_supply,
    }
    if destination:
        item_payload["user"] = destination

    order = await handcash_service.create_items_order(
        collection.handcash_collection_id,
        [item_payload],
    )
    logger.info("Item order %s submitted for user %s", order.id, user.handle)

    if not order.is_final:
        order = await wait_for_order(order.id)

    if not order.items or not order.items[0].id:
        raise HandCashError(f"Order {order.id} finished without an item")

    return order.items[0]
