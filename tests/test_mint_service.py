from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from minter_service.app.core.config import settings
from minter_service.app.models.item import Collection, Item, Seed
from minter_service.app.schemas.handcash import ItemProps, MintOrder
from minter_service.app.services import mint_service
from minter_service.app.services.handcash_service import HandCashError
from minter_service.app.services.mint_service import (
    MintTimeoutError,
    get_or_create_collection,
    make_item_props,
    mint_item,
    wait_for_order,
)

HANDCASH = "minter_service.app.services.handcash_service"


def _order(order_id="order-1", status="pending", items=None) -> MintOrder:
    return MintOrder.from_response({"id": order_id, "status": status, "items": items or []})


def _minted(item_id="hc-item-1", origin="origin_0", quantity=5) -> MintOrder:
    return _order(items=[{
        "id": item_id,
        "origin": origin,
        "name": "Seed #3",
        "description": "Generated from seed 3",
        "imageUrl": "https://img.test/3.png",
        "quantity": quantity,
    }])


@pytest.fixture()
def collection_order():
    created = _order("col-order", status="completed", items=[{"id": "hc-col-1"}])
    with patch(f"{HANDCASH}.create_collection_order", AsyncMock(return_value=created)) as m:
        yield m


class TestWaitForOrder:
    @pytest.mark.asyncio
    async def test_returns_once_origin_appears(self):
        get_order = AsyncMock(side_effect=[_order(), _order(), _minted()])

        with patch(f"{HANDCASH}.get_order", get_order):
            order = await wait_for_order("order-1", timeout=5, base_interval=0, max_interval=0)

        assert order.items[0].origin == "origin_0"
        assert get_order.await_count == 3

    @pytest.mark.asyncio
    async def test_status_completed_ends_polling(self):
        get_order = AsyncMock(side_effect=[_order(), _order(status="completed")])

        with patch(f"{HANDCASH}.get_order", get_order):
            order = await wait_for_order("order-1", timeout=5, base_interval=0, max_interval=0)

        assert order.status == "completed"

    @pytest.mark.asyncio
    async def test_times_out(self):
        with patch(f"{HANDCASH}.get_order", AsyncMock(return_value=_order())):
            with pytest.raises(MintTimeoutError) as exc:
                await wait_for_order("order-1", timeout=0.05, base_interval=0.01, max_interval=0.01)

        assert exc.value.order_id == "order-1"

    @pytest.mark.asyncio
    async def test_backoff_doubles_up_to_cap(self):
        get_order = AsyncMock(side_effect=[_order()] * 5 + [_minted()])
        sleep = AsyncMock()

        with patch(f"{HANDCASH}.get_order", get_order), \
                patch.object(mint_service.asyncio, "sleep", sleep):
            await wait_for_order(
                "order-1", timeout=1000, initial_delay=2, base_interval=1, max_interval=8,
            )

        delays = [c.args[0] for c in sleep.await_args_list]
        assert delays[0] == 2
        assert delays[1:] == pytest.approx([1, 2, 4, 8, 8])

    @pytest.mark.asyncio
    async def test_cancel_interrupts_polling(self):
        get_order = AsyncMock(return_value=_order())

        with patch(f"{HANDCASH}.get_order", get_order):
            task = asyncio.create_task(
                wait_for_order("order-1", timeout=60, base_interval=0.01, max_interval=0.01)
            )
            await asyncio.sleep(0.05)
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        assert task.cancelled()
        assert get_order.await_count >= 1


class TestMakeItemProps:
    def test_creates_active_seed(self, db):
        props = make_item_props(db, 3, 5)

        seed = db.query(Seed).one()
        assert seed.seed == 3
        assert seed.active is True
        assert seed.token_supply == 5
        assert seed.image_url == props.image_url
        assert props.name == "Seed #3"
        assert props.image_url.endswith("/3.png")


class TestGetOrCreateCollection:
    @pytest.mark.asyncio
    async def test_idempotent(self, db, collection_order):
        first = await get_or_create_collection(db)
        second = await get_or_create_collection(db)

        assert first.id == second.id
        assert first.handcash_collection_id == "hc-col-1"
        assert collection_order.await_count == 1
        assert db.query(Collection).count() == 1

    @pytest.mark.asyncio
    async def test_polls_unfinished_collection_order(self, db):
        pending = _order("col-order")
        done = _order("col-order", status="completed", items=[{"id": "hc-col-2"}])

        with patch(f"{HANDCASH}.create_collection_order", AsyncMock(return_value=pending)), \
                patch(f"{HANDCASH}.get_order", AsyncMock(return_value=done)) as get_order:
            collection = await get_or_create_collection(db)

        assert collection.handcash_collection_id == "hc-col-2"
        get_order.assert_awaited_once_with("col-order")

    @pytest.mark.asyncio
    async def test_duplicate_vendor_id_falls_back_to_existing_row(self, db, session_factory):
        created = _order("col-order", status="completed", items=[{"id": "hc-col-1"}])

        # another request inserts the same collection between our check and our insert
        def racing_create(**kwargs):
            other = session_factory()
            other.add(Collection(handcash_collection_id="hc-col-1", name="Seeds Collection"))
            other.commit()
            other.close()
            return created

        with patch(f"{HANDCASH}.create_collection_order", AsyncMock(side_effect=racing_create)):
            collection = await get_or_create_collection(db)

        assert collection.handcash_collection_id == "hc-col-1"
        assert db.query(Collection).count() == 1


class TestMintItem:
    @pytest.mark.asyncio
    async def test_persists_one_item_with_supply(self, db, user, collection_order):
        props = make_item_props(db, 3, 5)
        create = AsyncMock(return_value=_order("order-1"))

        with patch(f"{HANDCASH}.create_items_order", create), \
                patch(f"{HANDCASH}.get_order", AsyncMock(side_effect=[_order(), _minted()])):
            item = await mint_item(db, props, user, destination="hc-user-1")

        collection = await get_or_create_collection(db)

        assert db.query(Item).count() == 1
        assert item.token_supply == 5
        assert item.collection_id == collection.id
        assert item.user_id == user.id
        assert item.handcash_item_id == "hc-item-1"
        assert item.origin == "origin_0"

        collection_id, items = create.await_args.args
        assert collection_id == "hc-col-1"
        assert items[0]["quantity"] == 5
        assert items[0]["user"] == "hc-user-1"
        assert items[0]["mediaDetails"]["image"]["url"] == props.image_url

    @pytest.mark.asyncio
    async def test_deactivates_seed(self, db, user, collection_order):
        props = make_item_props(db, 3, 1)

        with patch(f"{HANDCASH}.create_items_order", AsyncMock(return_value=_minted(quantity=1))):
            await mint_item(db, props, user)

        assert db.query(Seed).one().active is False

    @pytest.mark.asyncio
    async def test_timeout_leaves_no_item(self, db, user, collection_order):
        props = ItemProps(name="x", description="y", image_url="https://img.test/x.png", token_supply=1)

        with patch(f"{HANDCASH}.create_items_order", AsyncMock(return_value=_order())), \
                patch(f"{HANDCASH}.get_order", AsyncMock(return_value=_order())), \
                patch.object(settings, "MINT_POLL_TIMEOUT", 0.05):
            with pytest.raises(MintTimeoutError):
                await mint_item(db, props, user)

        assert db.query(Item).count() == 0

    @pytest.mark.asyncio
    async def test_timeout_releases_seed(self, db, user, collection_order):
        props = make_item_props(db, 7, 1)

        with patch(f"{HANDCASH}.create_items_order", AsyncMock(return_value=_order())), \
                patch(f"{HANDCASH}.get_order", AsyncMock(return_value=_order())), \
                patch.object(settings, "MINT_POLL_TIMEOUT", 0.05):
            with pytest.raises(MintTimeoutError):
                await mint_item(db, props, user)

        db.expire_all()
        assert db.query(Seed).one().active is False
        assert db.query(Item).count() == 0

    @pytest.mark.asyncio
    async def test_vendor_error_releases_seed(self, db, user, collection_order):
        props = make_item_props(db, 8, 1)

        with patch(f"{HANDCASH}.create_items_order", AsyncMock(side_effect=HandCashError("boom", 502))):
            with pytest.raises(HandCashError):
                await mint_item(db, props, user)

        db.expire_all()
        assert db.query(Seed).one().active is False
