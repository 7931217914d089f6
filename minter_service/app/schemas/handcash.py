from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ItemProps(BaseModel):
    name: str
    description: str
    image_url: str
    token_supply: int = Field(..., gt=0)


class AttributeFilter(BaseModel):
    name: str
    displayType: Literal["string", "number"]
    operation: Literal["equal", "greater", "lower"]
    value: str | float


class OrderItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    origin: str | None = None
    quantity: int | None = None
    collection_id: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "OrderItem":
        image_url = data.get("imageUrl")
        if not image_url:
            image_url = (((data.get("mediaDetails") or {}).get("image") or {}).get("url"))

        collection = data.get("collection") or {}

        return cls(
            id=data.get("id"),
            name=data.get("name"),
            description=data.get("description"),
            image_url=image_url,
            origin=data.get("origin"),
            # older order payloads report "count", newer ones "quantity"
            quantity=data.get("quantity", data.get("count")),
            collection_id=collection.get("id") or data.get("collectionId"),
        )


class MintOrder(BaseModel):
    """
    A vendor item/collection creation order, independent of which
    HandCash API revision produced it.
    """

    id: str
    status: str | None = None
    items: list[OrderItem] = []

    @property
    def is_final(self) -> bool:
        if self.status == "completed":
            return True
        return any(item.origin for item in self.items)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "MintOrder":
        return cls(
            id=str(data["id"]),
            status=data.get("status"),
            items=[OrderItem.from_response(item) for item in data.get("items") or []],
        )
