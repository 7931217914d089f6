from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from minter_service.app.db.base import Base
from minter_service.app.models.user import User


# COLLECTION

class Collection(Base):
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)

    # unique so concurrent creators collapse onto one row
    handcash_collection_id = Column(String, unique=True, index=True, nullable=False)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    items = relationship("Item", back_populates="collection")


# ITEM

class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    collection_id = Column(Integer, ForeignKey("collections.id"), nullable=False)

    handcash_item_id = Column(String, unique=True, index=True, nullable=False)
    origin = Column(String, nullable=True)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=False)
    token_supply = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user = relationship(User)
    collection = relationship("Collection", back_populates="items")


# SEED

class Seed(Base):
    """Placeholder written just before a mint order goes out."""

    __tablename__ = "seeds"

    id = Column(Integer, primary_key=True, index=True)

    seed = Column(Integer, nullable=False)
    image_url = Column(String, nullable=False)
    init_time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    active = Column(Boolean, default=False, nullable=False)
    token_supply = Column(Integer, default=1, nullable=False)
